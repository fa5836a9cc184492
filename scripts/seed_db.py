"""
Database seed script.

Creates the store indexes, an admin account and a few starter
categories. Safe to run repeatedly.

Usage:
    python -m scripts.seed_db --admin-email admin@example.com --admin-password secret123
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import settings
from core.storage import BaseStore, UserRole, create_store
from services import AccountService, CategoryService
from services.errors import Conflict


DEFAULT_CATEGORIES = ("Electronics", "Books", "Clothing")


async def seed_database(
    admin_email: str,
    admin_password: str,
    admin_name: str = "Admin",
    categories: Sequence[str] = DEFAULT_CATEGORIES,
    store: Optional[BaseStore] = None,
) -> None:
    """
    Set up indexes, ensure an admin user and create starter categories.

    A store passed in is left open; otherwise one is built from settings.
    """

    owns_store = store is None
    if store is None:
        print(f"Storage backend: {settings.storage_backend}")
        store = create_store(settings)
    await store.setup()

    try:
        accounts = AccountService(store)
        try:
            await accounts.register(
                name=admin_name,
                email=admin_email,
                password=admin_password,
                phone="-",
                address="-",
                answer=admin_name,
            )
            print(f"Admin registered: {admin_email}")
        except Conflict:
            print(f"Admin already registered: {admin_email}")
        await accounts.set_role(admin_email, UserRole.ADMIN)

        category_service = CategoryService(store)
        for name in categories:
            try:
                await category_service.create(name)
                print(f"Category created: {name}")
            except Conflict:
                print(f"Category already exists: {name}")

        print("Seed complete!")

    except Exception as e:
        print(f"Error seeding database: {e}")
        raise

    finally:
        if owns_store:
            await store.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the storefront database")
    parser.add_argument("--admin-email", default=os.environ.get("ADMIN_EMAIL", "admin@example.com"))
    parser.add_argument("--admin-password", default=os.environ.get("ADMIN_PASSWORD"))
    parser.add_argument("--admin-name", default="Admin")
    parser.add_argument(
        "--category",
        action="append",
        dest="categories",
        help="Starter category (repeatable)",
    )
    args = parser.parse_args()

    if not args.admin_password:
        parser.error("--admin-password (or ADMIN_PASSWORD) is required")

    asyncio.run(
        seed_database(
            admin_email=args.admin_email,
            admin_password=args.admin_password,
            admin_name=args.admin_name,
            categories=args.categories or DEFAULT_CATEGORIES,
        )
    )


if __name__ == "__main__":
    main()

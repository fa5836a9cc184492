"""
Tests for the database seed script.
"""

import pytest

from core.security import verify_password
from core.storage import UserRole
from core.storage.memory import MemoryStore
from scripts.seed_db import DEFAULT_CATEGORIES, seed_database


@pytest.mark.asyncio
async def test_seed_is_repeatable():
    store = MemoryStore()

    await seed_database("admin@example.com", "secret123", store=store)
    await seed_database("admin@example.com", "secret123", categories=["Toys"], store=store)

    admin = await store.users.get_by_email("admin@example.com")
    assert admin.role == UserRole.ADMIN
    assert verify_password("secret123", admin.password)

    names = [c.name for c in await store.categories.list_all()]
    assert names == [*DEFAULT_CATEGORIES, "Toys"]
    assert DEFAULT_CATEGORIES == ("Electronics", "Books", "Clothing")

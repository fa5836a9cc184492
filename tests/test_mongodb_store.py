"""
Tests for the MongoDB storage backend.

Runs the same contract as the in-memory tests against a throwaway database.
Skipped unless MONGODB_URL points at a reachable server.
"""

import os
import uuid

import pytest
import pytest_asyncio
from pymongo.errors import PyMongoError

from core.storage import (
    CategoryRecord,
    DuplicateKeyError,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    UserRecord,
)
from core.storage.base import new_id
from core.storage.mongodb import MongoDBStore


pytestmark = pytest.mark.skipif(
    "MONGODB_URL" not in os.environ, reason="MONGODB_URL not set"
)


@pytest_asyncio.fixture
async def store():
    mongo = MongoDBStore(
        os.environ.get("MONGODB_URL", ""),
        database_name=f"storefront_test_{uuid.uuid4().hex[:8]}",
        serverSelectionTimeoutMS=1000,
    )
    try:
        await mongo.setup()
    except PyMongoError as e:
        await mongo.close()
        pytest.skip(f"MongoDB not reachable: {e}")

    yield mongo

    await mongo.database.client.drop_database(mongo.database.name)
    await mongo.close()


def make_product(category_id: str, name: str, price: float = 10.0, **extra) -> ProductRecord:
    return ProductRecord(
        name=name,
        slug=name.lower().replace(" ", "-"),
        description=extra.pop("description", f"About {name}"),
        price=price,
        category_id=category_id,
        quantity=extra.pop("quantity", 1),
        **extra,
    )


@pytest.mark.asyncio
async def test_ping(store):
    assert await store.ping()


@pytest.mark.asyncio
async def test_user_email_is_unique(store):
    user = UserRecord(
        name="Jane", email="jane@example.com", password="x", phone="1", address="a", answer="y"
    )
    await store.users.create(user)

    with pytest.raises(DuplicateKeyError):
        await store.users.create(
            UserRecord(name="J", email="jane@example.com", password="x", phone="1", address="a", answer="y")
        )

    assert (await store.users.get_by_email("jane@example.com")).id == user.id
    updated = await store.users.update(user.id, {"name": "Jane Doe"})
    assert updated.name == "Jane Doe"
    assert await store.users.get("not-an-id") is None


@pytest.mark.asyncio
async def test_category_name_and_slug_are_unique(store):
    books = await store.categories.create(CategoryRecord(name="Books", slug="books"))
    music = await store.categories.create(CategoryRecord(name="Music", slug="music"))

    with pytest.raises(DuplicateKeyError):
        await store.categories.create(CategoryRecord(name="Books", slug="books-2"))
    with pytest.raises(DuplicateKeyError):
        await store.categories.create(CategoryRecord(name="books", slug="books"))
    with pytest.raises(DuplicateKeyError):
        await store.categories.update(music.id, name="BOOKS", slug="books")

    assert [c.name for c in await store.categories.list_all()] == ["Books", "Music"]
    assert (await store.categories.get_by_slug("books")).id == books.id
    assert await store.categories.update("not-an-id", name="X", slug="x") is None
    assert not await store.categories.delete("not-an-id")


@pytest.mark.asyncio
async def test_listing_hides_photo(store):
    category_id = new_id()
    product = await store.products.create(
        make_product(category_id, "Camera", photo=b"\x89PNG", photo_content_type="image/png")
    )

    assert product.photo is None
    assert product.has_photo
    assert product.category_id == category_id
    assert await store.products.get_photo(product.id) == (b"\x89PNG", "image/png")

    plain = await store.products.create(make_product(category_id, "Tripod"))
    assert not plain.has_photo
    assert await store.products.get_photo(plain.id) is None
    assert await store.products.get_photo("not-an-id") is None


@pytest.mark.asyncio
async def test_list_latest_newest_first_with_paging(store):
    category_id = new_id()
    for i in range(5):
        await store.products.create(make_product(category_id, f"Item {i}"))

    first_page = await store.products.list_latest(limit=2)
    second_page = await store.products.list_latest(skip=2, limit=2)

    assert [p.name for p in first_page] == ["Item 4", "Item 3"]
    assert [p.name for p in second_page] == ["Item 2", "Item 1"]
    assert len(await store.products.list_latest()) == 5


@pytest.mark.asyncio
async def test_filter_by_category_and_inclusive_price(store):
    c1, c2 = new_id(), new_id()
    await store.products.create(make_product(c1, "Cheap", price=5))
    await store.products.create(make_product(c1, "Edge", price=20))
    await store.products.create(make_product(c2, "Other", price=10))

    assert {p.name for p in await store.products.filter(category_ids=[c1])} == {"Cheap", "Edge"}
    assert {p.name for p in await store.products.filter(price_range=(10, 20))} == {"Edge", "Other"}

    both = await store.products.filter(category_ids=[c1], price_range=(0, 10))
    assert [p.name for p in both] == ["Cheap"]


@pytest.mark.asyncio
async def test_search_is_literal_and_case_insensitive(store):
    category_id = new_id()
    await store.products.create(make_product(category_id, "USB Cable", description="Braided (2m)"))
    await store.products.create(make_product(category_id, "Lamp", description="Warm usb light"))

    assert {p.name for p in await store.products.search("usb")} == {"USB Cable", "Lamp"}
    assert [p.name for p in await store.products.search("(2m)")] == ["USB Cable"]
    assert await store.products.search(".*") == []


@pytest.mark.asyncio
async def test_slug_exists_and_related(store):
    category_id = new_id()
    products = [await store.products.create(make_product(category_id, f"P{i}")) for i in range(5)]

    assert await store.products.slug_exists("p0")
    assert not await store.products.slug_exists("p0", exclude_id=products[0].id)

    related = await store.products.list_by_category(category_id, exclude_id=products[0].id, limit=3)
    assert len(related) == 3
    assert products[0].id not in {p.id for p in related}
    assert await store.products.count(category_id=category_id) == 5
    assert await store.products.count(category_id=new_id()) == 0


@pytest.mark.asyncio
async def test_order_status_update(store):
    buyer = new_id()
    first = await store.orders.create(OrderRecord(buyer_id=buyer, product_ids=[new_id()]))
    second = await store.orders.create(OrderRecord(buyer_id=new_id(), product_ids=[new_id()]))

    assert [o.id for o in await store.orders.list_all()] == [second.id, first.id]
    assert [o.id for o in await store.orders.list_by_buyer(buyer)] == [first.id]

    updated = await store.orders.update_status(first.id, OrderStatus.SHIPPED)
    assert updated.status == OrderStatus.SHIPPED
    assert await store.orders.update_status("not-an-id", OrderStatus.SHIPPED) is None

"""
Tests for the in-memory storage backend.

The same query semantics are expected from the MongoDB backend.
"""

import pytest

from core.storage import (
    CategoryRecord,
    DuplicateKeyError,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    UserRecord,
)
from core.storage.memory import MemoryStore, _Collection


@pytest.fixture
def store():
    return MemoryStore()


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
async def test_user_email_is_unique(store):
    user = UserRecord(
        name="Jane", email="jane@example.com", password="x", phone="1", address="a", answer="y"
    )
    await store.users.create(user)

    with pytest.raises(DuplicateKeyError):
        await store.users.create(
            UserRecord(name="J", email="jane@example.com", password="x", phone="1", address="a", answer="y")
        )

    updated = await store.users.update(user.id, {"name": "Jane Doe"})
    assert updated.name == "Jane Doe"
    assert updated.updated_at >= user.updated_at


@pytest.mark.asyncio
async def test_category_name_is_unique(store):
    books = await store.categories.create(CategoryRecord(name="Books", slug="books"))
    music = await store.categories.create(CategoryRecord(name="Music", slug="music"))

    with pytest.raises(DuplicateKeyError):
        await store.categories.create(CategoryRecord(name="Books", slug="books"))
    with pytest.raises(DuplicateKeyError):
        await store.categories.update(music.id, name="Books", slug="books")

    assert [c.name for c in await store.categories.list_all()] == ["Books", "Music"]
    assert (await store.categories.get_by_slug("books")).id == books.id


@pytest.mark.asyncio
async def test_category_slug_is_unique(store):
    await store.categories.create(CategoryRecord(name="Books", slug="books"))
    music = await store.categories.create(CategoryRecord(name="Music", slug="music"))

    with pytest.raises(DuplicateKeyError):
        await store.categories.create(CategoryRecord(name="books", slug="books"))
    with pytest.raises(DuplicateKeyError):
        await store.categories.update(music.id, name="BOOKS", slug="books")

    renamed = await store.categories.update(music.id, name="Music", slug="music")
    assert renamed.id == music.id
    assert len(await store.categories.list_all()) == 2


@pytest.mark.asyncio
async def test_listing_hides_photo(store):
    product = await store.products.create(
        make_product("c1", "Camera", photo=b"\x89PNG", photo_content_type="image/png")
    )

    assert product.photo is None
    assert product.has_photo
    assert await store.products.get_photo(product.id) == (b"\x89PNG", "image/png")

    plain = await store.products.create(make_product("c1", "Tripod"))
    assert not plain.has_photo
    assert await store.products.get_photo(plain.id) is None


@pytest.mark.asyncio
async def test_list_latest_newest_first_with_paging(store):
    for i in range(5):
        await store.products.create(make_product("c1", f"Item {i}"))

    first_page = await store.products.list_latest(limit=2)
    second_page = await store.products.list_latest(skip=2, limit=2)
    everything = await store.products.list_latest()

    assert [p.name for p in first_page] == ["Item 4", "Item 3"]
    assert [p.name for p in second_page] == ["Item 2", "Item 1"]
    assert len(everything) == 5


@pytest.mark.asyncio
async def test_filter_by_category_and_inclusive_price(store):
    await store.products.create(make_product("c1", "Cheap", price=5))
    await store.products.create(make_product("c1", "Edge", price=20))
    await store.products.create(make_product("c2", "Other", price=10))

    in_c1 = await store.products.filter(category_ids=["c1"])
    assert {p.name for p in in_c1} == {"Cheap", "Edge"}

    priced = await store.products.filter(price_range=(10, 20))
    assert {p.name for p in priced} == {"Edge", "Other"}

    both = await store.products.filter(category_ids=["c1"], price_range=(0, 10))
    assert [p.name for p in both] == ["Cheap"]


@pytest.mark.asyncio
async def test_search_is_literal_and_case_insensitive(store):
    await store.products.create(make_product("c1", "USB Cable", description="Braided (2m)"))
    await store.products.create(make_product("c1", "Lamp", description="Warm usb light"))

    assert {p.name for p in await store.products.search("usb")} == {"USB Cable", "Lamp"}
    assert [p.name for p in await store.products.search("(2m)")] == ["USB Cable"]
    assert await store.products.search(".*") == []


@pytest.mark.asyncio
async def test_slug_exists_excludes_self(store):
    product = await store.products.create(make_product("c1", "Desk"))

    assert await store.products.slug_exists("desk")
    assert not await store.products.slug_exists("desk", exclude_id=product.id)


@pytest.mark.asyncio
async def test_list_by_category_excludes_and_limits(store):
    products = [await store.products.create(make_product("c1", f"P{i}")) for i in range(5)]

    related = await store.products.list_by_category("c1", exclude_id=products[0].id, limit=3)

    assert len(related) == 3
    assert products[0].id not in {p.id for p in related}
    assert await store.products.count(category_id="c1") == 5
    assert await store.products.count(category_id="c2") == 0


@pytest.mark.asyncio
async def test_order_status_update(store):
    first = await store.orders.create(OrderRecord(buyer_id="u1", product_ids=["p1"]))
    second = await store.orders.create(OrderRecord(buyer_id="u2", product_ids=["p2"]))

    assert [o.id for o in await store.orders.list_all()] == [second.id, first.id]
    assert [o.id for o in await store.orders.list_by_buyer("u1")] == [first.id]

    updated = await store.orders.update_status(first.id, OrderStatus.SHIPPED)
    assert updated.status == OrderStatus.SHIPPED
    assert await store.orders.update_status("missing", OrderStatus.SHIPPED) is None


def test_collections_keep_their_own_insertion_order():
    first, second = _Collection(), _Collection()

    first.insert({"id": "a"})
    first.insert({"id": "b"})
    second.insert({"id": "c"})

    assert [d["_seq"] for d in first.find()] == [0, 1]
    assert [d["_seq"] for d in second.find()] == [0]

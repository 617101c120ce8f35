import uuid

import pytest

from db.inventory import Product
from ledger.resolver import CatalogResolver, as_uuid


@pytest.fixture
def resolver():
    return CatalogResolver()


async def test_resolves_by_id(database, catalog, resolver):
    async with database.session_maker() as session:
        product = await resolver.resolve(session, str(catalog.product.id))
    assert product.id == catalog.product.id


async def test_resolves_by_uuid_instance(database, catalog, resolver):
    async with database.session_maker() as session:
        product = await resolver.resolve(session, catalog.other.id)
    assert product.id == catalog.other.id


async def test_resolves_by_sku(database, catalog, resolver):
    async with database.session_maker() as session:
        product = await resolver.resolve(session, "ST-2025")
    assert product.id == catalog.product.id


async def test_id_and_sku_give_the_same_product(database, catalog, resolver):
    async with database.session_maker() as session:
        by_id = await resolver.resolve(session, str(catalog.product.id))
        by_sku = await resolver.resolve(session, catalog.product.sku)
        again = await resolver.resolve(session, str(catalog.product.id))
    assert by_id.id == by_sku.id == again.id == catalog.product.id


@pytest.mark.parametrize("reference", ["not-a-uuid", "loc1", "", "   ", None, 42])
async def test_malformed_reference_is_a_miss(database, catalog, resolver, reference):
    async with database.session_maker() as session:
        assert await resolver.resolve(session, reference) is None


async def test_unknown_uuid_falls_back_to_sku(database, resolver):
    sku = str(uuid.uuid4())
    async with database.session_maker() as session:
        session.add(Product(name="Odd SKU", sku=sku))
        await session.commit()

        product = await resolver.resolve(session, sku)
    assert product is not None
    assert product.sku == sku


async def test_does_not_write(database, catalog, resolver):
    async with database.session_maker() as session:
        await resolver.resolve(session, "ST-2025")
        assert not session.new and not session.dirty


def test_as_uuid():
    value = uuid.uuid4()
    assert as_uuid(value) is value
    assert as_uuid(str(value)) == value
    assert as_uuid(value.hex) == value
    assert as_uuid("ST-2025") is None
    assert as_uuid(123) is None

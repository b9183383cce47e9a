from CheckoutStore.enums import ErrorCategory, FailureKind
from CheckoutStore.repository import CatalogRepository
from CheckoutStore.service import CatalogService

from conftest import make_products


class TestCatalogService:
    async def test_get_all_keeps_insertion_order(self):
        repository = CatalogRepository()
        await repository.add_products(make_products())
        products = await CatalogService(repository).get_all()
        assert [p.id for p in products] == ["kbd", "mouse", "stand"]

    async def test_get_by_id_missing_returns_none(self):
        service = CatalogService(CatalogRepository())
        assert await service.get_by_id("nope") is None


class TestStoreProducts:
    async def test_list_products(self, store):
        response = await store.list_products()
        assert response.success
        assert len(response.data) == 3

    async def test_get_product_matches_listing(self, store):
        listed = (await store.list_products()).data
        for product in listed:
            response = await store.get_product(product.id)
            assert response.success
            assert response.data == product

    async def test_get_unknown_product(self, store):
        response = await store.get_product("does-not-exist")
        assert not response.success
        assert response.error_kind == FailureKind.PRODUCT_NOT_FOUND
        assert response.error_category == ErrorCategory.NOT_FOUND

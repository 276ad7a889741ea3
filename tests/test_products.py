"""Catalog service and routes"""

from decimal import Decimal

import pytest

from app.core.exceptions import BadRequestException, ProductNotFound
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.product_service import ProductService


@pytest.fixture
def product_service(store):
    return ProductService(store)


class TestCatalogReads:
    async def test_lists_active_products_newest_first(self, product_service, make_product):
        older = await make_product(name="Older")
        newer = await make_product(name="Newer")
        await make_product(name="Hidden", is_active=False)

        products = await product_service.list_products()

        assert [p.id for p in products] == [newer, older]

    async def test_filters(self, product_service, make_product, make_category):
        kitchen = await make_category(name="Kitchen")
        toaster = await make_product(name="Toaster", category_id=kitchen, is_featured=True)
        await make_product(name="Phone", description="A smart toaster of conversation")
        await make_product(name="Radio")

        assert [p.id for p in await product_service.list_products(category_id=kitchen)] == [toaster]
        assert [p.id for p in await product_service.list_products(featured=True)] == [toaster]
        assert {p.name for p in await product_service.list_products(search="TOASTER")} == {"Toaster", "Phone"}
        assert len(await product_service.list_products(limit=2)) == 2

    async def test_get_product_includes_discounted_price_and_category(
        self, product_service, make_product, make_category
    ):
        category = await make_category(name="Audio")
        product = await make_product(name="Speaker", price="80.00", discount="25", category_id=category)

        record = await product_service.get_product(product)

        assert record.discounted_price == Decimal("60.00")
        assert record.category_name == "Audio"

    async def test_get_inactive_product(self, product_service, make_product):
        product = await make_product(is_active=False)

        with pytest.raises(ProductNotFound):
            await product_service.get_product(product)

    async def test_featured_is_capped(self, product_service, make_product):
        for i in range(10):
            await make_product(name=f"Featured {i}", is_featured=True)

        assert len(await product_service.featured_products()) == 8

    async def test_categories_sorted_by_name(self, product_service, make_category):
        await make_category(name="Zeta")
        await make_category(name="Alpha")

        assert [c.name for c in await product_service.list_categories()] == ["Alpha", "Zeta"]


class TestCatalogWrites:
    async def test_create_sanitizes_description(self, product_service):
        record = await product_service.create_product(
            ProductCreate(name="Mug", price=Decimal("7.5"), stock_quantity=3, description="<script>x</script><b>Big</b>")
        )

        assert record.price == Decimal("7.50")
        assert record.is_active is True
        assert "<script>" not in record.description
        assert "<b>Big</b>" in record.description

    @pytest.mark.parametrize("price", [None, Decimal("-1")])
    async def test_create_requires_valid_price(self, product_service, price):
        with pytest.raises(BadRequestException):
            await product_service.create_product(ProductCreate(name="Mug", price=price))

    async def test_update_keeps_omitted_fields(self, product_service, make_product):
        product = await make_product(name="Chair", price="40.00", stock=7)

        record = await product_service.update_product(product, ProductUpdate(stock_quantity=2))

        assert record.name == "Chair"
        assert record.price == Decimal("40.00")
        assert record.stock_quantity == 2

    async def test_update_unknown(self, product_service):
        with pytest.raises(ProductNotFound):
            await product_service.update_product(999, ProductUpdate(name="Nothing"))

    async def test_update_price_reports_old_and_new(self, product_service, make_product):
        product = await make_product(price="15.00")

        change = await product_service.update_price(product, Decimal("12.5"))

        assert change.old_price == Decimal("15.00")
        assert change.new_price == Decimal("12.50")
        assert change.product.price == Decimal("12.50")

    async def test_delete_is_soft(self, product_service, make_product, read_product):
        product = await make_product()

        await product_service.delete_product(product)

        assert (await read_product(product)).is_active is False
        with pytest.raises(ProductNotFound):
            await product_service.get_product(product)


class TestProductRoutes:
    async def test_list_and_detail(self, client, make_product):
        product = await make_product(name="Lamp", price="30.00", discount="10")

        listing = (await client.get("/api/v1/products")).json()
        assert listing["count"] == 1
        assert listing["products"][0]["discounted_price"] == 27.0

        detail = await client.get(f"/api/v1/products/{product}")
        assert detail.status_code == 200
        assert detail.json()["product"]["name"] == "Lamp"

    async def test_featured_and_categories_routes(self, client, make_product, make_category):
        await make_category(name="Lighting")
        await make_product(name="Lamp", is_featured=True)

        assert (await client.get("/api/v1/products/featured/all")).json()["count"] == 1
        assert (await client.get("/api/v1/products/categories/all")).json()["categories"][0]["name"] == "Lighting"

    async def test_crud(self, client):
        created = await client.post("/api/v1/products", json={"name": "Rug", "price": 120, "stock_quantity": 4})
        assert created.status_code == 201
        product_id = created.json()["product"]["id"]

        updated = await client.put(f"/api/v1/products/{product_id}", json={"description": "Wool"})
        assert updated.json()["product"]["description"] == "Wool"

        repriced = await client.patch(f"/api/v1/products/{product_id}/price", json={"price": 99.99})
        assert repriced.json()["old_price"] == 120.0
        assert repriced.json()["new_price"] == 99.99

        deleted = await client.delete(f"/api/v1/products/{product_id}")
        assert deleted.status_code == 200
        assert (await client.get(f"/api/v1/products/{product_id}")).status_code == 404

    async def test_negative_price_rejected(self, client):
        response = await client.post("/api/v1/products", json={"name": "Rug", "price": -5})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PRICE"

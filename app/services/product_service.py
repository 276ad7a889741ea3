"""
Product catalog service
Read paths for the storefront plus the admin-style mutations
"""

from typing import List, Optional, Union
from decimal import Decimal
import logging

from sqlalchemy import select, insert, update, or_

from app.core.config import settings
from app.core.store import DataStore
from app.core.exceptions import BadRequestException, ProductNotFound
from app.models import Category, Product
from app.models.product import discounted_price
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductRecord,
    PriceChange,
    CategoryResponse,
)
from app.utils.helpers import round_money, to_decimal

logger = logging.getLogger(__name__)

products = Product.__table__
categories = Category.__table__

def _product_query():
    return select(
        products.c.id,
        products.c.name,
        products.c.description,
        products.c.price,
        products.c.discount_percentage,
        products.c.stock_quantity,
        products.c.category_id,
        categories.c.name.label("category_name"),
        products.c.image_url,
        products.c.is_featured,
        products.c.is_active,
        products.c.created_at,
    ).outerjoin(categories, categories.c.id == products.c.category_id)

def _to_record(row) -> ProductRecord:
    data = dict(row)
    data["discount_percentage"] = to_decimal(data["discount_percentage"] or 0)
    data["discounted_price"] = round_money(discounted_price(data["price"], data["discount_percentage"]))
    return ProductRecord(**data)

def _validate_price(price: Optional[Union[Decimal, int, float]]) -> Decimal:
    if price is None:
        raise BadRequestException("Price is required", error_code="INVALID_PRICE")
    price = to_decimal(price)
    if price < 0:
        raise BadRequestException("Price must be a non-negative number", error_code="INVALID_PRICE")
    return round_money(price)

class ProductService:
    """Product catalog service"""

    def __init__(self, store: DataStore):
        self.store = store

    async def list_products(
        self,
        category_id: Optional[int] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[ProductRecord]:
        """
        List active products, newest first

        Args:
            category_id: Only products in this category
            featured: Only featured (or only non-featured) products
            search: Case-insensitive match on name or description
            limit: Maximum number of products
        """
        stmt = _product_query().where(products.c.is_active.is_(True))

        if category_id is not None:
            stmt = stmt.where(products.c.category_id == category_id)
        if featured is not None:
            stmt = stmt.where(products.c.is_featured.is_(featured))
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(products.c.name.ilike(pattern), products.c.description.ilike(pattern)))

        stmt = stmt.order_by(products.c.created_at.desc(), products.c.id.desc())
        if limit:
            stmt = stmt.limit(limit)

        async with self.store.transaction():
            rows = await self.store.query(stmt)
        return [_to_record(row) for row in rows]

    async def featured_products(self) -> List[ProductRecord]:
        return await self.list_products(featured=True, limit=settings.FEATURED_PRODUCTS_LIMIT)

    async def get_product(self, product_id: int) -> ProductRecord:
        async with self.store.transaction():
            row = await self.store.get(
                _product_query().where(products.c.id == product_id, products.c.is_active.is_(True))
            )
        if row is None:
            raise ProductNotFound()
        return _to_record(row)

    async def list_categories(self) -> List[CategoryResponse]:
        async with self.store.transaction():
            rows = await self.store.query(
                select(categories.c.id, categories.c.name, categories.c.description).order_by(categories.c.name)
            )
        return [CategoryResponse(**dict(row)) for row in rows]

    async def create_product(self, data: ProductCreate) -> ProductRecord:
        if not data.name:
            raise BadRequestException("Product name is required", error_code="INVALID_PRODUCT")
        price = _validate_price(data.price)

        async with self.store.transaction():
            created = await self.store.run(
                insert(products).values(
                    name=data.name,
                    description=data.description,
                    price=price,
                    discount_percentage=data.discount_percentage,
                    stock_quantity=data.stock_quantity,
                    category_id=data.category_id,
                    image_url=data.image_url,
                    is_featured=data.is_featured,
                    is_active=True,
                )
            )
            row = await self.store.get(_product_query().where(products.c.id == created.last_insert_id))

        logger.info(f"Product {created.last_insert_id} created: {data.name}")
        return _to_record(row)

    async def update_product(self, product_id: int, data: ProductUpdate) -> ProductRecord:
        """Partial update; fields left out of the request keep their current value"""
        values = data.model_dump(exclude_none=True)
        if "price" in values:
            values["price"] = _validate_price(values["price"])

        async with self.store.transaction():
            if values:
                result = await self.store.run(
                    update(products).where(products.c.id == product_id).values(**values)
                )
                if result.affected_rows == 0:
                    raise ProductNotFound()
            row = await self.store.get(_product_query().where(products.c.id == product_id))
            if row is None:
                raise ProductNotFound()

        logger.info(f"Product {product_id} updated: {', '.join(sorted(values)) or 'no changes'}")
        return _to_record(row)

    async def update_price(self, product_id: int, price) -> PriceChange:
        new_price = _validate_price(price)

        async with self.store.transaction():
            current = await self.store.get(
                select(products.c.price).where(products.c.id == product_id)
            )
            if current is None:
                raise ProductNotFound()

            await self.store.run(
                update(products).where(products.c.id == product_id).values(price=new_price)
            )
            row = await self.store.get(_product_query().where(products.c.id == product_id))

        old_price = round_money(current["price"])
        logger.info(f"Product {product_id} price changed from {old_price} to {new_price}")
        return PriceChange(old_price=old_price, new_price=new_price, product=_to_record(row))

    async def delete_product(self, product_id: int) -> None:
        """Soft delete: the product disappears from the catalog and carts but order history keeps it"""
        async with self.store.transaction():
            result = await self.store.run(
                update(products).where(products.c.id == product_id).values(is_active=False)
            )
            if result.affected_rows == 0:
                raise ProductNotFound()

        logger.info(f"Product {product_id} deactivated")

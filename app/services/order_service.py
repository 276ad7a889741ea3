"""
Order service
Turns the caller's cart into an order in a single transaction
"""

from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from sqlalchemy import select, insert, update, delete

from app.core.store import DataStore
from app.core.owner import Owner, UserOwner, owner_filter, describe
from app.core.exceptions import (
    EmptyCart,
    InsufficientStock,
    MissingShippingInfo,
    NotFoundException,
    ProductInactive,
)
from app.models import CartItem, Order, OrderItem, OrderStatus, Product
from app.models.product import discounted_price
from app.schemas.order import ShippingInfo, OrderCreated, OrderItemResponse, OrderResponse
from app.utils.helpers import round_money, sum_money
from app.utils.validators import missing_fields

logger = logging.getLogger(__name__)

cart_items = CartItem.__table__
products = Product.__table__
orders = Order.__table__
order_items = OrderItem.__table__

REQUIRED_SHIPPING_FIELDS = ("shipping_address", "customer_email", "full_name")

class OrderService:
    """Order service for business logic"""

    def __init__(self, store: DataStore):
        self.store = store

    async def create_order(
        self,
        owner: Optional[Owner],
        shipping: Union[ShippingInfo, Mapping[str, Any]],
    ) -> OrderCreated:
        """
        Create an order from the owner's cart

        Args:
            owner: Cart owner, user or guest session
            shipping: Address and contact details

        Returns:
            New order id and its total

        Raises:
            MissingShippingInfo: If a required shipping field is blank
            EmptyCart: If the owner has no cart lines
            ProductInactive: If a product in the cart was withdrawn
            InsufficientStock: If any line exceeds stock, checked again at decrement time
        """
        if isinstance(shipping, ShippingInfo):
            shipping = shipping.model_dump()

        missing = missing_fields(shipping, REQUIRED_SHIPPING_FIELDS)
        if missing:
            raise MissingShippingInfo(missing)
        if owner is None:
            raise EmptyCart()

        async with self.store.transaction():
            lines = await self.store.query(
                select(
                    cart_items.c.product_id,
                    cart_items.c.quantity,
                    products.c.name,
                    products.c.price,
                    products.c.discount_percentage,
                    products.c.stock_quantity,
                    products.c.is_active,
                )
                .join(products, products.c.id == cart_items.c.product_id)
                .where(owner_filter(cart_items, owner))
                .order_by(cart_items.c.id)
            )
            if not lines:
                raise EmptyCart()

            priced: List[Dict[str, Any]] = []
            for line in lines:
                if not line["is_active"]:
                    raise ProductInactive(line["name"])
                if line["quantity"] > line["stock_quantity"]:
                    raise InsufficientStock(line["name"], line["stock_quantity"])

                unit_price = round_money(discounted_price(line["price"], line["discount_percentage"]))
                priced.append({
                    "product_id": line["product_id"],
                    "product_name": line["name"],
                    "quantity": line["quantity"],
                    "unit_price": unit_price,
                    "subtotal": round_money(unit_price * line["quantity"]),
                })

            total_amount = sum_money(item["subtotal"] for item in priced)

            created = await self.store.run(
                insert(orders).values(
                    user_id=owner.user_id if isinstance(owner, UserOwner) else None,
                    customer_name=shipping["full_name"].strip(),
                    customer_email=shipping["customer_email"].strip(),
                    customer_phone=(shipping.get("phone") or "").strip(),
                    shipping_address=shipping["shipping_address"].strip(),
                    total_amount=total_amount,
                    status=OrderStatus.PENDING,
                )
            )
            order_id = created.last_insert_id

            for item in priced:
                await self.store.run(insert(order_items).values(order_id=order_id, **item))

                # Conditional decrement: stock may have moved since the read above
                decremented = await self.store.run(
                    update(products)
                    .where(
                        products.c.id == item["product_id"],
                        products.c.stock_quantity >= item["quantity"],
                    )
                    .values(stock_quantity=products.c.stock_quantity - item["quantity"])
                )
                if decremented.affected_rows == 0:
                    current = await self.store.get(
                        select(products.c.stock_quantity).where(products.c.id == item["product_id"])
                    )
                    raise InsufficientStock(item["product_name"], current["stock_quantity"] if current else 0)

            await self.store.run(delete(cart_items).where(owner_filter(cart_items, owner)))

        logger.info(f"Order {order_id} created for {describe(owner)}: {len(priced)} lines, total {total_amount}")
        return OrderCreated(order_id=order_id, total_amount=total_amount)

    async def get_order(self, order_id: int, user_id: Optional[int]) -> OrderResponse:
        """Get one of the user's orders with its lines"""
        async with self.store.transaction():
            order = await self.store.get(select(orders).where(orders.c.id == order_id))
            if order is None or user_id is None or order["user_id"] != user_id:
                raise NotFoundException("Order not found", error_code="ORDER_NOT_FOUND")

            items = await self.store.query(
                select(order_items).where(order_items.c.order_id == order_id).order_by(order_items.c.id)
            )

        return OrderResponse(
            **dict(order),
            items=[OrderItemResponse.model_validate(dict(item)) for item in items],
        )

    async def list_orders(self, user_id: int) -> List[OrderResponse]:
        """Order history for a user, newest first"""
        async with self.store.transaction():
            rows = await self.store.query(
                select(orders)
                .where(orders.c.user_id == user_id)
                .order_by(orders.c.created_at.desc(), orders.c.id.desc())
            )
            order_ids = [row["id"] for row in rows]
            items = []
            if order_ids:
                items = await self.store.query(
                    select(order_items)
                    .where(order_items.c.order_id.in_(order_ids))
                    .order_by(order_items.c.id)
                )

        by_order: Dict[int, List[OrderItemResponse]] = {}
        for item in items:
            by_order.setdefault(item["order_id"], []).append(OrderItemResponse.model_validate(dict(item)))

        return [OrderResponse(**dict(row), items=by_order.get(row["id"], [])) for row in rows]

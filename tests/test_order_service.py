"""Order creation tests

Covers:
- Totals, snapshots, stock decrement and cart clearing for a valid cart
- Required shipping fields
- All-or-nothing behavior when stock runs out, including at decrement time
- Order history reads
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.sql.dml import Insert

from app.core.exceptions import (
    EmptyCart,
    InsufficientStock,
    MissingShippingInfo,
    NotFoundException,
    ProductInactive,
)
from app.core.store import DataStore
from app.models import Order, OrderItem, OrderStatus, Product
from app.schemas.order import ShippingInfo
from app.services.cart_service import CartService
from app.services.order_service import OrderService

products = Product.__table__
order_items = OrderItem.__table__


async def _count(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model.__table__))).scalar_one()


async def _set_stock(session_factory, product_id, stock):
    async with session_factory() as session:
        await session.execute(update(products).where(products.c.id == product_id).values(stock_quantity=stock))
        await session.commit()


class TestCreateOrder:
    async def test_valid_two_line_cart(
        self, cart_service, order_service, guest, make_product, read_product, session_factory, shipping
    ):
        ten = await make_product(name="Ten", price="10.00", stock=5)
        twenty = await make_product(name="Twenty", price="20.00", stock=5)
        await cart_service.add_to_cart(guest, ten, 2)
        await cart_service.add_to_cart(guest, twenty, 1)

        created = await order_service.create_order(guest, shipping)

        assert created.total_amount == Decimal("40.00")
        assert (await read_product(ten)).stock_quantity == 3
        assert (await read_product(twenty)).stock_quantity == 4
        assert await cart_service.get_cart_count(guest) == 0

        async with session_factory() as session:
            order = await session.get(Order, created.order_id)
            lines = (await session.execute(
                select(OrderItem).where(OrderItem.order_id == created.order_id).order_by(OrderItem.id)
            )).scalars().all()

        assert order.status == OrderStatus.PENDING
        assert order.user_id is None
        assert order.customer_name == "Pat Buyer"
        assert order.customer_phone == "555-0100"
        assert order.total_amount == Decimal("40.00")
        assert [(line.product_name, line.quantity, line.unit_price, line.subtotal) for line in lines] == [
            ("Ten", 2, Decimal("10.00"), Decimal("20.00")),
            ("Twenty", 1, Decimal("20.00"), Decimal("20.00")),
        ]

    async def test_discounted_unit_price_is_snapshotted(
        self, cart_service, order_service, make_user, make_product, session_factory, shipping
    ):
        user = await make_user()
        product = await make_product(name="Lamp", price="50.00", discount="20")
        await cart_service.add_to_cart(user, product, 2)

        created = await order_service.create_order(user, ShippingInfo(**shipping))

        assert created.total_amount == Decimal("80.00")

        # Later product edits leave the order line alone
        async with session_factory() as session:
            await session.execute(update(products).where(products.c.id == product).values(price=Decimal("99.00"), name="Renamed"))
            await session.commit()

        order = await order_service.get_order(created.order_id, user.user_id)
        assert order.user_id == user.user_id
        assert order.items[0].product_name == "Lamp"
        assert order.items[0].unit_price == Decimal("40.00")

    async def test_phone_is_optional(self, cart_service, order_service, guest, make_product, session_factory, shipping):
        product = await make_product()
        await cart_service.add_to_cart(guest, product, 1)
        del shipping["phone"]

        created = await order_service.create_order(guest, shipping)

        async with session_factory() as session:
            order = await session.get(Order, created.order_id)
        assert order.customer_phone == ""

    @pytest.mark.parametrize("field", ["shipping_address", "customer_email", "full_name"])
    async def test_missing_shipping_field(self, cart_service, order_service, guest, make_product, shipping, field):
        product = await make_product()
        await cart_service.add_to_cart(guest, product, 1)
        shipping[field] = "   "

        with pytest.raises(MissingShippingInfo) as exc:
            await order_service.create_order(guest, shipping)

        assert exc.value.missing_fields == [field]
        assert await cart_service.get_cart_count(guest) == 1

    async def test_empty_cart(self, order_service, guest, session_factory, shipping):
        with pytest.raises(EmptyCart):
            await order_service.create_order(guest, shipping)

        assert await _count(session_factory, Order) == 0

    async def test_no_identity_is_empty_cart(self, order_service, shipping):
        with pytest.raises(EmptyCart):
            await order_service.create_order(None, shipping)

    async def test_line_over_stock_changes_nothing(
        self, cart_service, order_service, guest, make_product, read_product, session_factory, shipping
    ):
        fine = await make_product(name="Fine", stock=10)
        scarce = await make_product(name="Scarce", stock=5)
        await cart_service.add_to_cart(guest, fine, 1)
        await cart_service.add_to_cart(guest, scarce, 3)
        await _set_stock(session_factory, scarce, 2)

        with pytest.raises(InsufficientStock) as exc:
            await order_service.create_order(guest, shipping)

        assert exc.value.product_name == "Scarce"
        assert exc.value.available == 2
        assert await _count(session_factory, Order) == 0
        assert await _count(session_factory, OrderItem) == 0
        assert (await read_product(fine)).stock_quantity == 10
        assert (await read_product(scarce)).stock_quantity == 2
        assert await cart_service.get_cart_count(guest) == 4

    async def test_inactive_product_blocks_checkout(
        self, cart_service, order_service, guest, make_product, session_factory, shipping
    ):
        product = await make_product(name="Retired")
        await cart_service.add_to_cart(guest, product, 1)
        async with session_factory() as session:
            await session.execute(update(products).where(products.c.id == product).values(is_active=False))
            await session.commit()

        with pytest.raises(ProductInactive):
            await order_service.create_order(guest, shipping)

        assert await _count(session_factory, Order) == 0

    async def test_decrement_failure_rolls_back_everything(
        self, session, guest, make_product, read_product, session_factory, shipping
    ):
        first = await make_product(name="First", stock=5)
        second = await make_product(name="Second", stock=5)

        class RacingStore(DataStore):
            """Drains the second product's stock right after its order line is written"""

            async def run(self, stmt):
                result = await super().run(stmt)
                if isinstance(stmt, Insert) and stmt.table is order_items:
                    await super().run(update(products).where(products.c.id == second).values(stock_quantity=0))
                return result

        store = RacingStore(session)
        cart = CartService(store)
        await cart.add_to_cart(guest, first, 1)
        await cart.add_to_cart(guest, second, 1)

        with pytest.raises(InsufficientStock) as exc:
            await OrderService(store).create_order(guest, shipping)

        assert exc.value.product_name == "Second"
        assert exc.value.available == 0
        assert await _count(session_factory, Order) == 0
        assert await _count(session_factory, OrderItem) == 0
        assert (await read_product(first)).stock_quantity == 5
        assert (await read_product(second)).stock_quantity == 5
        assert await cart.get_cart_count(guest) == 2


class TestOrderHistory:
    async def test_list_orders_newest_first(self, cart_service, order_service, make_user, make_product, shipping):
        user = await make_user()
        product = await make_product(price="3.00")
        await cart_service.add_to_cart(user, product, 1)
        first = await order_service.create_order(user, shipping)
        await cart_service.add_to_cart(user, product, 2)
        second = await order_service.create_order(user, shipping)

        orders = await order_service.list_orders(user.user_id)

        assert [order.id for order in orders] == [second.order_id, first.order_id]
        assert orders[0].total_amount == Decimal("6.00")
        assert len(orders[0].items) == 1

    async def test_cannot_read_someone_elses_order(self, cart_service, order_service, make_user, make_product, shipping):
        owner = await make_user(email="owner@mail.com")
        other = await make_user(email="other@mail.com")
        product = await make_product()
        await cart_service.add_to_cart(owner, product, 1)
        created = await order_service.create_order(owner, shipping)

        with pytest.raises(NotFoundException):
            await order_service.get_order(created.order_id, other.user_id)
        with pytest.raises(NotFoundException):
            await order_service.get_order(created.order_id, None)

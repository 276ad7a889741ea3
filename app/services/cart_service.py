"""
Cart service
Owns cart lines for users and guest sessions: CRUD against live stock,
pre-checkout validation and the guest-to-user merge at login
"""

from typing import Any, List, Optional
import logging

from sqlalchemy import select, update, insert, delete, func

from app.core.store import DataStore
from app.core.owner import Owner, UserOwner, owner_filter, owner_columns, describe
from app.core.exceptions import (
    InvalidQuantity,
    ProductNotFound,
    ProductInactive,
    InsufficientStock,
    CartItemNotFound,
    NoActiveSession,
    StoreError,
    DuplicateEntry,
)
from app.models import CartItem, Product
from app.models.product import discounted_price
from app.schemas.cart import (
    CartLineView,
    CartSummary,
    CartResponse,
    AddToCartResult,
    UpdateCartResult,
    CartIssue,
    CartValidation,
    MergeResult,
)
from app.utils.helpers import round_money, sum_money, to_decimal
from app.utils.validators import parse_quantity

logger = logging.getLogger(__name__)

cart_items = CartItem.__table__
products = Product.__table__

def _stock_of_line_product():
    """Current stock of the product a cart line points at, correlated to the outer row"""
    return (
        select(products.c.stock_quantity)
        .where(products.c.id == cart_items.c.product_id)
        .scalar_subquery()
    )

def _line_query():
    return select(
        cart_items.c.id.label("cart_id"),
        cart_items.c.product_id,
        cart_items.c.quantity,
        cart_items.c.added_at,
        products.c.name.label("product_name"),
        products.c.price,
        products.c.discount_percentage,
        products.c.stock_quantity,
        products.c.image_url,
        products.c.is_active,
    ).join(products, products.c.id == cart_items.c.product_id)

class CartService:
    """Shopping cart service"""

    def __init__(self, store: DataStore):
        self.store = store

    async def get_cart(self, owner: Optional[Owner]) -> CartResponse:
        """
        Get cart for user or session

        Lines whose product has been deactivated are left out. Line amounts
        are rounded for display only; the summary is rounded once over the
        full-precision sums.
        """
        if owner is None:
            return CartResponse()

        async with self.store.transaction():
            rows = await self.store.query(
                _line_query()
                .where(owner_filter(cart_items, owner), products.c.is_active.is_(True))
                .order_by(cart_items.c.added_at.desc(), cart_items.c.id.desc())
            )

        items = []
        subtotals = []
        totals = []
        for row in rows:
            price = to_decimal(row["price"])
            discount = to_decimal(row["discount_percentage"] or 0)
            final_price = discounted_price(price, discount)
            subtotal = price * row["quantity"]
            discounted_subtotal = final_price * row["quantity"]
            subtotals.append(subtotal)
            totals.append(discounted_subtotal)

            items.append(CartLineView(
                cart_id=row["cart_id"],
                product_id=row["product_id"],
                product_name=row["product_name"],
                quantity=row["quantity"],
                price=round_money(price),
                discount_percentage=discount,
                discounted_price=round_money(final_price),
                stock_quantity=row["stock_quantity"],
                image_url=row["image_url"],
                subtotal=round_money(subtotal),
                discounted_subtotal=round_money(discounted_subtotal),
                added_at=row["added_at"],
            ))

        subtotal = sum_money(subtotals)
        total = sum_money(totals)
        summary = CartSummary(
            total_items=sum(item.quantity for item in items),
            subtotal=round_money(subtotal),
            discount_amount=round_money(subtotal - total),
            total_amount=round_money(total),
        )
        return CartResponse(items=items, summary=summary)

    async def add_to_cart(self, owner: Optional[Owner], product_id: int, quantity: Any = 1) -> AddToCartResult:
        """
        Add item to cart

        Adds onto an existing line for the same product instead of replacing
        it. The increment is one conditional UPDATE, so concurrent adds never
        lose a unit and never push a line past the product's stock.
        """
        try:
            quantity = parse_quantity(quantity, default=1)
        except ValueError:
            raise InvalidQuantity()
        if quantity < 1:
            raise InvalidQuantity()
        if owner is None:
            raise NoActiveSession()

        async with self.store.transaction():
            product = await self.store.get(
                select(products.c.id, products.c.name, products.c.stock_quantity, products.c.is_active)
                .where(products.c.id == product_id)
            )
            if product is None:
                raise ProductNotFound()
            if not product["is_active"]:
                raise ProductInactive(product["name"])
            if quantity > product["stock_quantity"]:
                raise InsufficientStock(product["name"], product["stock_quantity"])

            line = await self._increment(owner, product_id, quantity)
            if line is not None:
                action = "updated"
            else:
                existing = await self._find_line(owner, product_id)
                if existing is not None:
                    # Line exists but the increment would exceed stock
                    raise InsufficientStock(product["name"], product["stock_quantity"])

                try:
                    async with self.store.savepoint():
                        await self.store.run(
                            insert(cart_items).values(
                                product_id=product_id,
                                quantity=quantity,
                                **owner_columns(owner),
                            )
                        )
                    action = "added"
                except DuplicateEntry:
                    # Another request created the line first
                    logger.info(f"Concurrent insert for product {product_id} by {describe(owner)}, retrying as increment")
                    action = "updated"

                if action == "added":
                    line = await self._find_line(owner, product_id)
                else:
                    line = await self._increment(owner, product_id, quantity)
                if line is None:
                    raise InsufficientStock(product["name"], product["stock_quantity"])

        logger.debug(f"Cart {action}: product {product_id} x{line['quantity']} for {describe(owner)}")
        return AddToCartResult(
            cart_id=line["id"],
            product_id=product_id,
            quantity=line["quantity"],
            action=action,
        )

    async def update_cart_item(self, owner: Optional[Owner], cart_id: int, quantity: Any) -> UpdateCartResult:
        """Set the quantity of one of the owner's lines, re-checked against live stock"""
        try:
            quantity = parse_quantity(quantity)
        except ValueError:
            raise InvalidQuantity()
        if quantity is None or quantity < 1:
            raise InvalidQuantity()
        if owner is None:
            raise CartItemNotFound()

        async with self.store.transaction():
            line = await self.store.get(
                _line_query().where(cart_items.c.id == cart_id, owner_filter(cart_items, owner))
            )
            if line is None:
                raise CartItemNotFound()
            if quantity > line["stock_quantity"]:
                raise InsufficientStock(line["product_name"], line["stock_quantity"])

            result = await self.store.run(
                update(cart_items)
                .where(
                    cart_items.c.id == cart_id,
                    owner_filter(cart_items, owner),
                    _stock_of_line_product() >= quantity,
                )
                .values(quantity=quantity)
            )
            if result.affected_rows == 0:
                current = await self.store.get(
                    select(products.c.stock_quantity).where(products.c.id == line["product_id"])
                )
                available = current["stock_quantity"] if current else 0
                raise InsufficientStock(line["product_name"], available)

        final_price = discounted_price(line["price"], line["discount_percentage"])
        return UpdateCartResult(
            cart_id=cart_id,
            quantity=quantity,
            subtotal=round_money(final_price * quantity),
        )

    async def remove_cart_item(self, owner: Optional[Owner], cart_id: int) -> None:
        if owner is None:
            raise CartItemNotFound()

        async with self.store.transaction():
            result = await self.store.run(
                delete(cart_items).where(cart_items.c.id == cart_id, owner_filter(cart_items, owner))
            )
            if result.affected_rows == 0:
                raise CartItemNotFound()

    async def clear_cart(self, owner: Optional[Owner]) -> int:
        """Delete every line the owner has; returns how many were removed"""
        if owner is None:
            return 0

        async with self.store.transaction():
            result = await self.store.run(delete(cart_items).where(owner_filter(cart_items, owner)))

        logger.debug(f"Cleared {result.affected_rows} cart lines for {describe(owner)}")
        return result.affected_rows

    async def get_cart_count(self, owner: Optional[Owner]) -> int:
        if owner is None:
            return 0

        async with self.store.transaction():
            row = await self.store.get(
                select(func.coalesce(func.sum(cart_items.c.quantity), 0).label("count"))
                .where(owner_filter(cart_items, owner))
            )
        return int(row["count"]) if row else 0

    async def validate_cart(self, owner: Optional[Owner]) -> CartValidation:
        """
        Re-check every line against the product's current state

        Reports withdrawn products and lines asking for more than is in stock.
        """
        if owner is None:
            return CartValidation(valid=True)

        async with self.store.transaction():
            rows = await self.store.query(
                _line_query()
                .where(owner_filter(cart_items, owner))
                .order_by(cart_items.c.id)
            )

        issues: List[CartIssue] = []
        for row in rows:
            if not row["is_active"]:
                issue = "Product is no longer available"
            elif row["quantity"] > row["stock_quantity"]:
                issue = f"Only {row['stock_quantity']} items in stock (you have {row['quantity']})"
            else:
                continue
            issues.append(CartIssue(
                cart_id=row["cart_id"],
                product_id=row["product_id"],
                product_name=row["product_name"],
                issue=issue,
            ))

        return CartValidation(valid=not issues, issues=issues)

    async def merge_guest_cart(self, session_id: Optional[str], user_id: int) -> MergeResult:
        """
        Fold a guest cart into the user's cart after login

        Quantities for products the user already has are added together and
        the guest line is dropped; other guest lines change owner. Each line
        runs in its own savepoint and failures are only logged, so a bad line
        never blocks the others or the login.
        """
        result = MergeResult()
        if not session_id:
            return result

        user = UserOwner(user_id=user_id)
        try:
            async with self.store.transaction():
                guest_lines = await self.store.query(
                    select(cart_items.c.id, cart_items.c.product_id, cart_items.c.quantity)
                    .where(cart_items.c.session_id == session_id, cart_items.c.user_id.is_(None))
                    .order_by(cart_items.c.id)
                )

                for line in guest_lines:
                    try:
                        async with self.store.savepoint():
                            merged = await self._merge_line(line, user)
                        if merged:
                            result.merged += 1
                        else:
                            result.transferred += 1
                    except StoreError:
                        result.failed += 1
                        logger.exception(
                            f"Failed to merge cart line {line['id']} (product {line['product_id']}) into user {user_id}"
                        )
        except StoreError:
            logger.exception(f"Guest cart merge for user {user_id} could not be committed")
            return MergeResult(failed=result.merged + result.transferred + result.failed)

        if result.total or result.failed:
            logger.info(
                f"Merged guest cart into user {user_id}: "
                f"{result.merged} merged, {result.transferred} transferred, {result.failed} failed"
            )
        return result

    async def _merge_line(self, line, user: UserOwner) -> bool:
        """Move one guest line to the user; True when it was added onto an existing line"""
        bumped = await self.store.run(
            update(cart_items)
            .where(owner_filter(cart_items, user), cart_items.c.product_id == line["product_id"])
            .values(quantity=cart_items.c.quantity + line["quantity"])
        )
        if bumped.affected_rows:
            await self.store.run(delete(cart_items).where(cart_items.c.id == line["id"]))
            return True

        await self.store.run(
            update(cart_items)
            .where(cart_items.c.id == line["id"])
            .values(**owner_columns(user))
        )
        return False

    async def _increment(self, owner: Owner, product_id: int, quantity: int):
        """Add to an existing line if the result still fits in stock; returns the line or None"""
        result = await self.store.run(
            update(cart_items)
            .where(
                owner_filter(cart_items, owner),
                cart_items.c.product_id == product_id,
                cart_items.c.quantity + quantity <= _stock_of_line_product(),
            )
            .values(quantity=cart_items.c.quantity + quantity, added_at=func.now())
        )
        if result.affected_rows == 0:
            return None
        return await self._find_line(owner, product_id)

    async def _find_line(self, owner: Owner, product_id: int):
        return await self.store.get(
            select(cart_items.c.id, cart_items.c.quantity)
            .where(owner_filter(cart_items, owner), cart_items.c.product_id == product_id)
        )

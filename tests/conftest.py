import os

# Must be set before the app package reads its settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from decimal import Decimal

import httpx
import pytest

from app.core.database import build_engine, build_session_factory, get_db, init_db
from app.core.owner import GuestOwner, UserOwner
from app.core.security import SecurityUtils
from app.core.store import DataStore
from app.models import Category, Product, User
from app.services.cart_service import CartService
from app.services.order_service import OrderService


@pytest.fixture
async def engine(tmp_path):
    """Fresh file-backed database per test so separate sessions really contend for locks"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    return DataStore(session)


@pytest.fixture
def cart_service(store):
    return CartService(store)


@pytest.fixture
def order_service(store):
    return OrderService(store)


@pytest.fixture
def guest():
    return GuestOwner(session_id="guest-session-0001")


@pytest.fixture
def make_category(session_factory):
    async def _make(name="Gadgets", description=None):
        async with session_factory() as session:
            category = Category(name=name, description=description)
            session.add(category)
            await session.commit()
            return category.id

    return _make


@pytest.fixture
def make_product(session_factory):
    """Insert a product in its own session and return its id"""

    async def _make(
        name="Widget",
        price="10.00",
        stock=100,
        discount="0",
        is_active=True,
        is_featured=False,
        category_id=None,
        description=None,
    ):
        async with session_factory() as session:
            product = Product(
                name=name,
                description=description,
                price=Decimal(price),
                discount_percentage=Decimal(discount),
                stock_quantity=stock,
                is_active=is_active,
                is_featured=is_featured,
                category_id=category_id,
            )
            session.add(product)
            await session.commit()
            return product.id

    return _make


@pytest.fixture
def make_user(session_factory):
    """Insert a user and return a UserOwner for it"""

    async def _make(email="shopper@mail.com", password="secret123", full_name="Test Shopper"):
        async with session_factory() as session:
            user = User(
                email=email,
                password_hash=SecurityUtils.hash_password(password),
                full_name=full_name,
                is_active=True,
            )
            session.add(user)
            await session.commit()
            return UserOwner(user_id=user.id)

    return _make


@pytest.fixture
def read_product(session_factory):
    async def _read(product_id):
        async with session_factory() as session:
            return await session.get(Product, product_id)

    return _read


@pytest.fixture
def shipping():
    return {
        "shipping_address": "12 Market Street, Springfield",
        "customer_email": "buyer@mail.com",
        "full_name": "Pat Buyer",
        "phone": "555-0100",
    }


@pytest.fixture
async def client(session_factory):
    """HTTP client against a fresh app wired to the test database"""
    from app.main import create_app

    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

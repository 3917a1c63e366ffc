"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool so
all connections share it) and sessions configured like the application's
(``autoflush=False``, ``expire_on_commit=False``).
"""

import os

# Must be set before app.core.config is imported anywhere.
os.environ["APP_ENV"] = "test"
os.environ["AUDIT_ENABLED"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.domain  # noqa: F401
from app.db.base import Base, get_db
from app.domain.catalog import Bundle, Category, SubCategory
from app.schemas.vendor import VendorCreate
from tests.helpers import DESCRIPTION


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    from app.main import app

    async def _get_db():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Catalog seed data
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def catalog(session):
    """Categories A, A2, B; subcategory S (under A); bundles yearly and monthly."""
    a = Category(name="Wedding Planners", slug="wedding-planners")
    a2 = Category(name="Photographers", slug="photographers")
    b = Category(name="Caterers", slug="caterers")
    session.add_all([a, a2, b])
    await session.flush()

    s = SubCategory(name="Destination Weddings", slug="destination-weddings", main_category_id=a.id)
    yearly = Bundle(name="Gold", duration_value=1, duration_unit="years", price=999, features=["Listing", "Badge"])
    monthly = Bundle(
        name="Starter",
        duration_value=1,
        duration_unit="months",
        bonus_value=10,
        bonus_unit="days",
        price=99,
        features=["Listing"],
    )
    session.add_all([s, yearly, monthly])
    await session.flush()
    return {"A": a, "A2": a2, "B": b, "S": s, "yearly": yearly, "monthly": monthly}


@pytest.fixture
def vendor_payload(catalog):
    """Factory for a valid domestic VendorCreate."""
    counter = {"n": 0}

    def _make(**overrides) -> VendorCreate:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "owner_name": f"Owner {n}",
            "email": f"owner{n}@example.com",
            "phone_number": f"+97150000{n:04d}",
            "password": "secret123",
            "business_name": f"Business {n}",
            "business_logo": "https://cdn.example.com/logo.png",
            "business_description": DESCRIPTION,
            "trade_license_number": f"TL-{n:05d}",
            "trade_license_copy": "https://cdn.example.com/tl.pdf",
            "emirates_id": "https://cdn.example.com/eid.pdf",
            "address_city": "Dubai",
            "address_country": "United Arab Emirates",
            "main_category": [catalog["A"].id],
            "sub_categories": [],
            "selected_bundle": catalog["yearly"].id,
        }
        data.update(overrides)
        return VendorCreate(**data)

    return _make



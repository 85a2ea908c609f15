"""Pytest fixtures for async SQLite test database."""
from decimal import Decimal

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from tabpos.app import app
from tabpos.database.database import Base, configure_sqlite, get_db
from tabpos.models.catalog import Category, Item


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create an in-memory SQLite async session for testing."""
    async with session_factory() as session:
        yield session


async def _seed_catalog(session: AsyncSession) -> dict:
    drinks = Category(name="Drinks", description="Hot and cold drinks")
    snacks = Category(name="Snacks")
    session.add_all([drinks, snacks])
    await session.flush()

    items = {
        "coffee": Item(name="Coffee", price=Decimal("3.50"), category_id=drinks.id),
        "water": Item(name="Water", price=Decimal("1.00"), category_id=drinks.id),
        "cookie": Item(name="Cookie", price=Decimal("2.25"), category_id=snacks.id),
        "cake": Item(
            name="Cake", price=Decimal("4.00"), category_id=snacks.id, in_stock=False
        ),
    }
    session.add_all(items.values())
    await session.commit()
    return {"drinks": drinks, "snacks": snacks, **items}


@pytest_asyncio.fixture
async def catalog(db_session):
    """Two categories and four items (Cake is out of stock)."""
    return await _seed_catalog(db_session)


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client against the app, bound to the test database."""

    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_catalog(session_factory):
    """Catalog seeded through a session that is closed before requests run."""
    async with session_factory() as session:
        return await _seed_catalog(session)


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """File-backed SQLite database for tests that need separate connections."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'pos.db'}",
        echo=False,
        connect_args={"timeout": 1.0},
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def file_catalog(file_session_factory):
    """Catalog seeded into the file-backed database."""
    async with file_session_factory() as session:
        return await _seed_catalog(session)

"""Shared pytest fixtures: a throwaway SQLite database, a seeded menu and an API client."""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.database import Base, get_db
from storefront.main import app
from storefront.models import MenuCategory, MenuItem

# name, category, price, dietary, popularity, available
_TEST_MENU = [
    ("Bruschetta", "appetizer", "12.50", ["vegetarian"], 70, True),
    ("Ribeye Steak", "main", "32.00", ["gluten-free"], 95, True),
    ("Vegan Curry", "main", "18.00", ["vegan", "gluten-free"], 80, True),
    ("Chocolate Torte", "dessert", "9.00", ["vegetarian"], 60, True),
    ("Seasonal Soup", "appetizer", "7.25", ["vegan"], 40, False),
    ("Iced Tea", "beverage", "3.50", ["vegan", "gluten-free"], 30, True),
]


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncEngine:
    """A file-backed SQLite database per test, so separate sessions see each other's commits."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def menu(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, MenuItem]:
    """Seed four categories and six items (one unavailable); keyed by item name."""
    async with session_factory() as session:
        categories = {
            name: MenuCategory(name=name, description=f"{name} dishes", display_order=order)
            for order, name in enumerate(["appetizer", "main", "dessert", "beverage"], start=1)
        }
        session.add_all(categories.values())

        items: dict[str, MenuItem] = {}
        for name, category, price, dietary, popularity, available in _TEST_MENU:
            items[name] = MenuItem(
                name=name,
                description=f"House {name.lower()}",
                price=Decimal(price),
                category=categories[category],
                dietary_info=dietary,
                preparation_time=10,
                popularity_score=popularity,
                is_available=available,
            )
        session.add_all(items.values())
        await session.commit()
    return items


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncClient:
    """API client bound to the test database, with cache and Kafka disabled."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.menu_cache = None
    app.state.kafka_producer = None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

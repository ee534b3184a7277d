import logging
import uuid
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.config import settings
from storefront.database import AsyncSessionLocal
from storefront.metrics import CACHE_LOOKUPS
from storefront.models.menu_item import MenuCategory, MenuItem
from storefront.schemas.menu_item import MenuCategoryResponse, MenuFilters, MenuItemResponse
from storefront.services.cache import JSONCache

logger = logging.getLogger(__name__)

CATEGORIES_CACHE_KEY = "menu:categories"

_MENU_ITEM_LIST = TypeAdapter(list[MenuItemResponse])
_CATEGORY_LIST = TypeAdapter(list[MenuCategoryResponse])

_CATEGORY_SEED = [
    {"name": "appetizer", "description": "Small plates to start", "display_order": 1},
    {"name": "main", "description": "Hearty main courses", "display_order": 2},
    {"name": "dessert", "description": "Something sweet", "display_order": 3},
    {"name": "beverage", "description": "Drinks and refreshments", "display_order": 4},
]

_MENU_SEED = [
    {
        "category": "appetizer",
        "name": "Garlic Bread",
        "description": "Toasted sourdough with garlic butter",
        "price": Decimal("6.50"),
        "dietary_info": ["vegetarian"],
        "preparation_time": 8,
        "popularity_score": 82,
    },
    {
        "category": "appetizer",
        "name": "Crispy Calamari",
        "description": "Lightly fried squid with lemon aioli",
        "price": Decimal("11.99"),
        "dietary_info": [],
        "preparation_time": 12,
        "popularity_score": 74,
    },
    {
        "category": "main",
        "name": "Margherita Pizza",
        "description": "Classic tomato, mozzarella and basil",
        "price": Decimal("14.99"),
        "dietary_info": ["vegetarian"],
        "preparation_time": 18,
        "popularity_score": 95,
    },
    {
        "category": "main",
        "name": "Grilled Salmon",
        "description": "Atlantic salmon with seasonal greens",
        "price": Decimal("24.50"),
        "dietary_info": ["gluten-free"],
        "preparation_time": 22,
        "popularity_score": 88,
    },
    {
        "category": "main",
        "name": "Roasted Vegetable Bowl",
        "description": "Quinoa, roasted vegetables and tahini",
        "price": Decimal("16.00"),
        "dietary_info": ["vegan", "gluten-free"],
        "preparation_time": 15,
        "popularity_score": 70,
    },
    {
        "category": "dessert",
        "name": "Tiramisu",
        "description": "Espresso soaked ladyfingers and mascarpone",
        "price": Decimal("8.50"),
        "dietary_info": ["vegetarian"],
        "preparation_time": 5,
        "popularity_score": 80,
    },
    {
        "category": "beverage",
        "name": "Fresh Lemonade",
        "description": "Squeezed to order",
        "price": Decimal("3.99"),
        "dietary_info": ["vegan", "gluten-free"],
        "preparation_time": 3,
        "popularity_score": 60,
    },
]


async def seed_menu() -> None:
    """Populate the catalog if it is empty. Called once on startup."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(MenuItem).limit(1))
        if result.scalars().first() is not None:
            return

        categories = {data["name"]: MenuCategory(**data) for data in _CATEGORY_SEED}
        db.add_all(categories.values())
        for item_data in _MENU_SEED:
            data = dict(item_data)
            db.add(MenuItem(category=categories[data.pop("category")], **data))
        await db.commit()
        logger.info("Seeded %d menu items", len(_MENU_SEED))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        price=item.price,
        category=item.category.name if item.category else None,
        dietary=list(item.dietary_info or []),
        image=item.image_url,
        preparation_time=item.preparation_time,
        popularity=item.popularity_score,
        available=item.is_available,
        ingredients=item.ingredients,
        allergens=item.allergens,
        nutrition_info=item.nutrition_info,
    )


def _decode_cached(adapter: TypeAdapter, key: str, cached: Any) -> list | None:
    """Validate a cached listing; entries written under an older schema count as a miss."""
    try:
        return adapter.validate_python(cached)
    except ValidationError as exc:
        CACHE_LOOKUPS.labels("error").inc()
        logger.warning(
            "Discarding cache entry that no longer validates",
            extra={"key": key, "error_count": exc.error_count()},
        )
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def list_menu_items(
    db: AsyncSession,
    filters: MenuFilters,
    cache: JSONCache | None = None,
) -> list[MenuItemResponse]:
    cache_key = filters.cache_key()
    if cache is not None:
        cached = await cache.get_json(cache_key)
        if cached is not None:
            cached_items = _decode_cached(_MENU_ITEM_LIST, cache_key, cached)
            if cached_items is not None:
                return cached_items

    stmt = (
        select(MenuItem)
        .outerjoin(MenuItem.category)
        .options(selectinload(MenuItem.category))
        .where(MenuItem.is_available.is_(filters.available))
    )
    if filters.category:
        stmt = stmt.where(MenuCategory.name.ilike(f"%{filters.category}%"))
    if filters.search:
        pattern = f"%{filters.search}%"
        stmt = stmt.where(or_(MenuItem.name.ilike(pattern), MenuItem.description.ilike(pattern)))
    stmt = stmt.order_by(MenuItem.popularity_score.desc(), MenuItem.name.asc())

    result = await db.execute(stmt)
    items = result.scalars().all()

    # Tags are a JSON list column, so membership is checked here to stay portable
    if filters.dietary:
        items = [item for item in items if filters.dietary in (item.dietary_info or [])]

    responses = [_to_response(item) for item in items]

    if cache is not None:
        await cache.set_json(
            cache_key,
            [r.model_dump(mode="json") for r in responses],
            settings.menu_cache_ttl_seconds,
        )
    return responses


async def get_menu_item(db: AsyncSession, menu_item_id: uuid.UUID) -> MenuItemResponse | None:
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.id == menu_item_id)
        .options(selectinload(MenuItem.category))
    )
    item = result.scalars().first()
    if item is None:
        return None
    return _to_response(item)


async def get_items_by_ids(
    db: AsyncSession, menu_item_ids: list[uuid.UUID]
) -> dict[uuid.UUID, MenuItem]:
    """Authoritative catalog rows for the order engine, keyed by id. Never cached."""
    if not menu_item_ids:
        return {}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(set(menu_item_ids))))
    return {item.id: item for item in result.scalars().all()}


async def list_categories(
    db: AsyncSession, cache: JSONCache | None = None
) -> list[MenuCategoryResponse]:
    if cache is not None:
        cached = await cache.get_json(CATEGORIES_CACHE_KEY)
        if cached is not None:
            categories = _decode_cached(_CATEGORY_LIST, CATEGORIES_CACHE_KEY, cached)
            if categories is not None:
                return categories

    result = await db.execute(
        select(MenuCategory)
        .where(MenuCategory.active.is_(True))
        .order_by(MenuCategory.display_order.asc(), MenuCategory.name.asc())
    )
    categories = [MenuCategoryResponse.model_validate(c) for c in result.scalars().all()]

    if cache is not None:
        await cache.set_json(
            CATEGORIES_CACHE_KEY,
            [c.model_dump(mode="json") for c in categories],
            settings.categories_cache_ttl_seconds,
        )
    return categories

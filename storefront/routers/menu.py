import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.dependencies import get_cache
from storefront.schemas.menu_item import MenuCategoryResponse, MenuFilters, MenuItemResponse
from storefront.services import menu_service
from storefront.services.cache import JSONCache

router = APIRouter()


@router.get("", response_model=list[MenuItemResponse])
async def list_menu_items(
    category: str | None = Query(default=None),
    dietary: str | None = Query(default=None),
    search: str | None = Query(default=None),
    available: bool = Query(default=True),
    db: AsyncSession = Depends(get_db),
    cache: JSONCache | None = Depends(get_cache),
) -> list[MenuItemResponse]:
    filters = MenuFilters(category=category, dietary=dietary, search=search, available=available)
    return await menu_service.list_menu_items(db, filters, cache)


@router.get("/categories/all", response_model=list[MenuCategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    cache: JSONCache | None = Depends(get_cache),
) -> list[MenuCategoryResponse]:
    return await menu_service.list_categories(db, cache)


@router.get("/{menu_item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    menu_item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    item = await menu_service.get_menu_item(db, menu_item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    return item

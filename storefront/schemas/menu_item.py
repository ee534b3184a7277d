import uuid
from typing import Any

from pydantic import BaseModel

from storefront.schemas.base import CamelModel, Money


class MenuFilters(BaseModel):
    category: str | None = None
    dietary: str | None = None
    search: str | None = None
    available: bool = True

    def cache_key(self) -> str:
        return "menu:" + self.model_dump_json()


class MenuItemResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    price: Money
    category: str | None
    dietary: list[str]
    image: str | None
    preparation_time: int
    popularity: int
    available: bool
    ingredients: list[str] | None = None
    allergens: list[str] | None = None
    nutrition_info: dict[str, Any] | None = None


class MenuCategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    display_order: int

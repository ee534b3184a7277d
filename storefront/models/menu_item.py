import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database import Base


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    items: Mapped[list["MenuItem"]] = relationship("MenuItem", back_populates="category")


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("menu_categories.id"), nullable=True
    )
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    dietary_info: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    preparation_time: Mapped[int] = mapped_column(Integer, default=15, nullable=False)
    popularity_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    ingredients: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    allergens: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    nutrition_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    category: Mapped[MenuCategory | None] = relationship("MenuCategory", back_populates="items")

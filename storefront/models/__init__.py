# Import all models here so SQLAlchemy registers them with Base.metadata
from storefront.models.menu_item import MenuCategory, MenuItem
from storefront.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from storefront.models.reservation import Reservation, ReservationStatus
from storefront.models.user import User

__all__ = [
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Reservation",
    "ReservationStatus",
    "User",
]

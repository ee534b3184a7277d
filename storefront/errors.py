"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; the handlers registered in
storefront.main turn them into ``{"error": message}`` payloads.
"""

import uuid


class StorefrontError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class NotFoundError(StorefrontError):
    status_code = 404


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: uuid.UUID) -> None:
        super().__init__("Order not found")
        self.order_id = order_id


class ReservationNotFoundError(NotFoundError):
    def __init__(self, reservation_id: uuid.UUID) -> None:
        super().__init__("Reservation not found")
        self.reservation_id = reservation_id


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------


class MenuItemNotFoundError(StorefrontError):
    """A requested order line references an id the catalog does not hold."""

    def __init__(self, menu_item_id: uuid.UUID) -> None:
        super().__init__(f"Menu item {menu_item_id} not found")
        self.menu_item_id = menu_item_id


class MenuItemUnavailableError(StorefrontError):
    def __init__(self, menu_item_id: uuid.UUID, name: str) -> None:
        super().__init__(f"Menu item {name} is not available")
        self.menu_item_id = menu_item_id


class SlotFullyBookedError(StorefrontError):
    def __init__(self) -> None:
        super().__init__("This time slot is fully booked. Please choose another time.")


class ReservationNotCancellableError(StorefrontError):
    # Shares the 404 of an unknown id so the public contract stays a single outcome.
    status_code = 404

    def __init__(self, reservation_id: uuid.UUID, status: str) -> None:
        super().__init__(f"Reservation cannot be cancelled from status '{status}'")
        self.reservation_id = reservation_id


class InvalidStatusTransitionError(StorefrontError):
    status_code = 409

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot change order status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class EmailAlreadyRegisteredError(StorefrontError):
    def __init__(self) -> None:
        super().__init__("User already exists with this email")


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthenticationError(StorefrontError):
    status_code = 401

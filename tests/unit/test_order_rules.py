"""Unit tests for order status rules and order numbers."""

from datetime import datetime

import pytest

from storefront.models.order import (
    ORDER_STATUS_TRANSITIONS,
    TERMINAL_ORDER_STATUSES,
    OrderStatus,
    can_transition,
)
from storefront.services.order_service import generate_order_number


@pytest.mark.unit
class TestOrderStatusTransitions:
    """Test suite for the fulfilment transition graph."""

    def test_linear_progression(self) -> None:
        """Test each step of the happy path is legal."""
        path = [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY,
            OrderStatus.DELIVERED,
        ]
        for current, new in zip(path, path[1:]):
            assert can_transition(current, new)

    def test_skipping_steps_is_illegal(self) -> None:
        """Test jumps over intermediate states are rejected."""
        assert not can_transition(OrderStatus.PENDING, OrderStatus.DELIVERED)
        assert not can_transition(OrderStatus.CONFIRMED, OrderStatus.READY)
        assert not can_transition(OrderStatus.READY, OrderStatus.PENDING)

    def test_cancel_from_non_terminal_states(self) -> None:
        """Test cancellation is allowed from every live state."""
        for status in OrderStatus:
            if status in TERMINAL_ORDER_STATUSES:
                assert not can_transition(status, OrderStatus.CANCELLED)
            else:
                assert can_transition(status, OrderStatus.CANCELLED)

    def test_terminal_states(self) -> None:
        """Test delivered and cancelled are the only terminal states."""
        assert TERMINAL_ORDER_STATUSES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
        assert set(ORDER_STATUS_TRANSITIONS) == set(OrderStatus)


@pytest.mark.unit
class TestOrderNumber:
    """Test suite for generate_order_number."""

    def test_format(self) -> None:
        """Test the number embeds the creation timestamp."""
        number = generate_order_number(datetime(2026, 10, 19, 18, 30, 5, 123456))

        assert number.startswith("ORD-20261019183005123456-")
        assert len(number.rsplit("-", 1)[1]) == 4

    def test_sortable_by_creation_time(self) -> None:
        """Test later orders sort after earlier ones."""
        earlier = generate_order_number(datetime(2026, 10, 19, 9, 59, 59, 999999))
        later = generate_order_number(datetime(2026, 10, 19, 10, 0, 0, 0))

        assert earlier < later

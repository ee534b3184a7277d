"""Unit tests for request schemas."""

import uuid
from datetime import date

import pytest
from pydantic import ValidationError

from storefront.schemas.order import OrderCreate
from storefront.schemas.reservation import ReservationCreate


def _order_payload(**overrides) -> dict:
    payload = {
        "items": [{"menuItemId": str(uuid.uuid4()), "quantity": 2}],
        "customerInfo": {"name": "Ada Lovelace", "email": "ada@analytical.io", "phone": "555-0100"},
        "paymentMethod": {"type": "card", "last4": "4242"},
    }
    payload.update(overrides)
    return payload


def _reservation_payload(**overrides) -> dict:
    payload = {
        "customerName": "Grace Hopper",
        "customerEmail": "grace@navy-mail.org",
        "customerPhone": "555-0199",
        "date": "2026-11-20",
        "time": "19:30",
        "partySize": 4,
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestOrderCreate:
    """Test suite for OrderCreate validation."""

    def test_accepts_camel_case(self) -> None:
        """Test the storefront client's camelCase payload."""
        order = OrderCreate.model_validate(_order_payload())

        assert order.items[0].quantity == 2
        assert order.customer_info.name == "Ada Lovelace"
        assert order.delivery_address is None
        assert order.special_instructions == ""

    def test_accepts_plain_id_for_menu_item(self) -> None:
        """Test the cart's "id" key is read as the menu item id."""
        item_id = uuid.uuid4()
        order = OrderCreate.model_validate(
            _order_payload(items=[{"id": str(item_id), "quantity": 1}])
        )

        assert order.items[0].menu_item_id == item_id

    def test_client_price_is_dropped(self) -> None:
        """Test a price sent by the client never reaches the model."""
        order = OrderCreate.model_validate(
            _order_payload(items=[{"menuItemId": str(uuid.uuid4()), "quantity": 1, "price": 0.01}])
        )

        assert not hasattr(order.items[0], "price")

    def test_rejects_empty_cart(self) -> None:
        """Test at least one line is required."""
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(_order_payload(items=[]))

    def test_rejects_zero_quantity(self) -> None:
        """Test quantities must be positive."""
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(
                _order_payload(items=[{"menuItemId": str(uuid.uuid4()), "quantity": 0}])
            )

    def test_rejects_bad_customer_info(self) -> None:
        """Test blank name and malformed email are rejected."""
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(
                _order_payload(customerInfo={"name": "  ", "email": "x@y.io", "phone": "1"})
            )
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(
                _order_payload(customerInfo={"name": "A", "email": "not-an-email", "phone": "1"})
            )

    def test_requires_payment_method(self) -> None:
        """Test a payment descriptor must be present."""
        payload = _order_payload()
        del payload["paymentMethod"]

        with pytest.raises(ValidationError):
            OrderCreate.model_validate(payload)


@pytest.mark.unit
class TestReservationCreate:
    """Test suite for ReservationCreate validation."""

    def test_valid_payload(self) -> None:
        """Test a well-formed reservation parses."""
        reservation = ReservationCreate.model_validate(_reservation_payload())

        assert reservation.reservation_date == date(2026, 11, 20)
        assert reservation.reservation_time == "19:30"
        assert reservation.party_size == 4

    def test_single_digit_hour_is_padded(self) -> None:
        """Test 9:05 is stored as 09:05 so slot keys compare equal."""
        reservation = ReservationCreate.model_validate(_reservation_payload(time="9:05"))

        assert reservation.reservation_time == "09:05"

    @pytest.mark.parametrize("bad_time", ["24:00", "19:60", "7pm", "19:3"])
    def test_rejects_bad_time(self, bad_time: str) -> None:
        """Test times outside HH:MM 24-hour are rejected."""
        with pytest.raises(ValidationError):
            ReservationCreate.model_validate(_reservation_payload(time=bad_time))

    @pytest.mark.parametrize("party_size", [0, 21])
    def test_rejects_party_size_out_of_range(self, party_size: int) -> None:
        """Test party size must be within 1..20."""
        with pytest.raises(ValidationError):
            ReservationCreate.model_validate(_reservation_payload(partySize=party_size))

    def test_rejects_bad_date(self) -> None:
        """Test the date must be a calendar date."""
        with pytest.raises(ValidationError):
            ReservationCreate.model_validate(_reservation_payload(date="2026-02-30"))

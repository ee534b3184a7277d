"""
Domain events announced on Kafka after the owning transaction commits.

Publishing is best-effort: the database is the record of truth, so a broker
failure is logged and counted but never fails the request that produced it.
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError
from opentelemetry.propagate import inject
from pydantic import BaseModel, Field

from storefront.database import utcnow
from storefront.metrics import EVENTS_PUBLISHED

logger = logging.getLogger(__name__)

ORDER_PLACED_TOPIC = "order.placed"
ORDER_STATUS_CHANGED_TOPIC = "order.status_changed"
RESERVATION_CONFIRMED_TOPIC = "reservation.confirmed"
RESERVATION_CANCELLED_TOPIC = "reservation.cancelled"


class EventBase(BaseModel):
    event_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_version: int = 1
    correlation_id: str  # carries X-Request-ID from the HTTP layer
    occurred_at: datetime = Field(default_factory=utcnow)

    model_config = {"extra": "ignore"}


class OrderItemEvent(BaseModel):
    menu_item_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    model_config = {"extra": "ignore"}


class OrderPlacedEvent(EventBase):
    order_id: uuid.UUID
    order_number: str
    customer_name: str
    customer_email: str
    subtotal: Decimal
    total_amount: Decimal
    estimated_delivery_time: datetime
    items: list[OrderItemEvent]


class OrderStatusChangedEvent(EventBase):
    order_id: uuid.UUID
    order_number: str
    previous_status: str
    status: str


class ReservationEvent(EventBase):
    reservation_id: uuid.UUID
    customer_email: str
    reservation_date: date
    reservation_time: str
    party_size: int
    status: str


async def publish_event(
    producer: AIOKafkaProducer | None,
    topic: str,
    key: uuid.UUID,
    event: EventBase,
) -> bool:
    """Send ``event`` to ``topic``; returns False when disabled or the send failed."""
    if producer is None:
        return False

    # Propagate W3C trace context so consumers join the request's trace
    outgoing_headers: dict[str, str] = {}
    inject(outgoing_headers)
    kafka_headers = [(k, v.encode()) for k, v in outgoing_headers.items()]

    try:
        await producer.send_and_wait(
            topic,
            key=str(key).encode(),
            value=event.model_dump_json().encode(),
            headers=kafka_headers,
        )
    except KafkaError as exc:
        EVENTS_PUBLISHED.labels(topic, "failed").inc()
        logger.error(
            "Failed to publish event",
            extra={
                "topic": topic,
                "key": str(key),
                "correlation_id": event.correlation_id,
                "error": str(exc),
            },
        )
        return False

    EVENTS_PUBLISHED.labels(topic, "sent").inc()
    logger.info(
        "Published event",
        extra={"topic": topic, "key": str(key), "correlation_id": event.correlation_id},
    )
    return True

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

from aiokafka import AIOKafkaProducer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.config import settings
from storefront.database import utcnow
from storefront.errors import (
    InvalidStatusTransitionError,
    MenuItemNotFoundError,
    MenuItemUnavailableError,
    OrderNotFoundError,
    StorefrontError,
)
from storefront.events import (
    ORDER_PLACED_TOPIC,
    ORDER_STATUS_CHANGED_TOPIC,
    OrderItemEvent,
    OrderPlacedEvent,
    OrderStatusChangedEvent,
    publish_event,
)
from storefront.metrics import ORDER_VALUE, ORDERS_PLACED, ORDERS_REJECTED
from storefront.models.order import (
    TERMINAL_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    can_transition,
)
from storefront.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderItemResponse,
    OrderResponse,
)
from storefront.services import menu_service
from storefront.services.pricing import calculate_totals

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def generate_order_number(now: datetime) -> str:
    """Timestamp-derived, lexically sortable, with a short random tail against collisions."""
    return f"ORD-{now:%Y%m%d%H%M%S%f}-{secrets.token_hex(2).upper()}"


def build_created_response(order: Order) -> OrderCreatedResponse:
    return OrderCreatedResponse(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        subtotal=order.subtotal,
        tax=order.tax_amount,
        delivery_fee=order.delivery_fee,
        total=order.total_amount,
        estimated_delivery_time=order.estimated_delivery_time,
        created_at=order.created_at,
    )


def build_response(order: Order) -> OrderResponse:
    items = [
        OrderItemResponse(
            id=item.id,
            menu_item_id=item.menu_item_id,
            name=item.menu_item_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
            customizations=item.customizations or {},
            special_instructions=item.special_instructions,
        )
        for item in order.items
    ]

    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        customer_phone=order.customer_phone,
        status=order.status,
        payment_status=order.payment_status,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        delivery_fee=order.delivery_fee,
        total_amount=order.total_amount,
        delivery_address=order.delivery_address,
        special_instructions=order.special_instructions,
        payment_method=order.payment_method,
        estimated_delivery_time=order.estimated_delivery_time,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


async def _fetch_order(
    db: AsyncSession, order_id: uuid.UUID, for_update: bool = False
) -> Order | None:
    stmt = (
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalars().first()


async def _price_lines(db: AsyncSession, order_data: OrderCreate) -> tuple[list[dict], Decimal]:
    """Re-price every requested line from the catalog; client prices are never read."""
    menu_items = await menu_service.get_items_by_ids(
        db, [item.menu_item_id for item in order_data.items]
    )

    line_items: list[dict] = []
    subtotal = Decimal("0.00")
    for req_item in order_data.items:
        menu_item = menu_items.get(req_item.menu_item_id)
        if menu_item is None:
            raise MenuItemNotFoundError(req_item.menu_item_id)
        if not menu_item.is_available:
            raise MenuItemUnavailableError(menu_item.id, menu_item.name)

        unit_price = menu_item.price
        line_subtotal = unit_price * req_item.quantity
        subtotal += line_subtotal
        line_items.append(
            {
                "menu_item_id": menu_item.id,
                "menu_item_name": menu_item.name,
                "quantity": req_item.quantity,
                "unit_price": unit_price,
                "subtotal": line_subtotal,
                "customizations": req_item.customizations,
                "special_instructions": req_item.special_instructions,
            }
        )
    return line_items, subtotal


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> OrderResponse | None:
    order = await _fetch_order(db, order_id)
    if order is None:
        return None
    return build_response(order)


async def create_order(
    db: AsyncSession,
    order_data: OrderCreate,
    request_id: str,
    producer: AIOKafkaProducer | None = None,
) -> Order:
    """
    Price and persist an order with its lines in a single transaction.

    Any failure rolls the whole transaction back, so no order or order-item
    rows survive a rejected checkout.
    """
    try:
        # 1. Validate and price items against the catalog
        line_items, subtotal = await _price_lines(db, order_data)

        # 2. Calculate totals
        totals = calculate_totals(subtotal)
        created_at = utcnow()

        # 3. Persist order + items
        order = Order(
            order_number=generate_order_number(created_at),
            customer_name=order_data.customer_info.name,
            customer_email=str(order_data.customer_info.email),
            customer_phone=order_data.customer_info.phone,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            subtotal=totals.subtotal,
            tax_amount=totals.tax,
            delivery_fee=totals.delivery_fee,
            total_amount=totals.total,
            delivery_address=(
                order_data.delivery_address.model_dump(by_alias=True)
                if order_data.delivery_address
                else None
            ),
            special_instructions=order_data.special_instructions,
            payment_method=order_data.payment_method,
            estimated_delivery_time=created_at
            + timedelta(minutes=settings.delivery_estimate_minutes),
            created_at=created_at,
            updated_at=created_at,
            items=[OrderItem(**line) for line in line_items],
        )
        db.add(order)
        await db.commit()
    except StorefrontError as exc:
        await db.rollback()
        reason = "item_not_found" if isinstance(exc, MenuItemNotFoundError) else "item_unavailable"
        ORDERS_REJECTED.labels(reason).inc()
        logger.warning(
            "Order rejected",
            extra={"request_id": request_id, "reason": exc.message},
        )
        raise
    except Exception:
        await db.rollback()
        ORDERS_REJECTED.labels("error").inc()
        logger.exception(
            "Order creation failed, transaction rolled back",
            extra={"request_id": request_id},
        )
        raise

    ORDERS_PLACED.inc()
    ORDER_VALUE.observe(float(order.total_amount))
    logger.info(
        "Order persisted",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "request_id": request_id,
            "amount": float(order.total_amount),
            "item_count": len(line_items),
        },
    )

    # 4. Announce the committed order
    event = OrderPlacedEvent(
        correlation_id=request_id,
        order_id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        subtotal=order.subtotal,
        total_amount=order.total_amount,
        estimated_delivery_time=order.estimated_delivery_time,
        items=[
            OrderItemEvent(
                menu_item_id=line["menu_item_id"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                subtotal=line["subtotal"],
            )
            for line in line_items
        ],
    )
    await publish_event(producer, ORDER_PLACED_TOPIC, order.id, event)
    return order


async def _change_status(
    db: AsyncSession,
    order_id: uuid.UUID,
    new_status: OrderStatus,
    request_id: str,
    producer: AIOKafkaProducer | None,
    strict: bool,
) -> Order:
    order = await _fetch_order(db, order_id, for_update=True)
    if order is None:
        await db.rollback()
        raise OrderNotFoundError(order_id)

    previous = order.status
    if strict and new_status != previous and not can_transition(previous, new_status):
        await db.rollback()
        raise InvalidStatusTransitionError(previous.value, new_status.value)

    order.status = new_status
    order.updated_at = utcnow()
    await db.commit()

    logger.info(
        "Order status updated",
        extra={
            "order_id": str(order.id),
            "request_id": request_id,
            "previous_status": previous.value,
            "status": new_status.value,
        },
    )

    event = OrderStatusChangedEvent(
        correlation_id=request_id,
        order_id=order.id,
        order_number=order.order_number,
        previous_status=previous.value,
        status=new_status.value,
    )
    await publish_event(producer, ORDER_STATUS_CHANGED_TOPIC, order.id, event)
    return order


async def update_order_status(
    db: AsyncSession,
    order_id: uuid.UUID,
    new_status: OrderStatus,
    request_id: str,
    producer: AIOKafkaProducer | None = None,
    strict: bool | None = None,
) -> Order:
    """
    Set an order's status.

    By default any enumerated status is accepted from any state (staff
    override). With strict transitions enabled only moves along the
    fulfilment graph, or cancellation of a live order, are allowed.
    """
    if strict is None:
        strict = settings.order_status_strict_transitions
    return await _change_status(db, order_id, new_status, request_id, producer, strict)


async def cancel_order(
    db: AsyncSession,
    order_id: uuid.UUID,
    request_id: str,
    producer: AIOKafkaProducer | None = None,
) -> Order:
    order = await _fetch_order(db, order_id, for_update=True)
    if order is None:
        await db.rollback()
        raise OrderNotFoundError(order_id)
    if order.status in TERMINAL_ORDER_STATUSES:
        await db.rollback()
        raise InvalidStatusTransitionError(order.status.value, OrderStatus.CANCELLED.value)
    return await _change_status(
        db, order_id, OrderStatus.CANCELLED, request_id, producer, strict=True
    )

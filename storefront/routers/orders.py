import logging
import uuid

from aiokafka import AIOKafkaProducer
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.dependencies import get_producer, request_id
from storefront.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
    OrderSummary,
)
from storefront.services import order_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    body: OrderCreate,
    req_id: str = Depends(request_id),
    db: AsyncSession = Depends(get_db),
    producer: AIOKafkaProducer | None = Depends(get_producer),
) -> OrderCreatedResponse:
    logger.info(
        "Received place_order request",
        extra={
            "request_id": req_id,
            "customer_email": str(body.customer_info.email),
            "line_count": len(body.items),
        },
    )
    order = await order_service.create_order(db, body, req_id, producer)
    return order_service.build_created_response(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    req_id: str = Depends(request_id),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    logger.info(
        "Received get_order request",
        extra={"request_id": req_id, "order_id": str(order_id)},
    )
    order = await order_service.get_order(db, order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.patch("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: uuid.UUID,
    body: OrderStatusUpdate,
    req_id: str = Depends(request_id),
    db: AsyncSession = Depends(get_db),
    producer: AIOKafkaProducer | None = Depends(get_producer),
) -> OrderStatusResponse:
    order = await order_service.update_order_status(db, order_id, body.status, req_id, producer)
    return OrderStatusResponse(
        message="Order status updated successfully",
        order=OrderSummary.model_validate(order),
    )


@router.patch("/{order_id}/cancel", response_model=OrderStatusResponse)
async def cancel_order(
    order_id: uuid.UUID,
    req_id: str = Depends(request_id),
    db: AsyncSession = Depends(get_db),
    producer: AIOKafkaProducer | None = Depends(get_producer),
) -> OrderStatusResponse:
    order = await order_service.cancel_order(db, order_id, req_id, producer)
    return OrderStatusResponse(
        message="Order cancelled successfully",
        order=OrderSummary.model_validate(order),
    )

import logging
import uuid
from datetime import date

from aiokafka import AIOKafkaProducer
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.dependencies import get_producer, request_id
from storefront.schemas.reservation import (
    AvailabilityResponse,
    ReservationCancelResponse,
    ReservationCreate,
    ReservationCreatedResponse,
    ReservationResponse,
)
from storefront.services import reservation_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=ReservationCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    body: ReservationCreate,
    req_id: str = Depends(request_id),
    db: AsyncSession = Depends(get_db),
    producer: AIOKafkaProducer | None = Depends(get_producer),
) -> ReservationCreatedResponse:
    logger.info(
        "Received create_reservation request",
        extra={
            "request_id": req_id,
            "date": body.reservation_date.isoformat(),
            "time": body.reservation_time,
            "party_size": body.party_size,
        },
    )
    reservation = await reservation_service.create_reservation(db, body, req_id, producer)
    return ReservationCreatedResponse(
        reservation_id=reservation.id,
        customer_name=reservation.customer_name,
        reservation_date=reservation.reservation_date,
        reservation_time=reservation.reservation_time,
        party_size=reservation.party_size,
        status=reservation.status,
        created_at=reservation.created_at,
    )


# Declared before /{reservation_id} so "availability" is not parsed as an id
@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    reservation_date: date = Query(alias="date"),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    return await reservation_service.get_availability(db, reservation_date)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ReservationResponse:
    reservation = await reservation_service.get_reservation(db, reservation_id)
    if reservation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return ReservationResponse.model_validate(reservation)


@router.patch("/{reservation_id}/cancel", response_model=ReservationCancelResponse)
async def cancel_reservation(
    reservation_id: uuid.UUID,
    req_id: str = Depends(request_id),
    db: AsyncSession = Depends(get_db),
    producer: AIOKafkaProducer | None = Depends(get_producer),
) -> ReservationCancelResponse:
    reservation = await reservation_service.cancel_reservation(db, reservation_id, req_id, producer)
    return ReservationCancelResponse(reservation=ReservationResponse.model_validate(reservation))

"""
Reservation admission control.

Every active (pending or confirmed) reservation occupies one numbered seat of
its (date, time) slot, and ``uq_reservation_slot_seat`` makes each seat
unique. Admission claims the lowest free seat; when two requests race for the
same seat the database accepts one insert and rejects the other, and the loser
re-reads the slot. A slot therefore never holds more than the configured
capacity, however many requests arrive at once.
"""

import logging
import uuid
from datetime import date

from aiokafka import AIOKafkaProducer
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.database import utcnow
from storefront.errors import (
    ReservationNotCancellableError,
    ReservationNotFoundError,
    SlotFullyBookedError,
)
from storefront.events import (
    RESERVATION_CANCELLED_TOPIC,
    RESERVATION_CONFIRMED_TOPIC,
    ReservationEvent,
    publish_event,
)
from storefront.metrics import RESERVATION_OUTCOMES
from storefront.models.reservation import (
    ACTIVE_RESERVATION_STATUSES,
    Reservation,
    ReservationStatus,
)
from storefront.schemas.reservation import (
    AvailabilityResponse,
    ReservationCreate,
    TimeSlotAvailability,
)

logger = logging.getLogger(__name__)


def _reservation_event(reservation: Reservation, request_id: str) -> ReservationEvent:
    return ReservationEvent(
        correlation_id=request_id,
        reservation_id=reservation.id,
        customer_email=reservation.customer_email,
        reservation_date=reservation.reservation_date,
        reservation_time=reservation.reservation_time,
        party_size=reservation.party_size,
        status=reservation.status.value,
    )


async def _taken_seats(db: AsyncSession, reservation_date: date, reservation_time: str) -> set[int]:
    result = await db.execute(
        select(Reservation.slot_seat).where(
            Reservation.reservation_date == reservation_date,
            Reservation.reservation_time == reservation_time,
            Reservation.slot_seat.is_not(None),
        )
    )
    return {seat for seat in result.scalars().all()}


async def get_reservation(db: AsyncSession, reservation_id: uuid.UUID) -> Reservation | None:
    return await db.get(Reservation, reservation_id)


async def create_reservation(
    db: AsyncSession,
    data: ReservationCreate,
    request_id: str,
    producer: AIOKafkaProducer | None = None,
    capacity: int | None = None,
) -> Reservation:
    capacity = settings.reservation_slot_capacity if capacity is None else capacity
    slot = {"date": data.reservation_date.isoformat(), "time": data.reservation_time}

    # Runs until the slot reads as full. The attempt limit only stops churn
    # from seats that keep being released and reclaimed concurrently.
    max_attempts = max(capacity, settings.reservation_admission_max_attempts)
    for _ in range(max_attempts):
        taken = await _taken_seats(db, data.reservation_date, data.reservation_time)
        free = [seat for seat in range(1, capacity + 1) if seat not in taken]
        if not free:
            break

        seat = free[0]
        reservation = Reservation(
            customer_name=data.customer_name,
            customer_email=str(data.customer_email),
            customer_phone=data.customer_phone,
            reservation_date=data.reservation_date,
            reservation_time=data.reservation_time,
            party_size=data.party_size,
            special_requests=data.special_requests,
            status=ReservationStatus.CONFIRMED,
            slot_seat=seat,
        )
        db.add(reservation)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            if seat not in await _taken_seats(db, data.reservation_date, data.reservation_time):
                # Not a seat conflict; surface the real constraint failure
                raise
            RESERVATION_OUTCOMES.labels("seat_conflict").inc()
            logger.info(
                "Seat claimed concurrently, re-reading slot",
                extra={"request_id": request_id, "seat": seat, **slot},
            )
            continue

        RESERVATION_OUTCOMES.labels("confirmed").inc()
        logger.info(
            "Reservation confirmed",
            extra={
                "reservation_id": str(reservation.id),
                "request_id": request_id,
                "seat": seat,
                "party_size": reservation.party_size,
                **slot,
            },
        )
        await publish_event(
            producer,
            RESERVATION_CONFIRMED_TOPIC,
            reservation.id,
            _reservation_event(reservation, request_id),
        )
        return reservation
    else:
        logger.warning(
            "Seat admission gave up after repeated conflicts",
            extra={"request_id": request_id, "attempts": max_attempts, **slot},
        )

    RESERVATION_OUTCOMES.labels("fully_booked").inc()
    logger.info("Slot fully booked", extra={"request_id": request_id, **slot})
    raise SlotFullyBookedError()


async def get_availability(
    db: AsyncSession, reservation_date: date, capacity: int | None = None
) -> AvailabilityResponse:
    capacity = settings.reservation_slot_capacity if capacity is None else capacity
    result = await db.execute(
        select(Reservation.reservation_time, func.count())
        .where(
            Reservation.reservation_date == reservation_date,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
        .group_by(Reservation.reservation_time)
    )
    counts = {time: count for time, count in result.all()}

    return AvailabilityResponse(
        reservation_date=reservation_date,
        time_slots=[
            TimeSlotAvailability(
                time=slot,
                available=counts.get(slot, 0) < capacity,
                reservation_count=counts.get(slot, 0),
            )
            for slot in settings.reservation_time_slots
        ],
    )


async def cancel_reservation(
    db: AsyncSession,
    reservation_id: uuid.UUID,
    request_id: str,
    producer: AIOKafkaProducer | None = None,
) -> Reservation:
    """Cancel a pending or confirmed reservation and release its seat."""
    result = await db.execute(
        update(Reservation)
        .where(
            Reservation.id == reservation_id,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
        .values(status=ReservationStatus.CANCELLED, slot_seat=None, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    reservation = await db.get(Reservation, reservation_id, populate_existing=True)
    if result.rowcount == 0:
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        raise ReservationNotCancellableError(reservation_id, reservation.status.value)

    RESERVATION_OUTCOMES.labels("cancelled").inc()
    logger.info(
        "Reservation cancelled",
        extra={"reservation_id": str(reservation_id), "request_id": request_id},
    )
    await publish_event(
        producer,
        RESERVATION_CANCELLED_TOPIC,
        reservation.id,
        _reservation_event(reservation, request_id),
    )
    return reservation

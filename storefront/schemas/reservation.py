import re
import uuid
from datetime import date, datetime

from pydantic import EmailStr, Field, field_validator

from storefront.models.reservation import ReservationStatus
from storefront.schemas.base import CamelModel

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


class ReservationCreate(CamelModel):
    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=1)
    reservation_date: date = Field(alias="date")
    reservation_time: str = Field(alias="time")
    party_size: int = Field(ge=1, le=20)
    special_requests: str = ""

    model_config = {**CamelModel.model_config, "str_strip_whitespace": True}

    @field_validator("reservation_time")
    @classmethod
    def normalise_time(cls, value: str) -> str:
        match = _TIME_RE.match(value)
        if match is None:
            raise ValueError("Valid time is required (HH:MM, 24-hour)")
        return f"{int(match.group(1)):02d}:{match.group(2)}"


class ReservationCreatedResponse(CamelModel):
    reservation_id: uuid.UUID
    customer_name: str
    reservation_date: date = Field(alias="date")
    reservation_time: str = Field(alias="time")
    party_size: int
    status: ReservationStatus
    created_at: datetime
    message: str = "Reservation confirmed successfully"


class ReservationResponse(CamelModel):
    id: uuid.UUID
    customer_name: str
    customer_email: str
    customer_phone: str
    reservation_date: date = Field(alias="date")
    reservation_time: str = Field(alias="time")
    party_size: int
    special_requests: str
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime


class ReservationCancelResponse(CamelModel):
    message: str = "Reservation cancelled successfully"
    reservation: ReservationResponse


class TimeSlotAvailability(CamelModel):
    time: str
    available: bool
    reservation_count: int


class AvailabilityResponse(CamelModel):
    reservation_date: date = Field(alias="date")
    time_slots: list[TimeSlotAvailability]

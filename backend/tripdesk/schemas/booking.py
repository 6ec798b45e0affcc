import uuid

from pydantic import BaseModel, Field


class BookingRatingUpdate(BaseModel):
    rating: int = Field(ge=1, le=5)


class BookingRatingOut(BaseModel):
    booking_id: uuid.UUID
    vendor_id: uuid.UUID
    rating: int
    vendor_rating: float | None = None
    rated_bookings: int | None = None

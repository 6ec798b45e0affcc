import enum
import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from tripdesk.db.base import Base, TimestampMixin, UUIDMixin


class BookingStatus(str, enum.Enum):
    pending = "Pending"
    confirmed = "Confirmed"
    canceled = "Canceled"


class Booking(Base, UUIDMixin, TimestampMixin):
    """Only the columns the rating flow touches are mapped."""

    __tablename__ = "bookings"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("vendors.id"), nullable=False, index=True
    )
    agent_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True
    )
    booking_status: Mapped[str] = mapped_column(String(20), nullable=False, default=BookingStatus.pending.value)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5

import uuid

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from tripdesk.db.base import Base, TimestampMixin, UUIDMixin


class Vendor(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "vendors"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_person: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    service_area: Mapped[str] = mapped_column(String(255), nullable=False)
    price_range: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-5
    commission_rate: Mapped[float] = mapped_column(Numeric(5, 4), nullable=False, default=0)  # 0-1
    rating: Mapped[float | None] = mapped_column(Numeric(3, 2), nullable=True)  # maintained by update-vendor-ratings
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


# ─── Join tables ───

class VendorServiceType(Base):
    __tablename__ = "vendor_service_types"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("vendors.id", ondelete="CASCADE"), primary_key=True
    )
    service_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("service_types.id", ondelete="CASCADE"), primary_key=True
    )


class VendorServiceTypeCommission(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "vendor_service_type_commissions"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("service_types.id", ondelete="CASCADE"), nullable=False
    )
    commission_rate: Mapped[float] = mapped_column(Numeric(5, 4), nullable=False)


class VendorTag(Base):
    __tablename__ = "vendor_tags"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("vendors.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

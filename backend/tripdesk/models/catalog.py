from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tripdesk.db.base import Base, NamedCatalogMixin, TimestampMixin, UUIDMixin


class Tag(Base, NamedCatalogMixin):
    __tablename__ = "tags"


class ServiceType(Base, NamedCatalogMixin):
    __tablename__ = "service_types"


class LocationTag(Base, UUIDMixin, TimestampMixin):
    """Continent > country > state/province > city hierarchy, one row per node."""

    __tablename__ = "location_tags"
    __table_args__ = (
        UniqueConstraint("continent", "country", "state_province", "city", name="location_tags_path_key"),
    )

    continent: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state_province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

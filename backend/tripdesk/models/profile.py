from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from tripdesk.db.base import Base, TimestampMixin, UUIDMixin


class Profile(Base, UUIDMixin, TimestampMixin):
    """Agent profile; the row id equals the auth service's user id."""

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)  # SuperAdmin, Admin, Agent
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

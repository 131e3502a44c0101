"""User and hotel staff assignment models."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class UserRole(str, Enum):
    """Platform-wide role."""
    CUSTOMER = "customer"
    ROOM_ADMIN = "room_admin"


class StaffRole(str, Enum):
    """Role a staff member holds at their assigned hotel."""
    HOTEL_ADMIN = "hotel_admin"
    HOTEL_CASHIER = "hotel_cashier"


class User(Base):
    """Internal user resolved from an external identity token subject."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    role: Mapped[UserRole] = mapped_column(String(20), nullable=False, default=UserRole.CUSTOMER, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, external_id='{self.external_id}', role={self.role})>"


class HotelStaff(Base):
    """Assignment of a user to the single hotel they work at."""

    __tablename__ = "hotel_staff"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )
    hotel_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[StaffRole] = mapped_column(String(20), nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<HotelStaff(user_id={self.user_id}, hotel_id={self.hotel_id}, role={self.role})>"

"""
Car & UserCar models — the catalog and the rentals booked against it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Index, Integer,
                        String)
from sqlalchemy.orm import relationship

from carrental.db.base import Base


class Car(Base):
    __tablename__ = "cars"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    price: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    size: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]
    # SMALL | MEDIUM | LARGE
    image: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    is_currently_rented: bool = Column(  # type: ignore[assignment]
        Boolean, nullable=False, default=False, server_default="false"
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    rentals = relationship(
        "UserCar",
        back_populates="car",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )


class UserCar(Base):
    """One rental: ``user_id`` holds ``car_id`` over ``[rent_started_at, rent_ended_at)``.

    A NULL ``rent_ended_at`` means the rental has no planned end yet.
    """

    __tablename__ = "user_cars"
    __table_args__ = (Index("ix_user_cars_car_interval", "car_id", "rent_started_at", "rent_ended_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    car_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False
    )
    rent_started_at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    rent_ended_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    car = relationship("Car", back_populates="rentals", lazy="raise")
    user = relationship("User", back_populates="rentals", lazy="raise")

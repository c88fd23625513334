"""
Rental booking — interval overlap rules and the atomic reservation.

Intervals are half-open ``[start, end)``; a missing end means the rental is
open-ended and blocks the car indefinitely.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.core.exceptions import CarAlreadyRentedError, RecordNotFoundError
from carrental.models.car import Car, UserCar
from carrental.schemas.car import CarRead

logger = logging.getLogger(__name__)


def overlaps(started_at: datetime, ended_at: datetime | None):
    """SQL predicate: an existing rental intersects ``[started_at, ended_at)``."""
    clauses = [or_(UserCar.rent_ended_at.is_(None), UserCar.rent_ended_at > started_at)]
    if ended_at is not None:
        clauses.append(UserCar.rent_started_at < ended_at)
    return clauses


def unavailable_at(instant: datetime):
    """SQL predicate on ``Car``: some rental ends at/after ``instant`` or never ends."""
    return exists().where(
        UserCar.car_id == Car.id,
        or_(UserCar.rent_ended_at.is_(None), UserCar.rent_ended_at >= instant),
    )


async def try_reserve(
    db: AsyncSession,
    car_id: int,
    user_id: int,
    started_at: datetime,
    ended_at: datetime | None,
) -> UserCar:
    """Book ``car_id`` for ``user_id`` or raise ``CarAlreadyRentedError``.

    The car row is locked (``SELECT ... FOR UPDATE``) before the conflict
    check, so concurrent bookings for the same car run one after the other
    and the check and insert commit together.
    """
    result = await db.execute(select(Car).where(Car.id == car_id).with_for_update())
    car = result.scalar_one_or_none()
    if car is None:
        await db.rollback()
        raise RecordNotFoundError("Car")

    conflict = await db.execute(
        select(UserCar.id).where(UserCar.car_id == car_id, *overlaps(started_at, ended_at)).limit(1)
    )
    if conflict.scalar_one_or_none() is not None:
        car_payload = CarRead.model_validate(car).model_dump(mode="json", by_alias=True)
        await db.rollback()
        logger.info("Car %s already rented, booking by user %s rejected", car_id, user_id)
        raise CarAlreadyRentedError(car_payload)

    rental = UserCar(
        user_id=user_id,
        car_id=car_id,
        rent_started_at=started_at,
        rent_ended_at=ended_at,
    )
    db.add(rental)
    await db.commit()
    await db.refresh(rental)
    logger.info("Car %s rented by user %s (rental %s)", car_id, user_id, rental.id)
    return rental

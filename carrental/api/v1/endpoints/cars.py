"""
Car catalog CRUD + rental booking endpoints.

- GET operations are public.
- POST / PUT / DELETE on cars require the ADMIN role.
- POST /cars/{id}/rent requires the CUSTOMER role.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.v1.deps import get_db, require_admin, require_customer
from carrental.api.v1.pagination import PageParams, build_pagination, page_params
from carrental.core.exceptions import RecordNotFoundError, UnprocessableEntityError
from carrental.models.car import Car
from carrental.schemas.auth import TokenIdentity
from carrental.schemas.car import (CarCreate, CarList, CarRead, CarSize,
                                   CarUpdate, ListMeta, Pagination,
                                   RentalRead, RentRequest)
from carrental.schemas.common import ensure_utc
from carrental.services.rental import try_reserve, unavailable_at

router = APIRouter(prefix="/cars", tags=["cars"])
logger = logging.getLogger(__name__)


async def _commit_car(db: AsyncSession, car: Car, action: str) -> Car:
    """Commit pending changes to ``car``; persistence failures become a 422."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Could not %s car: %s", action, exc, exc_info=True)
        raise UnprocessableEntityError(type(exc).__name__, f"Car could not be {action}d") from exc
    await db.refresh(car)
    return car


@router.get("", response_model=CarList)
async def list_cars(
    size: CarSize | None = Query(default=None),
    available_at: datetime | None = Query(default=None, alias="availableAt"),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
) -> CarList:
    """List cars, optionally by size and by availability at an instant."""
    filters = []
    if size is not None:
        filters.append(Car.size == size.value)
    if available_at is not None:
        filters.append(~unavailable_at(ensure_utc(available_at)))

    count = await db.scalar(select(func.count(Car.id)).where(*filters))
    result = await db.execute(
        select(Car)
        .where(*filters)
        .order_by(Car.id)
        .offset(paging.offset)
        .limit(paging.page_size)
    )
    cars = result.scalars().all()

    pagination = build_pagination(paging.page, paging.page_size, count or 0)
    return CarList(
        cars=[CarRead.model_validate(c) for c in cars],
        meta=ListMeta(pagination=Pagination.model_validate(pagination)),
    )


@router.get("/{car_id}", response_model=CarRead)
async def get_car(car_id: int, db: AsyncSession = Depends(get_db)) -> Car:
    car = await db.get(Car, car_id)
    if car is None:
        raise RecordNotFoundError("Car")
    return car


@router.post("", response_model=CarRead, status_code=status.HTTP_201_CREATED)
async def create_car(
    body: CarCreate,
    db: AsyncSession = Depends(get_db),
    admin: TokenIdentity = Depends(require_admin),
) -> Car:
    car = Car(**body.model_dump())
    db.add(car)
    car = await _commit_car(db, car, "save")
    logger.info("Car %s created by %s", car.id, admin.email)
    return car


@router.put("/{car_id}", response_model=CarRead)
async def update_car(
    car_id: int,
    body: CarUpdate,
    db: AsyncSession = Depends(get_db),
    admin: TokenIdentity = Depends(require_admin),
) -> Car:
    """Apply the supplied fields to an existing car."""
    car = await db.get(Car, car_id)
    if car is None:
        raise UnprocessableEntityError("RecordNotFoundError", f"Car {car_id} does not exist")

    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(car, field, value)

    car = await _commit_car(db, car, "update")
    logger.info("Car %s updated by %s: %s", car_id, admin.email, sorted(changes))
    return car


@router.delete("/{car_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_car(
    car_id: int,
    db: AsyncSession = Depends(get_db),
    admin: TokenIdentity = Depends(require_admin),
) -> Response:
    """Delete a car. Answers 204 whether or not the car existed."""
    result = await db.execute(delete(Car).where(Car.id == car_id))
    await db.commit()
    logger.info("Car %s delete requested by %s (%s row(s))", car_id, admin.email, result.rowcount)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{car_id}/rent", response_model=RentalRead, status_code=status.HTTP_201_CREATED)
async def rent_car(
    car_id: int,
    body: RentRequest,
    db: AsyncSession = Depends(get_db),
    customer: TokenIdentity = Depends(require_customer),
) -> RentalRead:
    """Book a car for the calling customer over the requested interval."""
    rental = await try_reserve(db, car_id, customer.id, body.rent_started_at, body.rent_ended_at)
    return RentalRead.model_validate(rental)

"""Pydantic schemas for the car catalog and rentals."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field, field_validator, model_validator

from carrental.schemas.common import CamelModel, ensure_utc


class CarSize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


# ── Car ─────────────────────────────────────────────────────────────
class CarCreate(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(min_length=1, max_length=200)
    price: int = Field(ge=0)
    size: CarSize
    image: str | None = None
    is_currently_rented: bool = False


class CarUpdate(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    price: int | None = Field(default=None, ge=0)
    size: CarSize | None = None
    image: str | None = None
    is_currently_rented: bool | None = None


class CarRead(CamelModel):
    id: int
    name: str
    price: int
    size: str
    image: str | None
    is_currently_rented: bool
    created_at: datetime | None
    updated_at: datetime | None

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        # SQLite hands timestamps back naive
        return ensure_utc(v) if v is not None else None


class Pagination(CamelModel):
    page: int
    page_count: int
    page_size: int
    count: int


class ListMeta(CamelModel):
    pagination: Pagination


class CarList(CamelModel):
    cars: list[CarRead]
    meta: ListMeta


# ── Rental ──────────────────────────────────────────────────────────
class RentRequest(CamelModel):
    rent_started_at: datetime
    rent_ended_at: datetime | None = None

    @field_validator("rent_started_at", "rent_ended_at")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    @model_validator(mode="after")
    def _ordered(self) -> "RentRequest":
        if self.rent_ended_at is not None and self.rent_ended_at <= self.rent_started_at:
            raise ValueError("rentEndedAt must be after rentStartedAt")
        return self


class RentalRead(CamelModel):
    id: int
    user_id: int
    car_id: int
    rent_started_at: datetime
    rent_ended_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None

    @field_validator("rent_started_at", "rent_ended_at", "created_at", "updated_at", mode="after")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

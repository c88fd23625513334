"""
Role model — static permission levels referenced by users.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, String

from carrental.db.base import Base

CUSTOMER = "CUSTOMER"
ADMIN = "ADMIN"

ROLE_NAMES = (CUSTOMER, ADMIN)


class Role(Base):
    __tablename__ = "roles"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(30), unique=True, nullable=False)  # type: ignore[assignment]

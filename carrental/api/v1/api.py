"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from carrental.api.v1.endpoints import auth, cars

api_router = APIRouter()

# Register, login, whoami
api_router.include_router(auth.router)

# Car catalog and rentals
api_router.include_router(cars.router)

"""
Top-level router for version 1 of the API.

Aggregates the resource routers.  When a new resource is introduced,
include its router here.
"""

from fastapi import APIRouter

from .endpoints import fines, health

router = APIRouter()

router.include_router(fines.router, prefix="/fines", tags=["fines"])
# The health router defines its own "/health" path.
router.include_router(health.router, tags=["health"])

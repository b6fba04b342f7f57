"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from parcel_tracker.app.api.v1.endpoints import parcels, tracking

router = APIRouter()

# Carrier tracking endpoints
router.include_router(tracking.router)

# Local parcel store endpoints
router.include_router(parcels.router)

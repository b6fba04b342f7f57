"""
Tracking API Endpoints.

Direct access to the Thailand Post gateway and its response cache.
"""

from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Path, Query, status

from parcel_tracker.app.core.dependencies import get_tracking_gateway
from parcel_tracker.app.schemas.tracking import (
    BatchTrackingRequest,
    CacheStatsResponse,
    CarrierStatusCode,
    GatewayStatusResponse,
    TrackingResult,
)
from parcel_tracker.app.services.status_normalizer import carrier_status_codes
from parcel_tracker.app.services.tracking_gateway import ThailandPostGateway

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.get("/status", response_model=GatewayStatusResponse)
async def gateway_status(gateway: ThailandPostGateway = Depends(get_tracking_gateway)):
    """Whether the carrier API credential is configured."""
    return GatewayStatusResponse(configured=gateway.is_configured())


@router.get("/codes", response_model=List[CarrierStatusCode])
async def status_codes():
    """Carrier status codes with their carrier names and normalized status."""
    return [
        CarrierStatusCode(code=code, name=name, status=domain_status)
        for code, name, domain_status in carrier_status_codes()
    ]


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(gateway: ThailandPostGateway = Depends(get_tracking_gateway)):
    return CacheStatsResponse(**gateway.cache_stats())


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(
    tracking_id: Optional[str] = Query(None, description="Clear only this tracking number"),
    gateway: ThailandPostGateway = Depends(get_tracking_gateway)
):
    gateway.clear_cache(tracking_id)


@router.post("/batch", response_model=Dict[str, TrackingResult])
async def track_batch(
    request: BatchTrackingRequest,
    gateway: ThailandPostGateway = Depends(get_tracking_gateway)
):
    """
    Track several parcels in one call.

    Tracking numbers that fail come back as `unknown` with empty history;
    the call itself does not fail.
    """
    return await gateway.fetch_many(request.tracking_ids, force_refresh=request.force_refresh)


@router.get("/{tracking_id}", response_model=TrackingResult)
async def track_parcel(
    tracking_id: str = Path(..., min_length=3, max_length=64, description="Carrier tracking number"),
    force_refresh: bool = Query(False, description="Bypass the response cache"),
    gateway: ThailandPostGateway = Depends(get_tracking_gateway)
):
    """
    Current status and history for one tracking number.

    Errors:
    - 503 if the carrier API token is not configured
    - 504 if the carrier does not answer in time
    - 502 for any other carrier failure
    """
    return await gateway.fetch_status(tracking_id, force_refresh=force_refresh)

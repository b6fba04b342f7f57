"""
Parcel Management API Endpoints.

CRUD over locally stored parcels, and refreshing them from the carrier.
"""

import logging
from fastapi import APIRouter, Depends, Path, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_tracker.app.core.dependencies import get_tracking_gateway
from parcel_tracker.app.core.exceptions import ResourceNotFoundError, UpstreamError
from parcel_tracker.app.db.session import get_db
from parcel_tracker.app.schemas.parcel import (
    ParcelCreate,
    ParcelImportResponse,
    ParcelListResponse,
    ParcelRefreshResponse,
    ParcelResponse,
    ParcelUpdate,
)
from parcel_tracker.app.services.parcel_store import ParcelStore
from parcel_tracker.app.services.tracking_gateway import ThailandPostGateway

logger = logging.getLogger("parcel_tracker.parcels")

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    db: AsyncSession = Depends(get_db)
):
    parcel = await ParcelStore.create(db, parcel_data)
    return ParcelResponse.model_validate(parcel)


@router.get("", response_model=ParcelListResponse)
async def list_parcels(db: AsyncSession = Depends(get_db)):
    """List all stored parcels, newest first."""
    parcels = await ParcelStore.list(db)
    return ParcelListResponse(
        parcels=[ParcelResponse.model_validate(p) for p in parcels],
        total=len(parcels)
    )


@router.get("/export")
async def export_parcels(db: AsyncSession = Depends(get_db)):
    """All parcels as a pretty-printed JSON document."""
    return Response(content=await ParcelStore.export_json(db), media_type="application/json")


@router.post("/import", response_model=ParcelImportResponse)
async def import_parcels(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Replace the stored parcels with an exported document."""
    imported = await ParcelStore.import_json(db, await request.body())
    return ParcelImportResponse(imported=imported, total=await ParcelStore.count(db))


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    parcel = await ParcelStore.get(db, parcel_id)
    if parcel is None:
        raise ResourceNotFoundError("Parcel", parcel_id)
    return ParcelResponse.model_validate(parcel)


@router.patch("/{parcel_id}", response_model=ParcelResponse)
async def update_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    update_data: ParcelUpdate = ...,
    db: AsyncSession = Depends(get_db)
):
    parcel = await ParcelStore.update(db, parcel_id, update_data.model_dump(exclude_unset=True))
    if parcel is None:
        raise ResourceNotFoundError("Parcel", parcel_id)
    return ParcelResponse.model_validate(parcel)


@router.delete("/{parcel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    if not await ParcelStore.delete(db, parcel_id):
        raise ResourceNotFoundError("Parcel", parcel_id)


@router.post("/{parcel_id}/refresh", response_model=ParcelRefreshResponse)
async def refresh_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db),
    gateway: ThailandPostGateway = Depends(get_tracking_gateway)
):
    """
    Pull the latest carrier status into a stored parcel.

    A carrier failure does not touch the stored status or history; the
    previous data is returned with `refreshed: false` and the error.
    """
    parcel = await ParcelStore.get(db, parcel_id)
    if parcel is None:
        raise ResourceNotFoundError("Parcel", parcel_id)

    try:
        result = await gateway.fetch_status(parcel.tracking_number, force_refresh=True)
    except UpstreamError as exc:
        logger.warning(
            "Refresh failed for parcel %s: %s", parcel_id, exc.message,
            extra={"parcel_id": parcel_id, "error_code": exc.error_code}
        )
        return ParcelRefreshResponse(
            parcel=ParcelResponse.model_validate(parcel),
            refreshed=False,
            error={"error_code": exc.error_code, "message": exc.message, "details": exc.details}
        )

    parcel = await ParcelStore.apply_tracking_result(db, parcel_id, result)
    return ParcelRefreshResponse(parcel=ParcelResponse.model_validate(parcel), refreshed=True)

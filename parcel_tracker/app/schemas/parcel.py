"""
Parcel Pydantic schemas.

Defines request and response models for the local parcel store.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Optional, List, Dict, Any
from parcel_tracker.app.models.tracking_enums import DomainStatus
from parcel_tracker.app.schemas.tracking import TrackingEvent


class ParcelCreate(BaseModel):
    """Schema for creating a new parcel."""
    tracking_number: str = Field(..., min_length=3, max_length=64, description="Carrier tracking number")
    country: str = Field(..., min_length=1, max_length=100, description="Destination country")
    sender_name: Optional[str] = Field(None, max_length=200, description="Sender name")
    description: Optional[str] = Field(None, max_length=500, description="Parcel notes")
    status: DomainStatus = DomainStatus.PENDING_DISPATCH


class ParcelUpdate(BaseModel):
    """Schema for updating an existing parcel."""
    tracking_number: Optional[str] = Field(None, min_length=3, max_length=64)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    sender_name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[DomainStatus] = None

    @field_validator("tracking_number", "country", "status")
    @classmethod
    def reject_null(cls, v):
        """These columns are required; omit the field to leave it unchanged."""
        if v is None:
            raise PydanticCustomError("null_not_allowed", "Field may be omitted but not set to null")
        return v


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: str
    tracking_number: str
    country: str
    sender_name: Optional[str]
    description: Optional[str]
    status: DomainStatus
    history: List[TrackingEvent]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ParcelListResponse(BaseModel):
    """Schema for parcel list."""
    parcels: List[ParcelResponse]
    total: int


class ParcelRefreshResponse(BaseModel):
    """
    Outcome of refreshing a stored parcel from the carrier.

    On failure `refreshed` is False, `parcel` holds the previously stored
    data unchanged and `error` describes what went wrong.
    """
    parcel: ParcelResponse
    refreshed: bool
    error: Optional[Dict[str, Any]] = None


class ParcelImportResponse(BaseModel):
    imported: bool
    total: int

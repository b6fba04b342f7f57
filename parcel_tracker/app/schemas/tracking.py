"""
Normalized tracking schemas.

Carrier-agnostic results produced by the tracking gateway.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List
from parcel_tracker.app.models.tracking_enums import DomainStatus


class TrackingEvent(BaseModel):
    """A single normalized history entry. Immutable once constructed."""
    timestamp: datetime
    location: str
    message: str

    class Config:
        frozen = True


class TrackingResult(BaseModel):
    """
    Normalized tracking result for one tracking number.

    `history` keeps the order the carrier sent the events in.
    """
    status: DomainStatus
    history: List[TrackingEvent] = Field(default_factory=list)
    last_updated: datetime

    @classmethod
    def empty(cls, now: datetime) -> "TrackingResult":
        """Result for a tracking number the carrier has no record of."""
        return cls(status=DomainStatus.UNKNOWN, history=[], last_updated=now)


class BatchTrackingRequest(BaseModel):
    """Schema for a batch tracking lookup."""
    tracking_ids: List[str] = Field(..., min_length=1, max_length=100, description="Tracking numbers")
    force_refresh: bool = Field(default=False, description="Bypass the response cache")


class CacheStatsResponse(BaseModel):
    size: int
    entries: List[str]


class GatewayStatusResponse(BaseModel):
    configured: bool


class CarrierStatusCode(BaseModel):
    """One row of the carrier status table."""
    code: str
    name: str
    status: DomainStatus

"""
Thailand Post tracking API wire schemas.

Request and response shapes of https://trackapi.thailandpost.co.th/.
Raw carrier records are validated into these models and never mutated.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class CarrierTrackRequest(BaseModel):
    """Request body for the track endpoint."""
    status: str = Field("all", description="'all' returns the full status history")
    language: str = Field("EN", description="Response language, TH or EN")
    barcode: List[str] = Field(..., min_length=1, description="Tracking numbers")


class CarrierEvent(BaseModel):
    """
    One raw tracking event as the carrier sends it.

    `status_date` is in carrier local format, "DD/MM/BBBB HH:mm:ss+07:00",
    where BBBB is the Buddhist Era year.
    """
    status: str
    status_date: str
    status_description: Optional[str] = None
    status_detail: Optional[str] = Field(None, alias="statusDetail")
    location: Optional[str] = None
    barcode: Optional[str] = None
    postcode: Optional[str] = None
    delivery_status: Optional[str] = None
    delivery_description: Optional[str] = None
    delivery_datetime: Optional[str] = None
    receiver_name: Optional[str] = None
    signature: Optional[str] = None
    delivery_officer_name: Optional[str] = None
    delivery_officer_tel: Optional[str] = None
    office_name: Optional[str] = None
    office_tel: Optional[str] = None
    call_center_tel: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"


class CarrierTrackCount(BaseModel):
    """Daily request quota as reported by the carrier."""
    track_date: Optional[str] = None
    count_number: Optional[int] = None
    track_count_limit: Optional[int] = None


class CarrierResponseBody(BaseModel):
    items: Dict[str, List[CarrierEvent]] = Field(default_factory=dict)
    track_count: Optional[CarrierTrackCount] = None


class CarrierTrackResponse(BaseModel):
    """Top-level carrier envelope, success or failure."""
    status: bool
    message: str = ""
    response: Optional[CarrierResponseBody] = None

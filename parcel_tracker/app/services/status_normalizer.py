"""
Thailand Post status normalization.

Maps the carrier's numeric status codes onto DomainStatus, picks the
current status from a list of dated events, and converts raw carrier
events into normalized history entries.
"""

import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from parcel_tracker.app.models.tracking_enums import DomainStatus
from parcel_tracker.app.schemas.thailand_post import CarrierEvent
from parcel_tracker.app.schemas.tracking import TrackingEvent
from parcel_tracker.app.services.calendar_converter import convert_carrier_datetime

logger = logging.getLogger("parcel_tracker.status")

UNKNOWN_LOCATION = "Unknown"
DEFAULT_MESSAGE = "Status update"


# Carrier's own names for its status codes
CARRIER_STATUS_NAMES: Mapping[str, str] = MappingProxyType({
    # Acceptance
    "100": "ACCEPTANCE",
    "101": "DROP_OFF",
    "102": "PICK_UP",
    "103": "DEPOSIT",
    # In transit
    "200": "IN_TRANSIT",
    "201": "EXPORT_CENTER",
    "202": "IMPORT_CENTER",
    "203": "ARRIVAL_AT_OUTWARD_OE",
    "204": "DEPARTURE_FROM_OUTWARD_OE",
    "205": "ARRIVAL_AT_TRANSIT_OE",
    "206": "DEPARTURE_FROM_TRANSIT_OE",
    "207": "ARRIVAL_AT_INWARD_OE",
    # Delivery
    "300": "OUT_FOR_DELIVERY",
    "301": "DELIVERY",
    "302": "SUCCESSFUL_DELIVERY",
    "303": "UNSUCCESSFUL_DELIVERY",
    "304": "AWAITING_COLLECTION",
    # Return
    "400": "RETURN_TO_SENDER",
    "401": "RETURN",
    "402": "FINAL_DELIVERY",
    # Customs
    "500": "HELD_BY_CUSTOMS",
    "501": "CUSTOMS_CLEARANCE",
    # Others
    "600": "REFUSED",
    "601": "UNCLAIMED",
    "602": "UNDELIVERABLE",
    "700": "INFORMATION_RECEIVED",
})

_STATUS_BUCKETS = {
    DomainStatus.PENDING_DISPATCH: ("100", "101", "102", "103", "700"),
    DomainStatus.IN_TRANSIT: ("200", "201", "202", "203", "204", "205", "206", "207", "300"),
    DomainStatus.ARRIVED_AT_DESTINATION: ("304",),
    DomainStatus.DELIVERED: ("301", "302", "402"),
    DomainStatus.RETURNED: ("303", "400", "401", "600", "601", "602"),
    DomainStatus.CUSTOMS_INSPECTION: ("500", "501"),
}

CARRIER_STATUS_MAP: Mapping[str, DomainStatus] = MappingProxyType({
    code: status
    for status, codes in _STATUS_BUCKETS.items()
    for code in codes
})


def carrier_status_name(code: str) -> Optional[str]:
    """Carrier name for a status code, e.g. "103" -> "DEPOSIT"."""
    return CARRIER_STATUS_NAMES.get(code.strip())


def map_carrier_status(code: str) -> DomainStatus:
    """
    Map a carrier status code to a DomainStatus.

    Unmapped codes resolve to UNKNOWN and are logged as a warning so the
    table can be extended.
    """
    normalized = code.strip()
    status = CARRIER_STATUS_MAP.get(normalized)
    if status is None:
        logger.warning(
            "Unknown Thailand Post status code: %s", normalized,
            extra={"carrier_status_code": normalized}
        )
        return DomainStatus.UNKNOWN
    return status


def most_recent_status(events: Sequence[CarrierEvent]) -> DomainStatus:
    """
    Status of the chronologically latest event.

    Events with identical timestamps keep their input order.
    """
    status, _ = normalize_events(events)
    return status


def transform_events(events: Iterable[CarrierEvent]) -> List[TrackingEvent]:
    """Convert raw carrier events to TrackingEvents, preserving order."""
    return [
        TrackingEvent(
            timestamp=convert_carrier_datetime(event.status_date),
            location=event.status_detail or event.location or UNKNOWN_LOCATION,
            message=event.status_description or DEFAULT_MESSAGE,
        )
        for event in events
    ]


def normalize_events(events: Sequence[CarrierEvent]) -> Tuple[DomainStatus, List[TrackingEvent]]:
    """
    Current status and normalized history in one pass.

    Each carrier date is converted exactly once, so an unreadable date is
    logged once per call.
    """
    history = transform_events(events)
    if not history:
        return DomainStatus.UNKNOWN, history

    # max() returns the first maximal pair, so equal instants stay in carrier order
    latest, _ = max(zip(events, history), key=lambda pair: pair[1].timestamp)
    return map_carrier_status(latest.status), history


def carrier_status_codes() -> List[Tuple[str, str, DomainStatus]]:
    """Every known carrier code with its carrier name and DomainStatus."""
    return [
        (code, carrier_status_name(code), map_carrier_status(code))
        for code in sorted(CARRIER_STATUS_NAMES)
    ]

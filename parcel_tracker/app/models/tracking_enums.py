"""
Tracking Status Enumeration.
"""

import enum


class DomainStatus(str, enum.Enum):
    """
    Carrier-agnostic shipment status.

    Flat classification, no ordering implied. Carrier status codes are
    mapped onto these values by the status normalizer.
    """
    PENDING_DISPATCH = "pending_dispatch"
    IN_TRANSIT = "in_transit"
    ARRIVED_AT_DESTINATION = "arrived_at_destination"
    DELIVERED = "delivered"
    RETURNED = "returned"
    CUSTOMS_INSPECTION = "customs_inspection"
    UNKNOWN = "unknown"

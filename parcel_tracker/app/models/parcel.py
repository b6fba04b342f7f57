"""
Tracked parcel database model.

A user-entered parcel record. Only `status` and `history` are ever
written from carrier data; everything else belongs to the user.
"""

from sqlalchemy import Column, String, DateTime, Enum, JSON
from sqlalchemy.sql import func
from parcel_tracker.app.db.session import Base
from parcel_tracker.app.models.tracking_enums import DomainStatus


class TrackedParcel(Base):
    """
    Parcel model for the local tracking store.

    Keyed by an opaque string identifier, not by the tracking number:
    the same tracking number may be entered twice by the user.
    """
    __tablename__ = "tracked_parcels"

    id = Column(String(64), primary_key=True, index=True)

    # Parcel identification
    tracking_number = Column(String(64), nullable=False, index=True)
    country = Column(String(100), nullable=False)
    sender_name = Column(String(200), nullable=True)
    description = Column(String(500), nullable=True)

    # Carrier-derived state
    status = Column(
        Enum(DomainStatus, values_callable=lambda e: [m.value for m in e]),
        default=DomainStatus.PENDING_DISPATCH,
        nullable=False,
        index=True
    )
    history = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<TrackedParcel(id='{self.id}', tracking='{self.tracking_number}', status='{self.status.value}')>"

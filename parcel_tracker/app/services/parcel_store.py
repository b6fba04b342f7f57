"""
Parcel Store.

Create/read/update/delete/list over locally stored parcel records,
plus merging of carrier results and JSON export/import.
"""

import json
import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_tracker.app.models.parcel import TrackedParcel
from parcel_tracker.app.models.tracking_enums import DomainStatus
from parcel_tracker.app.schemas.parcel import ParcelCreate, ParcelResponse
from parcel_tracker.app.schemas.tracking import TrackingResult

logger = logging.getLogger("parcel_tracker.store")

# Fields a caller may never overwrite through update()
PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def new_parcel_id() -> str:
    return f"parcel_{uuid.uuid4().hex}"


class ParcelStore:

    @staticmethod
    async def create(db: AsyncSession, data: ParcelCreate) -> TrackedParcel:
        """Store a new parcel with an empty history."""
        now = datetime.now(timezone.utc)
        parcel = TrackedParcel(
            id=new_parcel_id(),
            tracking_number=data.tracking_number.strip(),
            country=data.country,
            sender_name=data.sender_name,
            description=data.description,
            status=data.status,
            history=[],
            created_at=now,
            updated_at=now,
        )
        db.add(parcel)
        await db.commit()
        await db.refresh(parcel)
        return parcel

    @staticmethod
    async def get(db: AsyncSession, parcel_id: str) -> Optional[TrackedParcel]:
        result = await db.execute(select(TrackedParcel).where(TrackedParcel.id == parcel_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list(db: AsyncSession) -> List[TrackedParcel]:
        """All parcels, newest first."""
        result = await db.execute(
            select(TrackedParcel).order_by(TrackedParcel.created_at.desc(), TrackedParcel.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def count(db: AsyncSession) -> int:
        result = await db.execute(select(func.count(TrackedParcel.id)))
        return result.scalar()

    @staticmethod
    async def update(db: AsyncSession, parcel_id: str, updates: Dict[str, Any]) -> Optional[TrackedParcel]:
        """
        Apply a partial update.

        `id` and `created_at` never change; `updated_at` is bumped.
        Returns None if the parcel does not exist.
        """
        parcel = await ParcelStore.get(db, parcel_id)
        if parcel is None:
            return None

        for field, value in updates.items():
            if field in PROTECTED_FIELDS:
                continue
            setattr(parcel, field, value)
        parcel.updated_at = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(parcel)
        return parcel

    @staticmethod
    async def delete(db: AsyncSession, parcel_id: str) -> bool:
        result = await db.execute(delete(TrackedParcel).where(TrackedParcel.id == parcel_id))
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def apply_tracking_result(db: AsyncSession, parcel_id: str, result: TrackingResult) -> Optional[TrackedParcel]:
        """Merge a carrier result into a stored parcel (status and history only)."""
        updates: Dict[str, Any] = {
            "status": result.status,
            "history": [event.model_dump(mode="json") for event in result.history],
        }
        return await ParcelStore.update(db, parcel_id, updates)

    @staticmethod
    async def clear(db: AsyncSession) -> None:
        await db.execute(delete(TrackedParcel))
        await db.commit()

    @staticmethod
    async def export_json(db: AsyncSession) -> str:
        parcels = await ParcelStore.list(db)
        return json.dumps(
            [ParcelResponse.model_validate(p).model_dump(mode="json") for p in parcels],
            indent=2,
        )

    @staticmethod
    async def import_json(db: AsyncSession, raw: Union[str, bytes]) -> bool:
        """
        Replace every stored parcel with the ones in `raw`.

        Returns False, leaving the store untouched, if `raw` is not UTF-8
        JSON holding a list of parcel records with distinct ids.
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            records = json.loads(raw)
        except UnicodeDecodeError:
            logger.error("Error importing parcels: body is not UTF-8")
            return False
        except ValueError:
            logger.error("Error importing parcels: invalid JSON")
            return False

        if not isinstance(records, list):
            logger.error("Error importing parcels: expected a list, got %s", type(records).__name__)
            return False

        try:
            parcels = [ParcelResponse.model_validate(record) for record in records]
        except ValidationError as exc:
            logger.error("Error importing parcels: %s", exc)
            return False

        id_counts = Counter(parcel.id for parcel in parcels)
        duplicates = sorted(parcel_id for parcel_id, count in id_counts.items() if count > 1)
        if duplicates:
            logger.error("Error importing parcels: duplicate ids %s", ", ".join(duplicates))
            return False

        await db.execute(delete(TrackedParcel))
        db.expunge_all()
        for parcel in parcels:
            db.add(TrackedParcel(
                id=parcel.id,
                tracking_number=parcel.tracking_number,
                country=parcel.country,
                sender_name=parcel.sender_name,
                description=parcel.description,
                status=parcel.status,
                history=[event.model_dump(mode="json") for event in parcel.history],
                created_at=parcel.created_at,
                updated_at=parcel.updated_at,
            ))
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            logger.error("Error importing parcels: %s", exc.orig)
            return False
        return True

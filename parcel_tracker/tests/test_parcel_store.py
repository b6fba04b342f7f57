"""
Tests for the local parcel store.
"""

import json
import pytest
from datetime import datetime, timedelta, timezone

from parcel_tracker.app.models.tracking_enums import DomainStatus
from parcel_tracker.app.schemas.parcel import ParcelCreate
from parcel_tracker.app.schemas.tracking import TrackingEvent, TrackingResult
from parcel_tracker.app.services.parcel_store import ParcelStore

ICT = timezone(timedelta(hours=7))


def new_parcel(tracking_number="EF582568151TH", **kwargs):
    return ParcelCreate(tracking_number=tracking_number, country=kwargs.pop("country", "Japan"), **kwargs)


@pytest.mark.asyncio
async def test_create_and_read(db_session):
    created = await ParcelStore.create(db_session, new_parcel(sender_name="Somchai"))

    fetched = await ParcelStore.get(db_session, created.id)

    assert created.id.startswith("parcel_")
    assert fetched.tracking_number == "EF582568151TH"
    assert fetched.sender_name == "Somchai"
    assert fetched.status == DomainStatus.PENDING_DISPATCH
    assert fetched.history == []


@pytest.mark.asyncio
async def test_get_missing_returns_none(db_session):
    assert await ParcelStore.get(db_session, "parcel_missing") is None


@pytest.mark.asyncio
async def test_list_and_count(db_session):
    first = await ParcelStore.create(db_session, new_parcel("EF1XXXXXXTH"))
    second = await ParcelStore.create(db_session, new_parcel("EF2XXXXXXTH"))

    parcels = await ParcelStore.list(db_session)

    assert {p.id for p in parcels} == {first.id, second.id}
    assert await ParcelStore.count(db_session) == 2


@pytest.mark.asyncio
async def test_update_keeps_identity(db_session):
    created = await ParcelStore.create(db_session, new_parcel())
    original_id, original_created = created.id, created.created_at

    updated = await ParcelStore.update(db_session, created.id, {
        "description": "Camera lens",
        "id": "parcel_hijacked",
        "created_at": datetime(2000, 1, 1),
    })

    assert updated.id == original_id
    assert updated.created_at == original_created
    assert updated.description == "Camera lens"
    assert updated.updated_at >= original_created


@pytest.mark.asyncio
async def test_update_missing_returns_none(db_session):
    assert await ParcelStore.update(db_session, "parcel_missing", {"description": "x"}) is None


@pytest.mark.asyncio
async def test_delete(db_session):
    created = await ParcelStore.create(db_session, new_parcel())

    assert await ParcelStore.delete(db_session, created.id) is True
    assert await ParcelStore.delete(db_session, created.id) is False
    assert await ParcelStore.get(db_session, created.id) is None


@pytest.mark.asyncio
async def test_apply_tracking_result_merges_status_and_history_only(db_session):
    created = await ParcelStore.create(db_session, new_parcel(description="Gift"))
    result = TrackingResult(
        status=DomainStatus.DELIVERED,
        history=[TrackingEvent(timestamp=datetime(2025, 7, 20, 10, tzinfo=ICT), location="Bangkok", message="DEPOSIT")],
        last_updated=datetime.now(timezone.utc),
    )

    merged = await ParcelStore.apply_tracking_result(db_session, created.id, result)

    assert merged.status == DomainStatus.DELIVERED
    assert merged.history == [
        {"timestamp": "2025-07-20T10:00:00+07:00", "location": "Bangkok", "message": "DEPOSIT"}
    ]
    assert merged.description == "Gift"
    assert merged.tracking_number == "EF582568151TH"


@pytest.mark.asyncio
async def test_export_then_import_replaces_store(db_session):
    kept = await ParcelStore.create(db_session, new_parcel("EF1XXXXXXTH"))
    exported = await ParcelStore.export_json(db_session)
    await ParcelStore.create(db_session, new_parcel("EF2XXXXXXTH"))

    assert await ParcelStore.import_json(db_session, exported) is True

    parcels = await ParcelStore.list(db_session)
    assert [p.id for p in parcels] == [kept.id]
    assert json.loads(exported)[0]["tracking_number"] == "EF1XXXXXXTH"


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["{not json", '{"id": "parcel_1"}', '[{"id": "parcel_1"}]'])
async def test_import_rejects_bad_documents(db_session, raw):
    created = await ParcelStore.create(db_session, new_parcel())

    assert await ParcelStore.import_json(db_session, raw) is False
    assert await ParcelStore.get(db_session, created.id) is not None


@pytest.mark.asyncio
async def test_import_accepts_utf8_bytes(db_session):
    kept = await ParcelStore.create(db_session, new_parcel(description="Hom mali rice \u0e02\u0e49\u0e32\u0e27"))
    exported = await ParcelStore.export_json(db_session)

    assert await ParcelStore.import_json(db_session, exported.encode("utf-8")) is True

    fetched = await ParcelStore.get(db_session, kept.id)
    assert fetched.description == "Hom mali rice \u0e02\u0e49\u0e32\u0e27"


@pytest.mark.asyncio
async def test_import_rejects_invalid_utf8(db_session):
    created = await ParcelStore.create(db_session, new_parcel())

    assert await ParcelStore.import_json(db_session, b"\xff\xfe[]") is False
    assert await ParcelStore.get(db_session, created.id) is not None


@pytest.mark.asyncio
async def test_import_rejects_duplicate_ids(db_session):
    created = await ParcelStore.create(db_session, new_parcel())
    record = json.loads(await ParcelStore.export_json(db_session))[0]
    record_copy = {**record, "tracking_number": "EF9XXXXXXTH"}

    assert await ParcelStore.import_json(db_session, json.dumps([record, record_copy])) is False

    parcels = await ParcelStore.list(db_session)
    assert [(p.id, p.tracking_number) for p in parcels] == [(created.id, "EF582568151TH")]


@pytest.mark.asyncio
async def test_clear(db_session):
    await ParcelStore.create(db_session, new_parcel())

    await ParcelStore.clear(db_session)

    assert await ParcelStore.count(db_session) == 0

"""Occurrence endpoints. Reads of the public map are open; everything else needs a token."""

from fastapi import APIRouter, Depends, Query

from cleancity_api.auth import Identity, get_current_identity
from cleancity_api.events import EventNotifier, get_notifier
from cleancity_api.schemas import (
    OccurrenceCreate, OccurrenceDetail, OccurrenceOut, OccurrenceStats,
    OccurrenceUpdate, OccurrenceWithOwner, StatusUpdate,
)
from cleancity_api.services import get_occurrence_service
from cleancity_api.services.occurrence_service import OccurrenceService

router = APIRouter(prefix="/api/occurrences", tags=["occurrences"])


@router.get("/stats")
async def get_stats(service: OccurrenceService = Depends(get_occurrence_service)):
    """Counts by status."""
    return {"success": True, "data": OccurrenceStats(**service.stats())}


@router.get("/bounds")
async def get_by_bounds(
    min_lat: float = Query(..., alias="minLat"),
    max_lat: float = Query(..., alias="maxLat"),
    min_lon: float = Query(..., alias="minLon"),
    max_lon: float = Query(..., alias="maxLon"),
    service: OccurrenceService = Depends(get_occurrence_service),
):
    """Occurrences inside a bounding box (inclusive)."""
    occurrences = service.list_by_bounds(min_lat, max_lat, min_lon, max_lon)
    return {
        "success": True,
        "data": [OccurrenceWithOwner.model_validate(o) for o in occurrences],
    }


@router.get("")
async def list_occurrences(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    service: OccurrenceService = Depends(get_occurrence_service),
):
    occurrences, total = service.list_all(page, limit)
    return {
        "success": True,
        "data": [OccurrenceWithOwner.model_validate(o) for o in occurrences],
        "message": f"Total: {total}",
    }


@router.post("", status_code=201)
async def create_occurrence(
    body: OccurrenceCreate,
    identity: Identity = Depends(get_current_identity),
    service: OccurrenceService = Depends(get_occurrence_service),
    notifier: EventNotifier = Depends(get_notifier),
):
    occurrence = service.create(identity.user_id, body.model_dump())
    out = OccurrenceOut.model_validate(occurrence)
    await notifier.occurrence_created(out)
    return {"success": True, "data": out}


@router.get("/my-occurrences")
async def list_my_occurrences(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    identity: Identity = Depends(get_current_identity),
    service: OccurrenceService = Depends(get_occurrence_service),
):
    occurrences, total = service.list_for_user(identity.user_id, page, limit)
    return {
        "success": True,
        "data": [OccurrenceOut.model_validate(o) for o in occurrences],
        "message": f"Total: {total}",
    }


@router.get("/{occurrence_id}")
async def get_occurrence(
    occurrence_id: str,
    identity: Identity = Depends(get_current_identity),
    service: OccurrenceService = Depends(get_occurrence_service),
):
    occurrence = service.get_by_id(occurrence_id)
    return {"success": True, "data": OccurrenceDetail.model_validate(occurrence)}


@router.put("/{occurrence_id}")
async def update_occurrence(
    occurrence_id: str,
    body: OccurrenceUpdate,
    identity: Identity = Depends(get_current_identity),
    service: OccurrenceService = Depends(get_occurrence_service),
    notifier: EventNotifier = Depends(get_notifier),
):
    """Partial update; omitted fields are left unchanged."""
    occurrence = service.update(occurrence_id, identity.user_id, body.model_dump(exclude_unset=True))
    out = OccurrenceOut.model_validate(occurrence)
    await notifier.occurrence_updated(out)
    return {"success": True, "data": out}


@router.put("/{occurrence_id}/status")
async def update_occurrence_status(
    occurrence_id: str,
    body: StatusUpdate,
    identity: Identity = Depends(get_current_identity),
    service: OccurrenceService = Depends(get_occurrence_service),
    notifier: EventNotifier = Depends(get_notifier),
):
    occurrence = service.update_status(occurrence_id, identity.user_id, body.status)
    out = OccurrenceOut.model_validate(occurrence)
    await notifier.occurrence_updated(out)
    return {"success": True, "data": out}


@router.delete("/{occurrence_id}")
async def delete_occurrence(
    occurrence_id: str,
    identity: Identity = Depends(get_current_identity),
    service: OccurrenceService = Depends(get_occurrence_service),
    notifier: EventNotifier = Depends(get_notifier),
):
    service.delete(occurrence_id, identity.user_id)
    await notifier.occurrence_deleted(occurrence_id)
    return {"success": True, "message": "Occurrence deleted successfully"}

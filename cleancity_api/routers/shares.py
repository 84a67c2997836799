"""Sharing endpoints."""
from fastapi import APIRouter, Depends, Response

from cleancity_api.auth import Identity, get_current_identity
from cleancity_api.events import EventNotifier, get_notifier
from cleancity_api.schemas import (
    AccessOut, SharedByMeOut, SharedWithMeOut, ShareOut, ShareRequest,
)
from cleancity_api.services import get_share_service
from cleancity_api.services.share_service import ShareService

router = APIRouter(prefix="/api/shares", tags=["shares"])


@router.post("", status_code=201)
async def share_occurrence(
    body: ShareRequest,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    service: ShareService = Depends(get_share_service),
    notifier: EventNotifier = Depends(get_notifier),
):
    """Share an occurrence by recipient email; re-sharing updates the permission."""
    grant, created = service.share(identity.user_id, body.occurrence_id, body.user_email, body.permission)
    out = ShareOut.model_validate(grant)
    if created:
        await notifier.share_created(grant.shared_with_id, out)
    else:
        response.status_code = 200
    return {"success": True, "data": out}


@router.get("/shared-with-me")
async def shared_with_me(
    identity: Identity = Depends(get_current_identity),
    service: ShareService = Depends(get_share_service),
):
    grants = service.shared_with_me(identity.user_id)
    return {"success": True, "data": [SharedWithMeOut.model_validate(g) for g in grants]}


@router.get("/shared-by-me")
async def shared_by_me(
    identity: Identity = Depends(get_current_identity),
    service: ShareService = Depends(get_share_service),
):
    grants = service.shared_by_me(identity.user_id)
    return {"success": True, "data": [SharedByMeOut.model_validate(g) for g in grants]}


@router.get("/access/{occurrence_id}")
async def check_access(
    occurrence_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ShareService = Depends(get_share_service),
):
    allowed = service.can_access(occurrence_id, identity.user_id)
    return {"success": True, "data": AccessOut(occurrence_id=occurrence_id, can_access=allowed)}


@router.delete("/{share_id}")
async def revoke_share(
    share_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ShareService = Depends(get_share_service),
):
    service.revoke(share_id, identity.user_id)
    return {"success": True, "message": "Share revoked successfully"}

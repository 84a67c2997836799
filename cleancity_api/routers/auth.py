"""Signup, login and profile endpoints."""
from fastapi import APIRouter, Depends

from cleancity_api.auth import Identity, get_current_identity
from cleancity_api.schemas import (
    AuthResult, ChangePasswordRequest, LoginRequest, SignupRequest,
    UpdateProfileRequest, UserProfile,
)
from cleancity_api.services import get_auth_service
from cleancity_api.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", status_code=201)
async def signup(body: SignupRequest, service: AuthService = Depends(get_auth_service)):
    user, token = service.signup(body.full_name, body.email, body.password)
    return {
        "success": True,
        "data": AuthResult(user=UserProfile.model_validate(user), token=token),
    }


@router.post("/login")
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, token = service.login(body.email, body.password)
    return {
        "success": True,
        "data": AuthResult(user=UserProfile.model_validate(user), token=token),
    }


@router.get("/profile")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    service: AuthService = Depends(get_auth_service),
):
    """Return the authenticated user's profile."""
    user = service.get_profile(identity.user_id)
    return {"success": True, "data": UserProfile.model_validate(user)}


@router.put("/profile")
async def update_profile(
    body: UpdateProfileRequest,
    identity: Identity = Depends(get_current_identity),
    service: AuthService = Depends(get_auth_service),
):
    user = service.update_profile(identity.user_id, full_name=body.full_name, avatar=body.avatar)
    return {"success": True, "data": UserProfile.model_validate(user)}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    identity: Identity = Depends(get_current_identity),
    service: AuthService = Depends(get_auth_service),
):
    service.change_password(identity.user_id, body.old_password, body.new_password)
    return {"success": True, "message": "Password changed successfully"}

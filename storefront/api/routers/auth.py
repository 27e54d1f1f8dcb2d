"""Sign-in, sign-up and session endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status

from storefront.api.dependencies import get_identity_service, get_principal, get_user_service
from storefront.schemas.auth import LoginRequest, MeResponse, Principal, TokenResponse
from storefront.schemas.user import UserResponse
from storefront.services.errors import AuthenticationRequiredError
from storefront.services.identity import IdentityService
from storefront.services.users import UserService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenResponse:
    return service.authenticate(payload.email, payload.password)


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = service.register(payload)
    return UserResponse.model_validate(user)


@router.post("/logout")
def logout(
    principal: Optional[Principal] = Depends(get_principal),
    service: IdentityService = Depends(get_identity_service),
) -> dict[str, bool]:
    service.logout(principal)
    return {"success": True}


@router.get("/me", response_model=MeResponse)
def me(principal: Optional[Principal] = Depends(get_principal)) -> MeResponse:
    if principal is None:
        raise AuthenticationRequiredError("Unauthorized: authentication required")
    return MeResponse(user=principal, dashboard=IdentityService.dashboard_for(principal))

"""User management endpoints (admin only)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, status

from storefront.api.dependencies import get_principal, get_user_service
from storefront.schemas.auth import Principal
from storefront.schemas.user import UserResponse
from storefront.services.users import UserService

router = APIRouter()


@router.get("", response_model=List[UserResponse])
def list_users(
    principal: Optional[Principal] = Depends(get_principal),
    service: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    return service.list_users(principal)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    principal: Optional[Principal] = Depends(get_principal),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.model_validate(service.get_user(principal, user_id))


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    principal: Optional[Principal] = Depends(get_principal),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.model_validate(service.create_user(principal, payload))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    principal: Optional[Principal] = Depends(get_principal),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.model_validate(service.update_user(principal, user_id, payload))


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    principal: Optional[Principal] = Depends(get_principal),
    service: UserService = Depends(get_user_service),
) -> dict[str, bool]:
    return service.delete_user(principal, user_id)

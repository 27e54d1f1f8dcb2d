"""Product catalog endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, status

from storefront.api.dependencies import get_principal, get_product_service
from storefront.schemas.auth import Principal
from storefront.schemas.product import ProductResponse
from storefront.services.products import ProductService

router = APIRouter()


@router.get("", response_model=List[ProductResponse])
def list_products(
    principal: Optional[Principal] = Depends(get_principal),
    service: ProductService = Depends(get_product_service),
) -> List[ProductResponse]:
    return service.list_products(principal)


@router.get("/active", response_model=List[ProductResponse])
def list_active_products(service: ProductService = Depends(get_product_service)) -> List[ProductResponse]:
    return service.list_active_products()


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    principal: Optional[Principal] = Depends(get_principal),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return ProductResponse.model_validate(service.get_product(principal, product_id))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    principal: Optional[Principal] = Depends(get_principal),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return ProductResponse.model_validate(service.create_product(principal, payload))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    principal: Optional[Principal] = Depends(get_principal),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return ProductResponse.model_validate(service.update_product(principal, product_id, payload))


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    principal: Optional[Principal] = Depends(get_principal),
    service: ProductService = Depends(get_product_service),
) -> dict[str, bool]:
    return service.delete_product(principal, product_id)

"""Administrative maintenance endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_maintenance_service, get_principal
from storefront.schemas.auth import Principal
from storefront.services.maintenance import MaintenanceService

router = APIRouter()


@router.post("/seed")
def seed_catalog(
    principal: Optional[Principal] = Depends(get_principal),
    service: MaintenanceService = Depends(get_maintenance_service),
) -> dict[str, object]:
    created = service.seed_catalog(principal)
    return {"message": f"Database seeded successfully. Created {created} products.", "createdCount": created}


@router.post("/truncate")
def truncate(
    principal: Optional[Principal] = Depends(get_principal),
    service: MaintenanceService = Depends(get_maintenance_service),
) -> dict[str, object]:
    counts = service.truncate(principal)
    return {"success": True, "message": "All tables have been truncated successfully", "deleted": counts}

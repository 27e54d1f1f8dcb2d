"""Router registrations."""

from fastapi import APIRouter

from storefront.api.routers import admin, audit_logs, auth, health, products, users


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    router.include_router(users.router, prefix="/api/v1/users", tags=["users"])
    router.include_router(products.router, prefix="/api/v1/products", tags=["products"])
    router.include_router(audit_logs.router, prefix="/api/v1/audit-logs", tags=["audit"])
    router.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])
    return router

"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.error_handlers import register_exception_handlers
from storefront.api.routers import get_api_router
from storefront.core.config import AppSettings, get_settings
from storefront.core.database import session_scope
from storefront.core.logging import configure_logging
from storefront.services.maintenance import MaintenanceService


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Application lifespan context for startup/shutdown hooks."""

    settings = get_settings()
    if settings.bootstrap_admin_email and settings.bootstrap_admin_password:
        with session_scope() as session:
            MaintenanceService(session).ensure_bootstrap_admin(
                email=settings.bootstrap_admin_email,
                password=settings.bootstrap_admin_password,
                name=settings.bootstrap_admin_name,
            )

    yield


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Storefront Admin",
        version="1.0.0",
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()

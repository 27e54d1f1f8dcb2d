"""Exception handlers for the FastAPI app."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from storefront.services.errors import (
    AuthenticationRequiredError,
    ConflictError,
    NotFoundError,
    PayloadValidationError,
    StorageError,
    UnauthorizedError,
)

LOGGER = logging.getLogger("storefront.api")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationRequiredError)
    async def authentication_handler(request: Request, exc: AuthenticationRequiredError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(
            status_code=401,
            content={"detail": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(PayloadValidationError)
    async def validation_handler(request: Request, exc: PayloadValidationError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=400, content={"detail": str(exc), "fields": exc.fields})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_handler(request: Request, exc: StorageError) -> JSONResponse:  # noqa: WPS430
        LOGGER.error("storage_failure", extra={"path": request.url.path, "error": str(exc.__cause__ or exc)})
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def database_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:  # noqa: WPS430
        LOGGER.error("database_error", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

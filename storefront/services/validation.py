"""Turns raw request payloads into validated schemas."""

from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from storefront.services.errors import PayloadValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_payload(schema: Type[SchemaT], payload: Any, message: str) -> SchemaT:
    """Validate ``payload`` against ``schema``.

    Already-validated instances pass through untouched. Failures raise
    :class:`PayloadValidationError` naming every offending field.
    """

    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in error["loc"]) or "body" for error in exc.errors()})
        raise PayloadValidationError(f"{message} (invalid: {', '.join(fields)})", fields) from exc

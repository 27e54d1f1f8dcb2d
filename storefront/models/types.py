"""Column types shared by the ORM models."""

from __future__ import annotations

from sqlalchemy import JSON, Numeric, Uuid
from sqlalchemy.dialects.postgresql import JSONB

# Native UUID on PostgreSQL, CHAR(32) elsewhere.
GUID = Uuid(as_uuid=True)

# JSONB on PostgreSQL, JSON text elsewhere.
JSONType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

# Prices are stored with cent precision and surfaced to Python as floats.
Money = Numeric(10, 2, asdecimal=False)

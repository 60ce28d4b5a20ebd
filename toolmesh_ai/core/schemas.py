"""Pydantic base schema utilities shared by protocol and agent models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, ValidationError


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all domain schemas.

    Configures common Pydantic behaviors:
    - ``populate_by_name=True``: Allow initialization by alias or field name.
    - ``extra="forbid"``: Prevent unknown fields from slipping into the model, ensuring strict validation.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )


def format_validation_error(exc: ValidationError) -> str:
    """Collapse a pydantic ``ValidationError`` into a single-line message."""
    parts: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid value"

"""Shared input model base for the built-in tools."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ToolInput(BaseModel):
    """Parameters accepted by a built-in tool.

    Unknown parameters are ignored so planners can pass extra hints without
    breaking the call.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

"""Request/response envelopes exchanged across the protocol boundary.

The wire shape is fixed:

- request: ``{"version": "1.0", "action": {"name": ..., "parameters": {...}}}``
- success: ``{"version": "1.0", "status": "success", "result": {...}}``
- error: ``{"version": "1.0", "status": "error", "error": "..."}``

Every function in this module is pure: inputs are never mutated and the same
input always produces the same outcome.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Union

from pydantic import Field, StrictStr, TypeAdapter, ValidationError, field_validator

from toolmesh_ai.core.schemas import BaseSchema, format_validation_error

from .errors import InvalidEnvelope

PROTOCOL_VERSION = "1.0"


class ActionSpec(BaseSchema):
    """Tool name plus opaque parameters."""

    name: StrictStr = Field(..., description="Registered tool name")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Tool specific parameters")

    @field_validator("name")
    @classmethod
    def _reject_blank_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("action name must not be empty")
        return value


class RequestEnvelope(BaseSchema):
    """Request payload for ``POST /``."""

    version: Literal["1.0"]
    action: ActionSpec


class SuccessEnvelope(BaseSchema):
    version: Literal["1.0"]
    status: Literal["success"] = "success"
    result: Dict[str, Any]


class ErrorEnvelope(BaseSchema):
    version: Literal["1.0"]
    status: Literal["error"] = "error"
    error: StrictStr


ResponseEnvelope = Annotated[Union[SuccessEnvelope, ErrorEnvelope], Field(discriminator="status")]

_response_adapter: TypeAdapter[Union[SuccessEnvelope, ErrorEnvelope]] = TypeAdapter(ResponseEnvelope)


def parse_request(envelope: Any) -> RequestEnvelope:
    """Validate a raw request and return the typed model.

    Raises:
        InvalidEnvelope: If the envelope does not match the request shape.
    """
    try:
        return RequestEnvelope.model_validate(envelope)
    except ValidationError as exc:
        raise InvalidEnvelope(format_validation_error(exc)) from exc


def parse_response(envelope: Any) -> Union[SuccessEnvelope, ErrorEnvelope]:
    """Validate a raw response and return the typed model.

    Raises:
        InvalidEnvelope: If the envelope does not match either response shape.
    """
    try:
        return _response_adapter.validate_python(envelope)
    except ValidationError as exc:
        raise InvalidEnvelope(format_validation_error(exc)) from exc


def validate_request(envelope: Any) -> Optional[str]:
    """Return ``None`` if ``envelope`` is a valid request, otherwise the validation message."""
    try:
        parse_request(envelope)
    except InvalidEnvelope as exc:
        return str(exc)
    return None


def validate_response(envelope: Any) -> Optional[str]:
    """Return ``None`` if ``envelope`` is a valid response, otherwise the validation message."""
    try:
        parse_response(envelope)
    except InvalidEnvelope as exc:
        return str(exc)
    return None


def build_request(action_name: str, parameters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Construct a request envelope.

    Raises:
        InvalidEnvelope: If ``action_name`` is empty or the parameters are not a mapping.
    """
    if not isinstance(action_name, str) or not action_name.strip():
        raise InvalidEnvelope("action name must be a non-empty string")
    if parameters is not None and not isinstance(parameters, Mapping):
        raise InvalidEnvelope("action parameters must be a mapping")
    raw = {
        "version": PROTOCOL_VERSION,
        "action": {"name": action_name, "parameters": dict(parameters or {})},
    }
    return parse_request(raw).model_dump()


def build_success(result: Any) -> Dict[str, Any]:
    """Construct a success envelope; non-mapping results are wrapped as ``{"result": value}``."""
    payload = dict(result) if isinstance(result, Mapping) else {"result": result}
    return SuccessEnvelope(version=PROTOCOL_VERSION, result=payload).model_dump()


def build_error(message: Any) -> Dict[str, Any]:
    """Construct an error envelope carrying ``message``."""
    return ErrorEnvelope(version=PROTOCOL_VERSION, error=str(message)).model_dump()

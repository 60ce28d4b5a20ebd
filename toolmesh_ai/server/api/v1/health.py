"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter

from toolmesh_ai import __version__
from toolmesh_ai.protocol.envelope import PROTOCOL_VERSION

from ...core.constant import SCHEMA_VERSION

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the package version, the API schema version and the envelope protocol version.
    """
    return {"version": __version__, "schema_version": SCHEMA_VERSION, "protocol_version": PROTOCOL_VERSION}

"""
toolmesh-ai Server Package.

This package contains the HTTP transport for the protocol dispatcher and the
agent orchestrator.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    exception_handlers: Last-resort error handling.
"""

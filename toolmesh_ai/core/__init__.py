"""
Core utilities for toolmesh-ai.

This package provides shared functionality such as logging configuration.
"""

from toolmesh_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]

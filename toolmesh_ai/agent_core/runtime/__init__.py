"""Plan execution runtime."""

from .executor import PlanExecutor
from .retry import retry_fixed

__all__ = ["PlanExecutor", "retry_fixed"]

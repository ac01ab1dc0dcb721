"""
Exceptions for the SCM agent.

Normal daily failure modes (a supplier that cannot be found, a production
request the factory refuses, an order past its void date) are *not*
exceptions; they are logged or returned as booleans. The classes below are
raised only for programming and configuration errors.
"""

from __future__ import annotations

from typing import Any, Dict


class SCMAgentError(Exception):
    """
    Base exception for all agent errors.

    Usage:
        raise SCMAgentError("UNKNOWN_PRODUCT", product_id=42)

    Attributes:
        code: Error code (UNKNOWN_PRODUCT, INVALID_TRANSITION, ...)
        details: Additional context as keyword arguments
    """

    def __init__(self, code: str, **details: Any):
        self.code = code
        self.details = details
        message = f"{code}: {details}" if details else code
        super().__init__(message)

    def as_dict(self) -> Dict[str, Any]:
        """Return error as a dictionary (for logging/JSON output)."""
        return {"code": self.code, **self.details}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{type(self).__name__}({self.code}: {details_str})"
        return f"{type(self).__name__}({self.code})"


class ConfigurationError(SCMAgentError):
    """Settings or scenario files that cannot be loaded or validated."""

    def __init__(self, message: str, **details: Any):
        super().__init__("INVALID_CONFIGURATION", message=message, **details)


class UnknownProductError(SCMAgentError):
    def __init__(self, product_id: int):
        super().__init__("UNKNOWN_PRODUCT", product_id=product_id)


class UnknownOrderError(SCMAgentError):
    def __init__(self, order_id: int):
        super().__init__("UNKNOWN_ORDER", order_id=order_id)


class InvalidOrderTransition(SCMAgentError):
    """A customer order left the ACTIVE state and cannot change again."""

    def __init__(self, order_id: int, current: str, requested: str):
        super().__init__(
            "INVALID_TRANSITION",
            order_id=order_id,
            current=current,
            requested=requested,
        )

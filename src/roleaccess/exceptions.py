"""Unified exception hierarchy for roleaccess.

All errors inherit from RoleAccessError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC status code mapping for the integration layer

Usage:
    from roleaccess.exceptions import (
        RoleAccessError,
        RoleNotFoundError,
        MissingActionError,
        PrivateActionError,
    )

Malformed directive lines are never errors; the parser skips them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "RoleAccessError",
    "ConfigurationError",
    "HierarchyConfigError",
    "CyclicHierarchyError",
    "RoleNotFoundError",
    "MissingActionError",
    "AccessDeniedError",
    "PrivateActionError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class RoleAccessError(Exception):
    """Base exception for roleaccess.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "ROLE_NOT_FOUND").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(RoleAccessError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class HierarchyConfigError(ConfigurationError):
    """Role hierarchy declaration cannot be interpreted."""

    code: str = "HIERARCHY_CONFIG_ERROR"


class CyclicHierarchyError(HierarchyConfigError):
    """Role hierarchy declares a role as its own ancestor."""

    code: str = "CYCLIC_HIERARCHY"
    message: str = "Role hierarchy contains a cycle"


class RoleNotFoundError(RoleAccessError):
    """Role is not declared in a strict hierarchy."""

    code: str = "ROLE_NOT_FOUND"


class MissingActionError(RoleAccessError):
    """A directive names a handler that does not exist."""

    code: str = "MISSING_ACTION"


class AccessDeniedError(RoleAccessError):
    """Caller is not allowed to invoke the action."""

    code: str = "ACCESS_DENIED"
    message: str = "Access denied"


class PrivateActionError(AccessDeniedError):
    """Redirect-only action was invoked directly."""

    code: str = "PRIVATE_ACTION"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[RoleAccessError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[RoleAccessError]] = {}

    def register(self, code: str, error_cls: type[RoleAccessError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[RoleAccessError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[RoleAccessError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(RoleAccessError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", RoleAccessError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("HIERARCHY_CONFIG_ERROR", HierarchyConfigError)
error_registry.register("CYCLIC_HIERARCHY", CyclicHierarchyError)
error_registry.register("ROLE_NOT_FOUND", RoleNotFoundError)
error_registry.register("MISSING_ACTION", MissingActionError)
error_registry.register("ACCESS_DENIED", AccessDeniedError)
error_registry.register("PRIVATE_ACTION", PrivateActionError)


# ---- gRPC Status Mapping ----------------------------------------------------


def get_grpc_status_code(error: RoleAccessError) -> Any:
    """Map RoleAccessError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "ACCESS_DENIED": grpc.StatusCode.PERMISSION_DENIED,
        "PRIVATE_ACTION": grpc.StatusCode.PERMISSION_DENIED,
        "ROLE_NOT_FOUND": grpc.StatusCode.FAILED_PRECONDITION,
        "MISSING_ACTION": grpc.StatusCode.FAILED_PRECONDITION,
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "HIERARCHY_CONFIG_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "CYCLIC_HIERARCHY": grpc.StatusCode.FAILED_PRECONDITION,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)

"""Configuration contract for roleaccess.

This module provides the Pydantic-validated configuration model that
carries every recognised option of the access engine: the role
hierarchy, the redirect-only action prefix, undeclared-role handling
and logging.

Direct os.environ/os.getenv usage is confined to load_config_from_env().
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class HierarchyStyle(str, Enum):
    """How the ``hierarchy`` option is declared.

    - NESTED: nested mapping/list tree, deeper roles inherit from the
      roles that enclose them. A ``"key": "value"`` pair declares
      ``value`` as an alias leaf under ``key``.
    - FLAT: ``{role: parent}`` mapping, empty parent marks a root.
    """

    NESTED = "nested"
    FLAT = "flat"


class RedirectPolicy(str, Enum):
    """How the ``action`` directive parameter is enforced by dispatch.

    - ACCESS_ONLY: only ``access`` is enforced; ``action`` is auxiliary
      metadata available through ``get_params``.
    - ACTION_WHEN_PERMITTED: if ``access`` resolves to ``allow`` or is
      absent, a resolved ``action`` redirects the caller. ``deny`` wins.
    """

    ACCESS_ONLY = "access_only"
    ACTION_WHEN_PERMITTED = "action_when_permitted"


HierarchyDeclaration = Union[dict[str, Any], list[Any]]


class RoleAccessConfig(BaseModel):
    """Settings for a RoleAccess instance.

    Environment variables (see load_config_from_env):
        ROLEACCESS_ROLE_FIELD       — caller attribute holding the role name
        ROLEACCESS_HIERARCHY        — hierarchy declaration as JSON
        ROLEACCESS_HIERARCHY_STYLE  — nested | flat
        ROLEACCESS_STRICT_ROLES     — undeclared roles raise RoleNotFoundError
        ROLEACCESS_ACTION_PREFIX    — prefix of redirect-only actions
        ROLEACCESS_REDIRECT_POLICY  — access_only | action_when_permitted
        ROLEACCESS_CACHE_METADATA   — memoize parsed directives per action
        ROLEACCESS_LOG_LEVEL        — logging level
        ROLEACCESS_LOG_JSON         — JSON log output
    """

    role_field: str = Field(
        default="role",
        description="Caller attribute storing the role name (used by role suppliers)",
    )
    hierarchy: Optional[HierarchyDeclaration] = Field(
        default=None,
        description="Role inheritance declaration, nested tree or flat parent map",
    )
    hierarchy_style: HierarchyStyle = Field(
        default=HierarchyStyle.NESTED,
        description="Representation used by the hierarchy option",
    )
    strict_roles: bool = Field(
        default=False,
        description="Raise RoleNotFoundError for roles missing from the hierarchy",
    )
    action_prefix: str = Field(
        default="role_",
        description="Actions starting with this prefix are redirect-only",
    )
    redirect_policy: RedirectPolicy = Field(
        default=RedirectPolicy.ACCESS_ONLY,
        description="Whether dispatch enforces the 'action' parameter",
    )
    cache_metadata: bool = Field(
        default=True,
        description="Memoize parsed directives per action",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    @field_validator("action_prefix")
    @classmethod
    def validate_action_prefix(cls, v: str) -> str:
        """An empty prefix would mark every action private."""
        if not v:
            raise ValueError("action_prefix must not be empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @model_validator(mode="after")
    def validate_flat_hierarchy(self) -> "RoleAccessConfig":
        if self.hierarchy_style == HierarchyStyle.FLAT and self.hierarchy is not None:
            if not isinstance(self.hierarchy, dict):
                raise ValueError("Flat hierarchy must be a mapping of role -> parent")
            for role, parent in self.hierarchy.items():
                if parent is not None and not isinstance(parent, str):
                    raise ValueError(f"Flat hierarchy parent of {role!r} must be a string or null")
        return self

    model_config = {
        "extra": "forbid",
    }


def _env_flag(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes", "on")


def load_config_from_env() -> RoleAccessConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.
    All other code MUST use the config object.

    Returns:
        RoleAccessConfig instance with values from environment or defaults.
    """
    import os

    hierarchy_raw = os.getenv("ROLEACCESS_HIERARCHY", "").strip()
    hierarchy = json.loads(hierarchy_raw) if hierarchy_raw else None

    return RoleAccessConfig(
        role_field=os.getenv("ROLEACCESS_ROLE_FIELD", "role"),
        hierarchy=hierarchy,
        hierarchy_style=os.getenv("ROLEACCESS_HIERARCHY_STYLE", "nested").lower(),
        strict_roles=_env_flag(os.getenv("ROLEACCESS_STRICT_ROLES"), False),
        action_prefix=os.getenv("ROLEACCESS_ACTION_PREFIX", "role_"),
        redirect_policy=os.getenv("ROLEACCESS_REDIRECT_POLICY", "access_only").lower(),
        cache_metadata=_env_flag(os.getenv("ROLEACCESS_CACHE_METADATA"), True),
        log_level=os.getenv("ROLEACCESS_LOG_LEVEL", "INFO"),
        log_json=_env_flag(os.getenv("ROLEACCESS_LOG_JSON"), False),
    )


__all__ = [
    "HierarchyStyle",
    "LogLevel",
    "RedirectPolicy",
    "RoleAccessConfig",
    "load_config_from_env",
]

"""Reserved names and directive keywords.

Provides:
- ``PUBLIC_ROLE`` — implicit role of an unauthenticated caller.
- ``Directive`` — parameter names and access keywords.
- ``OutcomeKind`` — consumer-facing dispatch results.
"""

from __future__ import annotations

from enum import Enum

PUBLIC_ROLE = "public"
DEFAULT_ACTION_PREFIX = "role_"


class Directive:
    """Directive parameter names and ``access`` keywords.

    Keywords are compared exactly (case-sensitive); any other ``access``
    value is treated as the name of an alternate action.
    """

    ACCESS = "access"  # Default parameter
    ACTION = "action"  # Redirect target

    ALLOW = "allow"
    DENY = "deny"


class OutcomeKind(str, Enum):
    """Result of dispatching a caller to an action."""

    ALLOWED = "allowed"
    DENIED = "denied"
    SUBSTITUTE = "substitute"
    NO_DIRECTIVE = "no_directive"


__all__ = [
    "DEFAULT_ACTION_PREFIX",
    "Directive",
    "OutcomeKind",
    "PUBLIC_ROLE",
]

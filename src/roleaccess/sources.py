"""Inbound collaborators of the access engine.

The engine never talks to a web framework directly. It asks three
collaborators for what it needs:

- ``RoleSupplier`` — the current caller's role (``None`` = unauthenticated).
- ``MetadataSource`` — documentation text declared on an action.
- ``ActionChecker`` — whether a name identifies an invocable handler.

``HandlerActions`` implements both metadata and existence lookups by
reflecting over a handler object (controller, gRPC servicer, ...):
public methods are actions and their docstrings carry the directives.
"""

from __future__ import annotations

import inspect
from typing import Any, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class RoleSupplier(Protocol):
    def __call__(self) -> Optional[str]: ...


@runtime_checkable
class MetadataSource(Protocol):
    def get_metadata(self, action: str) -> Optional[str]: ...


@runtime_checkable
class ActionChecker(Protocol):
    def has_action(self, action: str) -> bool: ...


class HandlerActions:
    """Reflects actions and their docstrings from a handler object.

    Names starting with ``_`` are never actions.

    Example::

        class ArticleController:
            def edit(self):
                \"\"\"@role.user deny\"\"\"

        actions = HandlerActions(ArticleController())
        actions.get_metadata("edit")   # "@role.user deny"
        actions.has_action("publish")  # False
    """

    def __init__(self, handler: Any) -> None:
        self._handler = handler

    @property
    def handler(self) -> Any:
        return self._handler

    def _method(self, action: str) -> Any:
        if not action or action.startswith("_"):
            return None
        method = getattr(self._handler, action, None)
        return method if callable(method) else None

    def get_metadata(self, action: str) -> Optional[str]:
        method = self._method(action)
        if method is None:
            return None
        return inspect.getdoc(method)

    def has_action(self, action: str) -> bool:
        return self._method(action) is not None


class MappingMetadataSource:
    """Documentation text kept in memory, keyed by action name.

    Every key of the mapping also counts as an existing action.
    """

    def __init__(self, metadata: Optional[Mapping[str, str]] = None) -> None:
        self._metadata = dict(metadata or {})

    def get_metadata(self, action: str) -> Optional[str]:
        return self._metadata.get(action)

    def has_action(self, action: str) -> bool:
        return action in self._metadata


class StaticRoleSupplier:
    """Always reports the same role."""

    def __init__(self, role: Optional[str] = None) -> None:
        self.role = role

    def __call__(self) -> Optional[str]:
        return self.role


__all__ = [
    "ActionChecker",
    "HandlerActions",
    "MappingMetadataSource",
    "MetadataSource",
    "RoleSupplier",
    "StaticRoleSupplier",
]

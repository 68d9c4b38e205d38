"""Directive resolution: declarations, runtime overrides and inheritance.

For an (action, role, parameter) triple the effective value is found by:

1. Parsing the action's documentation into a DirectiveTable.
2. Overlaying runtime overrides registered for that action.
3. Returning the role's own value if it has one.
4. Otherwise walking up the role hierarchy and returning the value of
   the nearest ancestor that declares one.

No value anywhere on the path means "no directive" (``None``).
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..sources import MetadataSource
from .constants import Directive
from .hierarchy import RoleHierarchy
from .parser import DirectiveTable, parse_directives

logger = logging.getLogger(__name__)


class OverrideTable:
    """Directives registered at runtime, keyed by action.

    Owned by one resolver; writes are serialized so the table can be
    shared by concurrent readers once configured.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._actions: dict[str, DirectiveTable] = {}

    def set_param(self, action: str, role: str, param: str, value: str) -> None:
        with self._lock:
            self._actions.setdefault(action, DirectiveTable()).set(role, param, value)
        logger.debug("Override %s.%s.%s = %s", action, role, param, value)

    def set_access(self, action: str, role: str, access: str) -> None:
        """Register an ``access`` value (``allow``/``deny``/action name)."""
        self.set_param(action, role, Directive.ACCESS, access)

    def set_action(self, action: str, role: str, dest_action: str) -> None:
        """Register a redirect target for ``role``."""
        self.set_param(action, role, Directive.ACTION, dest_action)

    def for_action(self, action: str) -> DirectiveTable:
        with self._lock:
            table = self._actions.get(action)
            return table.copy() if table is not None else DirectiveTable()

    def clear(self, action: Optional[str] = None) -> None:
        with self._lock:
            if action is None:
                self._actions.clear()
            else:
                self._actions.pop(action, None)

    def __contains__(self, action: object) -> bool:
        return action in self._actions


class DirectiveResolver:
    """Computes the effective directive for a role on an action.

    Args:
        metadata_source: Supplies documentation text per action.
        hierarchy: Role tree used for inheritance.
        overrides: Runtime override table (a fresh one by default).
        cache: Memoize parsed metadata per action.
    """

    def __init__(
        self,
        metadata_source: MetadataSource,
        hierarchy: Optional[RoleHierarchy] = None,
        overrides: Optional[OverrideTable] = None,
        *,
        cache: bool = True,
    ) -> None:
        self._source = metadata_source
        self._hierarchy = hierarchy if hierarchy is not None else RoleHierarchy()
        self._overrides = overrides if overrides is not None else OverrideTable()
        self._cache_enabled = cache
        self._parsed: dict[str, DirectiveTable] = {}

    @property
    def hierarchy(self) -> RoleHierarchy:
        return self._hierarchy

    @property
    def overrides(self) -> OverrideTable:
        return self._overrides

    def _declared(self, action: str) -> DirectiveTable:
        if self._cache_enabled and action in self._parsed:
            return self._parsed[action].copy()
        table = parse_directives(self._source.get_metadata(action))
        # Only actions declaring directives are memoized
        if self._cache_enabled and table:
            self._parsed[action] = table.copy()
        return table

    def invalidate(self, action: Optional[str] = None) -> None:
        """Drop memoized metadata for one action, or for all."""
        if action is None:
            self._parsed.clear()
        else:
            self._parsed.pop(action, None)

    def directives(self, action: str) -> DirectiveTable:
        """Declared directives of ``action`` with overrides applied."""
        return self._declared(action).merge(self._overrides.for_action(action))

    def params(self, action: str, role: str) -> dict[str, str]:
        """Merged parameters declared for ``role`` itself (no inheritance)."""
        return self.directives(action).params(role)

    def resolve(self, action: str, role: str, parameter: str = Directive.ACCESS) -> Optional[str]:
        """Effective value of ``parameter`` for ``role`` on ``action``.

        Raises:
            RoleNotFoundError: ``role`` (or an ancestor lookup) is undeclared
                in a strict hierarchy.
        """
        table = self.directives(action)
        for name in self._hierarchy.resolve_path(role):
            value = table.get(name, parameter)
            if value is not None:
                if name.casefold() != role.casefold():
                    logger.debug(
                        "%s: role %r inherits %s=%s from %r",
                        action,
                        role,
                        parameter,
                        value,
                        name,
                    )
                return value
        return None


__all__ = ["DirectiveResolver", "OverrideTable"]

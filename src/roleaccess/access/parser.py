"""Directive declarations embedded in action documentation.

An action declares per-role directives in its docstring (or any other
documentation text), one per line::

    @role.<role>[.<param>] <value> [comment]

Example::

    def edit(self, request):
        \"\"\"Edit an article.

        @role.admin allow Admins may edit anything
        @role.user deny
        @role.user.access deny The same as above
        @role.user allow Overwrites the above setting
        @role.public deny Unregistered callers ('public' is predefined)
        @role.admin.action admin_edit Redirect admins to another action
        \"\"\"

Lines may be prefixed with ``*`` so C-style comment blocks parse too.
The ``@role`` marker is case-insensitive; role, parameter and value keep
their case. Lines that do not match are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Mapping, Optional, overload

from .constants import Directive

logger = logging.getLogger(__name__)

_DIRECTIVE_RE = re.compile(
    r"^[^\S\n]*(?:\*[^\S\n]*)?"
    r"(?i:@role)\.(?P<role>[^.\s]+)"
    r"(?:\.(?P<param>\S*))?"
    r"[^\S\n]+(?P<value>\S+)",
    re.MULTILINE,
)


class DirectiveTable:
    """Role → ``{parameter: value}`` table for one action.

    Role lookups are case-insensitive; the spelling of the first
    declaration is kept for display.
    """

    def __init__(self, entries: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._names: dict[str, str] = {}
        self._params: dict[str, dict[str, str]] = {}
        if entries:
            for role, params in entries.items():
                for param, value in params.items():
                    self.set(role, param, value)

    def set(self, role: str, param: str, value: str) -> None:
        key = role.casefold()
        self._names.setdefault(key, role)
        self._params.setdefault(key, {})[param] = value

    def get(self, role: str, param: str = Directive.ACCESS) -> Optional[str]:
        return self._params.get(role.casefold(), {}).get(param)

    def params(self, role: str) -> dict[str, str]:
        return dict(self._params.get(role.casefold(), {}))

    def roles(self) -> tuple[str, ...]:
        return tuple(self._names[key] for key in self._params)

    def merge(self, other: "DirectiveTable") -> "DirectiveTable":
        """Overlay ``other`` onto this table in place.

        Values of ``other`` replace values for the same role and
        parameter; keys missing from ``other`` are left untouched.
        """
        for role in other.roles():
            for param, value in other.params(role).items():
                self.set(role, param, value)
        return self

    def copy(self) -> "DirectiveTable":
        return DirectiveTable(self.to_dict())

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {self._names[key]: dict(params) for key, params in self._params.items()}

    def __contains__(self, role: object) -> bool:
        return isinstance(role, str) and role.casefold() in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self.roles())

    def __len__(self) -> int:
        return len(self._params)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DirectiveTable):
            return self._params == other._params
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"DirectiveTable({self.to_dict()!r})"


@overload
def parse_directives(text: Optional[str]) -> DirectiveTable: ...


@overload
def parse_directives(text: Optional[str], role: str) -> dict[str, str]: ...


def parse_directives(text: Optional[str], role: Optional[str] = None) -> DirectiveTable | dict[str, str]:
    """Parse ``@role`` declarations from documentation text.

    Later declarations of the same role and parameter overwrite
    earlier ones. A missing parameter defaults to ``access``.

    Args:
        text: Documentation text of one action (``None`` is treated as empty).
        role: Restrict the result to one role (case-insensitive).

    Returns:
        A DirectiveTable, or the ``{parameter: value}`` mapping of ``role``
        when a role is given.

    Example::

        >>> parse_directives("@role.user deny\\n@role.user allow", "user")
        {'access': 'allow'}
    """
    table = DirectiveTable()
    wanted = role.casefold() if role is not None else None

    for match in _DIRECTIVE_RE.finditer(text or ""):
        name = match.group("role")
        if wanted is not None and name.casefold() != wanted:
            continue
        param = match.group("param") or Directive.ACCESS
        table.set(name, param, match.group("value"))

    logger.debug("Parsed directives for %d role(s)", len(table))

    if role is not None:
        return table.params(role)
    return table


__all__ = ["DirectiveTable", "parse_directives"]

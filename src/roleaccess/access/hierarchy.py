"""Role hierarchy used for directive inheritance.

A role inherits the directives of the roles enclosing it. The hierarchy
is held as a tree of ``RoleNode`` values and can be declared in two
styles, both converted to the same tree at load time.

Nested style (deeper roles extend the roles above them)::

    {
        "user": [
            "subscriber",                 # subscriber inherits from user
            {"editor": {
                "author": {
                    "moderator": {
                        "admin": "superadmin",  # superadmin extends admin
                    },
                },
            }},
        ],
    }

Flat style (each role names at most one parent)::

    {"editor": "", "author": "editor", "moderator": "author"}

Names are matched case-insensitively and ``public`` is never looked up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional, Sequence

from ..exceptions import CyclicHierarchyError, HierarchyConfigError, RoleNotFoundError
from .constants import PUBLIC_ROLE

if TYPE_CHECKING:
    from ..config import RoleAccessConfig

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    LEAF = "leaf"
    ALIASED = "aliased"  # "key": "alias", alias sits directly below key
    SUBTREE = "subtree"


@dataclass(frozen=True)
class RoleNode:
    """One declared role.

    Attributes:
        name: Role name as declared.
        kind: Node shape.
        alias: Second name declared by a ``"key": "alias"`` pair.
        children: Roles inheriting from this one, in declaration order.
    """

    name: str
    kind: NodeKind = NodeKind.LEAF
    alias: Optional[str] = None
    children: tuple["RoleNode", ...] = ()

    @classmethod
    def leaf(cls, name: str) -> "RoleNode":
        return cls(name=name)

    @classmethod
    def aliased(cls, name: str, alias: str) -> "RoleNode":
        return cls(name=name, kind=NodeKind.ALIASED, alias=alias)

    @classmethod
    def subtree(cls, name: str, children: Sequence["RoleNode"]) -> "RoleNode":
        return cls(name=name, kind=NodeKind.SUBTREE, children=tuple(children))

    def walk(self) -> Iterator[str]:
        """Yield every name in this subtree, pre-order."""
        yield self.name
        if self.alias is not None:
            yield self.alias
        for child in self.children:
            yield from child.walk()


def _same(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def _index_paths(
    nodes: Sequence[RoleNode],
    above: tuple[str, ...],
    paths: dict[str, tuple[str, ...]],
) -> None:
    """Record the self-first path of every declared name, pre-order.

    At each node the key comes first, then the alias, then the
    children. A name seen again later keeps its first path.
    """
    for node in nodes:
        here = (node.name, *above)
        paths.setdefault(node.name.casefold(), here)
        if node.alias is not None:
            paths.setdefault(node.alias.casefold(), (node.alias, *here))
        _index_paths(node.children, here, paths)


# ── Declaration converters ──────────────────────────────────────


def _nested_entries(declaration: Any, seen: tuple[int, ...]) -> list[RoleNode]:
    if id(declaration) in seen:
        raise CyclicHierarchyError("Nested role hierarchy refers to itself")
    seen = (*seen, id(declaration))

    if isinstance(declaration, Mapping):
        return [_nested_node(key, value, seen) for key, value in declaration.items()]

    if isinstance(declaration, (list, tuple)):
        nodes: list[RoleNode] = []
        for item in declaration:
            if isinstance(item, str):
                nodes.append(RoleNode.leaf(item))
            elif isinstance(item, Mapping):
                nodes.extend(_nested_entries(item, seen))
            else:
                raise HierarchyConfigError(
                    f"Unsupported role hierarchy entry: {item!r}",
                    entry=repr(item),
                )
        return nodes

    raise HierarchyConfigError(
        f"Role hierarchy must be a mapping or a list, got {type(declaration).__name__}",
    )


def _nested_node(key: Any, value: Any, seen: tuple[int, ...]) -> RoleNode:
    if not isinstance(key, str) or not key:
        raise HierarchyConfigError(f"Role name must be a non-empty string, got {key!r}")
    if value is None or (isinstance(value, (Mapping, list, tuple)) and not value):
        return RoleNode.leaf(key)
    if isinstance(value, str):
        return RoleNode.aliased(key, value)
    return RoleNode.subtree(key, _nested_entries(value, seen))


def _flat_nodes(mapping: Mapping[str, Optional[str]]) -> list[RoleNode]:
    names: dict[str, str] = {}
    parents: dict[str, Optional[str]] = {}

    for role, parent in mapping.items():
        if not isinstance(role, str) or not role:
            raise HierarchyConfigError(f"Role name must be a non-empty string, got {role!r}")
        if parent is not None and not isinstance(parent, str):
            raise HierarchyConfigError(
                f"Parent of role {role!r} must be a string, got {parent!r}",
                role=role,
            )
        key = role.casefold()
        if key in parents:
            raise HierarchyConfigError(f"Role {role!r} is declared twice", role=role)
        names[key] = role
        parents[key] = parent.casefold() if parent else None

    # Roles named only as a parent are bare roots
    for role, parent in mapping.items():
        if parent and parent.casefold() not in names:
            names[parent.casefold()] = parent
            parents[parent.casefold()] = None

    for start in parents:
        visited = {start}
        current = parents[start]
        while current is not None:
            if current in visited:
                raise CyclicHierarchyError(
                    f"Role {names[start]!r} is its own ancestor",
                    role=names[start],
                )
            visited.add(current)
            current = parents[current]

    children: dict[Optional[str], list[str]] = {}
    for key, parent in parents.items():
        children.setdefault(parent, []).append(key)

    def build(key: str) -> RoleNode:
        kids = children.get(key, [])
        if not kids:
            return RoleNode.leaf(names[key])
        return RoleNode.subtree(names[key], [build(kid) for kid in kids])

    return [build(key) for key in children.get(None, [])]


# ── Hierarchy ───────────────────────────────────────────────────


class RoleHierarchy:
    """Declared role tree with ancestor lookup.

    Args:
        nodes: Top-level roles.
        strict: Raise RoleNotFoundError for undeclared roles instead of
            treating them as roots without ancestors.
    """

    def __init__(self, nodes: Sequence[RoleNode] = (), *, strict: bool = False) -> None:
        self._nodes = tuple(nodes)
        self._strict = strict
        self._paths: dict[str, tuple[str, ...]] = {}
        _index_paths(self._nodes, (), self._paths)

    @classmethod
    def from_nested(cls, declaration: Any, *, strict: bool = False) -> "RoleHierarchy":
        if declaration is None:
            return cls(strict=strict)
        return cls(_nested_entries(declaration, ()), strict=strict)

    @classmethod
    def from_flat(cls, mapping: Optional[Mapping[str, Optional[str]]], *, strict: bool = False) -> "RoleHierarchy":
        if mapping is None:
            return cls(strict=strict)
        if not isinstance(mapping, Mapping):
            raise HierarchyConfigError("Flat role hierarchy must be a mapping of role -> parent")
        return cls(_flat_nodes(mapping), strict=strict)

    @classmethod
    def from_config(cls, config: "RoleAccessConfig") -> "RoleHierarchy":
        from ..config import HierarchyStyle

        if config.hierarchy_style == HierarchyStyle.FLAT:
            return cls.from_flat(config.hierarchy, strict=config.strict_roles)  # type: ignore[arg-type]
        return cls.from_nested(config.hierarchy, strict=config.strict_roles)

    @property
    def nodes(self) -> tuple[RoleNode, ...]:
        return self._nodes

    @property
    def strict(self) -> bool:
        return self._strict

    def _find(self, role: str) -> Optional[tuple[str, ...]]:
        return self._paths.get(role.casefold())

    def contains(self, role: str) -> bool:
        return _same(role, PUBLIC_ROLE) or self._find(role) is not None

    def resolve_path(self, role: str) -> tuple[str, ...]:
        """Return ``role`` followed by its ancestors up to the root.

        Raises:
            RoleNotFoundError: ``role`` is undeclared and the hierarchy is strict.
        """
        if _same(role, PUBLIC_ROLE):
            return (PUBLIC_ROLE,)

        path = self._find(role)
        if path is not None:
            return path
        if self._strict:
            raise RoleNotFoundError(f"Role {role!r} is not declared in the hierarchy", role=role)

        logger.debug("Role %r not in hierarchy, treating as root", role)
        return (role,)

    def parent_of(self, role: str) -> Optional[str]:
        path = self.resolve_path(role)
        return path[1] if len(path) > 1 else None

    def roles(self) -> tuple[str, ...]:
        """All declared names (including aliases), pre-order."""
        return tuple(name for node in self._nodes for name in node.walk())

    def __repr__(self) -> str:
        return f"RoleHierarchy(roles={self.roles()!r}, strict={self._strict})"


__all__ = ["NodeKind", "RoleHierarchy", "RoleNode"]

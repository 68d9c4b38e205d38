"""Role-based access resolution for handler actions.

Defines:
- parse_directives / DirectiveTable: ``@role`` declarations in action docs
- RoleHierarchy / RoleNode: role inheritance tree (nested or flat input)
- DirectiveResolver / OverrideTable: declared + runtime + inherited values
- AccessDispatcher / Outcome: allow, deny, redirect or no directive
- RoleAccess: all of the above wired from a RoleAccessConfig
"""

from .component import RoleAccess
from .constants import DEFAULT_ACTION_PREFIX, PUBLIC_ROLE, Directive, OutcomeKind
from .dispatcher import AccessDispatcher, Outcome
from .hierarchy import NodeKind, RoleHierarchy, RoleNode
from .parser import DirectiveTable, parse_directives
from .resolver import DirectiveResolver, OverrideTable

__all__ = [
    "DEFAULT_ACTION_PREFIX",
    "PUBLIC_ROLE",
    "AccessDispatcher",
    "Directive",
    "DirectiveResolver",
    "DirectiveTable",
    "NodeKind",
    "Outcome",
    "OutcomeKind",
    "OverrideTable",
    "RoleAccess",
    "RoleHierarchy",
    "RoleNode",
    "parse_directives",
]

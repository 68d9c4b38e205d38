"""RoleAccess — one-stop access control for a handler object.

Wires the parser, hierarchy, resolver and dispatcher together from a
RoleAccessConfig and the collaborators of the hosting framework.

Usage::

    class ArticleController:
        def index(self):
            \"\"\"List articles.

            @role.public allow
            @role.admin admin_index Admins get the management view
            \"\"\"

        def admin_index(self): ...

    access = RoleAccess(
        RoleAccessConfig(hierarchy={"user": {"editor": "admin"}}),
        handler=ArticleController(),
        role_supplier=lambda: session.get("role"),
    )
    outcome = access.dispatch("index")
"""

from __future__ import annotations

from typing import Any, Optional

from ..config import RoleAccessConfig
from ..exceptions import ConfigurationError
from ..logging import get_access_logger
from ..sources import ActionChecker, HandlerActions, MetadataSource, RoleSupplier
from .constants import PUBLIC_ROLE, Directive
from .dispatcher import AccessDispatcher, Outcome
from .hierarchy import RoleHierarchy
from .parser import DirectiveTable
from .resolver import DirectiveResolver, OverrideTable


class RoleAccess:
    """Role-based access for the actions of one handler.

    Either ``handler`` or both ``metadata_source`` and ``action_checker``
    must be given. Each instance owns its override table, so create one
    per request handler when overrides are request-specific.

    Args:
        config: Access settings (defaults apply when omitted).
        handler: Object whose public methods are the actions.
        metadata_source: Explicit documentation source.
        action_checker: Explicit action existence check.
        role_supplier: Returns the caller's role, ``None`` if unauthenticated.
        hierarchy: Prebuilt hierarchy (otherwise built from ``config``).
    """

    def __init__(
        self,
        config: Optional[RoleAccessConfig] = None,
        *,
        handler: Any = None,
        metadata_source: Optional[MetadataSource] = None,
        action_checker: Optional[ActionChecker] = None,
        role_supplier: Optional[RoleSupplier] = None,
        hierarchy: Optional[RoleHierarchy] = None,
    ) -> None:
        self.config = config or RoleAccessConfig()

        if handler is not None:
            actions = HandlerActions(handler)
            metadata_source = metadata_source or actions
            action_checker = action_checker or actions
        if metadata_source is None or action_checker is None:
            raise ConfigurationError("RoleAccess needs a handler or a metadata source and an action checker")

        self._role_supplier = role_supplier
        self.hierarchy = hierarchy if hierarchy is not None else RoleHierarchy.from_config(self.config)
        self.overrides = OverrideTable()
        self.resolver = DirectiveResolver(
            metadata_source,
            self.hierarchy,
            self.overrides,
            cache=self.config.cache_metadata,
        )
        self.dispatcher = AccessDispatcher(
            self.resolver,
            action_checker,
            action_prefix=self.config.action_prefix,
            redirect_policy=self.config.redirect_policy,
        )

    def get_role_name(self) -> str:
        """Current caller's role, ``public`` when not logged in."""
        role = self._role_supplier() if self._role_supplier is not None else None
        return role if role is not None else PUBLIC_ROLE

    def get_role(self, role: Optional[str] = None) -> tuple[str, ...]:
        """Role followed by its ancestors (current caller by default)."""
        return self.hierarchy.resolve_path(role if role is not None else self.get_role_name())

    def get_params(self, action: str, role: Optional[str] = None) -> DirectiveTable | dict[str, str]:
        """Declared and overridden directives of ``action``.

        Without ``role`` the whole table is returned, otherwise the
        parameters of that role only (not inherited).
        """
        if role is None:
            return self.resolver.directives(action)
        return self.resolver.params(action, role)

    def set_access(self, action: str, role: str, access: str) -> None:
        self.overrides.set_access(action, role, access)

    def set_action(self, action: str, role: str, dest_action: str) -> None:
        self.overrides.set_action(action, role, dest_action)

    def resolve(self, action: str, role: Optional[str] = None, parameter: str = Directive.ACCESS) -> Optional[str]:
        return self.resolver.resolve(action, role if role is not None else self.get_role_name(), parameter)

    def dispatch(self, action: str, role: Optional[str] = None) -> Outcome:
        """Decide the outcome for the caller (or ``role``) invoking ``action``."""
        role_name = role if role is not None else self.get_role_name()
        outcome = self.dispatcher.dispatch(action, role_name)
        get_access_logger(__name__, action=action, role=role_name).debug(
            "Dispatch outcome: %s%s",
            outcome.kind.value,
            f" -> {outcome.action}" if outcome.action else "",
        )
        return outcome


__all__ = ["RoleAccess"]

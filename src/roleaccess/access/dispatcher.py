"""Access decision dispatcher.

Turns the resolved ``access`` directive of a caller into an Outcome the
integration layer acts upon:

- ``allow``            → Outcome.allowed()
- ``deny``             → Outcome.denied()
- any other value      → Outcome.substitute(value) if that action exists,
                         MissingActionError otherwise
- nothing resolved     → Outcome.no_directive()

Actions named with the redirect-only prefix (``role_`` by default) can
only be reached through substitution; dispatching them directly raises
PrivateActionError before any resolution happens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import RedirectPolicy
from ..exceptions import MissingActionError, PrivateActionError
from ..sources import ActionChecker
from .constants import DEFAULT_ACTION_PREFIX, Directive, OutcomeKind
from .resolver import DirectiveResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Decision for one caller on one action."""

    kind: OutcomeKind
    action: Optional[str] = None

    @classmethod
    def allowed(cls) -> "Outcome":
        return cls(OutcomeKind.ALLOWED)

    @classmethod
    def denied(cls) -> "Outcome":
        return cls(OutcomeKind.DENIED)

    @classmethod
    def substitute(cls, action: str) -> "Outcome":
        return cls(OutcomeKind.SUBSTITUTE, action)

    @classmethod
    def no_directive(cls) -> "Outcome":
        return cls(OutcomeKind.NO_DIRECTIVE)

    @property
    def is_allowed(self) -> bool:
        return self.kind == OutcomeKind.ALLOWED

    @property
    def is_denied(self) -> bool:
        return self.kind == OutcomeKind.DENIED

    @property
    def is_substitute(self) -> bool:
        return self.kind == OutcomeKind.SUBSTITUTE


class AccessDispatcher:
    """Maps resolved directives to outcomes.

    Args:
        resolver: Directive resolver for the handler's actions.
        action_checker: Reports whether a redirect target exists.
        action_prefix: Prefix of redirect-only actions.
        redirect_policy: Whether the ``action`` parameter is enforced.
    """

    def __init__(
        self,
        resolver: DirectiveResolver,
        action_checker: ActionChecker,
        *,
        action_prefix: str = DEFAULT_ACTION_PREFIX,
        redirect_policy: RedirectPolicy = RedirectPolicy.ACCESS_ONLY,
    ) -> None:
        self._resolver = resolver
        self._checker = action_checker
        self._prefix = action_prefix
        self._policy = RedirectPolicy(redirect_policy)

    @property
    def resolver(self) -> DirectiveResolver:
        return self._resolver

    def is_private(self, action: str) -> bool:
        return action.startswith(self._prefix)

    def _substitute(self, action: str, role: str, target: str) -> Outcome:
        if not self._checker.has_action(target):
            raise MissingActionError(
                f"Action {action!r} redirects role {role!r} to missing action {target!r}",
                action=action,
                role=role,
                target=target,
            )
        logger.debug("%s: role %r redirected to %r", action, role, target)
        return Outcome.substitute(target)

    def dispatch(self, action: str, role: str) -> Outcome:
        """Decide what happens when ``role`` invokes ``action``.

        Raises:
            PrivateActionError: ``action`` is redirect-only.
            MissingActionError: The directive names a non-existent action.
            RoleNotFoundError: ``role`` is undeclared in a strict hierarchy.
        """
        if self.is_private(action):
            logger.warning("Direct call to redirect-only action %r by role %r", action, role)
            raise PrivateActionError(
                f"Action {action!r} can only be reached by redirection",
                action=action,
                role=role,
            )

        access = self._resolver.resolve(action, role, Directive.ACCESS)

        if access == Directive.DENY:
            logger.warning("%s: access denied for role %r", action, role)
            return Outcome.denied()

        if access is not None and access != Directive.ALLOW:
            return self._substitute(action, role, access)

        if self._policy == RedirectPolicy.ACTION_WHEN_PERMITTED:
            target = self._resolver.resolve(action, role, Directive.ACTION)
            if target is not None:
                return self._substitute(action, role, target)

        if access == Directive.ALLOW:
            logger.debug("%s: access allowed for role %r", action, role)
            return Outcome.allowed()

        logger.debug("%s: no directive for role %r", action, role)
        return Outcome.no_directive()


__all__ = ["AccessDispatcher", "Outcome"]

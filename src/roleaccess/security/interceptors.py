"""gRPC interceptor enforcing role directives declared on servicer methods.

Provides:
- ``EnforcementMode`` — three-state toggle: off / warn / enforce.
- ``CallRoleResolver`` — callable mapping call details to the caller's role.
- ``RoleAccessInterceptor`` — server interceptor acting on dispatch outcomes.
- ``_extract_rpc_name``, ``_should_skip``, ``_reroute`` — helper utilities.

The servicer's RPC method docstrings carry the ``@role`` directives,
so the RPC name is used as the action name.
"""

from __future__ import annotations

import collections
import logging
from enum import Enum
from typing import Any, Callable, Optional

import grpc

from ..access import PUBLIC_ROLE, RoleAccess
from ..exceptions import ConfigurationError, RoleAccessError, get_grpc_status_code

logger = logging.getLogger(__name__)

# Returns the authenticated caller's role for a call, ``None`` if anonymous
CallRoleResolver = Callable[[grpc.HandlerCallDetails], Optional[str]]


# ── Enforcement Mode ────────────────────────────────────────────


class EnforcementMode(str, Enum):
    """Three-state enforcement toggle.

    - ``off``     — no checks, only caller-role logging.
    - ``warn``    — dispatch, log denials and redirects as WARNING, but pass through.
    - ``enforce`` — deny, redirect and fail as dispatch decides (production).

    Set via env ``ROLEACCESS_ENFORCEMENT=off|warn|enforce``.
    """

    OFF = "off"
    WARN = "warn"
    ENFORCE = "enforce"

    @classmethod
    def from_env(cls) -> EnforcementMode:
        """Read from ``ROLEACCESS_ENFORCEMENT`` env var (default: enforce)."""
        import os  # Localized: the interceptor may be built before config is loaded

        raw = os.environ.get("ROLEACCESS_ENFORCEMENT", "enforce").strip().lower()
        try:
            return cls(raw)
        except ValueError:
            logger.warning(
                "Unknown ROLEACCESS_ENFORCEMENT=%r, defaulting to 'enforce'",
                raw,
            )
            return cls.ENFORCE


# Method prefixes that bypass access checks
_SKIP_PREFIXES = (
    "grpc.health.v1",
    "grpc.reflection.v1",
)


class _RoutedCallDetails(
    collections.namedtuple("_RoutedCallDetails", ("method", "invocation_metadata")),
    grpc.HandlerCallDetails,
):
    pass


# ── Helpers ──────────────────────────────────────────────────────


def _extract_rpc_name(full_method: str) -> str:
    """Extract RPC name from fully-qualified method string.

    ``/blog.ArticleService/Edit`` → ``Edit``
    """
    return full_method.rsplit("/", 1)[-1] if "/" in full_method else full_method


def _should_skip(method: str) -> bool:
    """Check if this method should skip access checks."""
    return any(prefix in method for prefix in _SKIP_PREFIXES)


def _reroute(full_method: str, rpc_name: str) -> str:
    """Replace the RPC name of a fully-qualified method string.

    ``/blog.ArticleService/Edit`` + ``AdminEdit`` → ``/blog.ArticleService/AdminEdit``
    """
    if "/" not in full_method:
        return rpc_name
    return f"{full_method.rsplit('/', 1)[0]}/{rpc_name}"


# ── Interceptor ─────────────────────────────────────────────────


class RoleAccessInterceptor(grpc.aio.ServerInterceptor):
    """gRPC server interceptor driven by ``@role`` directives.

    Sits before all handlers and:
    1. Determines the caller's role (``public`` if anonymous)
    2. Dispatches the RPC name through ``RoleAccess``
    3. Continues on ``allowed`` / ``no_directive``
    4. Reroutes to the substituted RPC on ``substitute``
    5. Aborts with ``PERMISSION_DENIED`` on ``denied`` or private RPCs,
       ``FAILED_PRECONDITION`` on missing actions / unknown strict roles

    RPCs without a directive pass through; apply a default policy in
    the servicer if needed.

    The role comes from ``role_resolver`` when given, otherwise from the
    role supplier configured on ``access``. Request metadata is client
    controlled and is only read with ``trust_role_metadata=True``, for
    servers reachable solely through a proxy that authenticates the
    caller and sets the header itself.

    Args:
        access: RoleAccess bound to the servicer.
        service_name: Human-readable service name for log messages.
        enforcement: Three-state mode (off / warn / enforce).
            Defaults to ``ROLEACCESS_ENFORCEMENT`` env var (``enforce`` if unset).
        role_resolver: Maps call details to the authenticated caller's role.
        trust_role_metadata: Read the role from the ``role_metadata_key``
            header (trusted proxy only).
        role_metadata_key: Metadata key holding the role
            (default ``x-<role_field>``).

    Usage::

        access = RoleAccess(config, handler=servicer)
        server = grpc.aio.server(interceptors=[
            RoleAccessInterceptor(
                access,
                service_name="Articles",
                role_resolver=lambda details: auth.role_for(details),
            ),
        ])
    """

    def __init__(
        self,
        access: RoleAccess,
        *,
        service_name: str = "Service",
        enforcement: Optional[EnforcementMode] = None,
        role_resolver: Optional[CallRoleResolver] = None,
        trust_role_metadata: bool = False,
        role_metadata_key: Optional[str] = None,
    ) -> None:
        if role_resolver is not None and trust_role_metadata:
            raise ConfigurationError("Use either role_resolver or trust_role_metadata, not both")

        self._access = access
        self._service_name = service_name
        self._mode = enforcement if enforcement is not None else EnforcementMode.from_env()
        self._role_resolver = role_resolver
        self._trust_metadata = trust_role_metadata
        self._role_key = (role_metadata_key or f"x-{access.config.role_field}").lower()

        if trust_role_metadata:
            logger.warning(
                "%s trusts the '%s' request header for caller roles",
                self._service_name,
                self._role_key,
            )

        if self._mode != EnforcementMode.OFF:
            logger.info(
                "%s role access mode: %s",
                self._service_name,
                self._mode.value,
            )

    def _caller_role(self, handler_call_details: grpc.HandlerCallDetails) -> str:
        if self._role_resolver is not None:
            role = self._role_resolver(handler_call_details)
        elif self._trust_metadata:
            metadata = dict(handler_call_details.invocation_metadata or [])
            role = metadata.get(self._role_key)
        else:
            return self._access.get_role_name()
        if role is None:
            return PUBLIC_ROLE
        return str(role).strip() or PUBLIC_ROLE

    async def intercept_service(
        self,
        continuation: Any,
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        """Intercept incoming gRPC calls for role-based dispatch."""
        method = handler_call_details.method or ""

        if _should_skip(method):
            return await continuation(handler_call_details)

        rpc_name = _extract_rpc_name(method)
        role = self._caller_role(handler_call_details)

        logger.info("%s RPC %s | role=%s", self._service_name, rpc_name, role)

        if self._mode == EnforcementMode.OFF:
            return await continuation(handler_call_details)

        deny_reason: str | None = None
        deny_code: grpc.StatusCode = grpc.StatusCode.PERMISSION_DENIED
        target: str | None = None

        try:
            outcome = self._access.dispatch(rpc_name, role)
        except RoleAccessError as e:
            deny_reason = f"[{e.code}] {e.message}"
            deny_code = get_grpc_status_code(e)
        else:
            if outcome.is_denied:
                deny_reason = f"role '{role}' denied"
            elif outcome.is_substitute:
                target = outcome.action

        if self._mode == EnforcementMode.WARN and (deny_reason or target):
            logger.warning(
                "%s WARN '%s' — %s (would %s in enforce mode)",
                self._service_name,
                rpc_name,
                deny_reason or f"redirect to '{target}'",
                "block" if deny_reason else "redirect",
            )
            return await continuation(handler_call_details)

        if deny_reason:
            logger.warning(
                "%s DENIED '%s' — %s",
                self._service_name,
                rpc_name,
                deny_reason,
            )

            _deny_msg = f"{self._service_name}: {rpc_name} denied — {deny_reason}"
            _deny_status = deny_code

            async def _denied(request, context):
                await context.abort(_deny_status, _deny_msg)

            return grpc.unary_unary_rpc_method_handler(_denied)

        if target:
            logger.info(
                "%s REDIRECT '%s' -> '%s' for role '%s'",
                self._service_name,
                rpc_name,
                target,
                role,
            )
            routed = _RoutedCallDetails(_reroute(method, target), handler_call_details.invocation_metadata)
            return await continuation(routed)

        return await continuation(handler_call_details)


__all__ = [
    "CallRoleResolver",
    "EnforcementMode",
    "RoleAccessInterceptor",
    "_extract_rpc_name",
    "_reroute",
    "_should_skip",
]

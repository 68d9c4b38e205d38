"""gRPC integration for roleaccess.

Acts on dispatch outcomes for ``grpc.aio`` services whose servicer
methods declare ``@role`` directives in their docstrings.

Usage::

    from roleaccess import RoleAccess, RoleAccessConfig
    from roleaccess.security import get_access_interceptors

    access = RoleAccess(RoleAccessConfig(hierarchy=ROLES), handler=servicer)
    server = grpc.aio.server(
        interceptors=get_access_interceptors(access, role_resolver=auth.role_for),
    )

Configuration (env vars)::

    ROLEACCESS_ENFORCEMENT=enforce   # off | warn | enforce (default: enforce)
"""

from __future__ import annotations

import grpc

from ..access import RoleAccess
from .interceptors import (
    CallRoleResolver,
    EnforcementMode,
    RoleAccessInterceptor,
    _extract_rpc_name,
    _reroute,
    _should_skip,
)


def get_access_interceptors(
    access: RoleAccess,
    *,
    service_name: str = "Service",
    enforcement: EnforcementMode | None = None,
    role_resolver: CallRoleResolver | None = None,
    trust_role_metadata: bool = False,
) -> list[grpc.aio.ServerInterceptor]:
    """Get gRPC server interceptors enforcing ``access``.

    Returns an empty list when enforcement is ``off`` so the server
    runs without the extra hop. Role sources are as for
    ``RoleAccessInterceptor``.
    """
    mode = enforcement if enforcement is not None else EnforcementMode.from_env()
    if mode == EnforcementMode.OFF:
        return []
    return [
        RoleAccessInterceptor(
            access,
            service_name=service_name,
            enforcement=mode,
            role_resolver=role_resolver,
            trust_role_metadata=trust_role_metadata,
        )
    ]


__all__ = [
    "CallRoleResolver",
    "EnforcementMode",
    "RoleAccessInterceptor",
    "_extract_rpc_name",
    "_reroute",
    "_should_skip",
    "get_access_interceptors",
]

from .config import (
    HierarchyStyle,
    LogLevel,
    RedirectPolicy,
    RoleAccessConfig,
    load_config_from_env,
)
from .exceptions import (
    AccessDeniedError,
    ConfigurationError,
    CyclicHierarchyError,
    HierarchyConfigError,
    MissingActionError,
    PrivateActionError,
    RoleAccessError,
    RoleNotFoundError,
)
from .logging import (
    AccessLoggerAdapter,
    RoleAccessFormatter,
    get_access_logger,
    safe_preview,
    setup_logging,
)
from .sources import (
    ActionChecker,
    HandlerActions,
    MappingMetadataSource,
    MetadataSource,
    RoleSupplier,
    StaticRoleSupplier,
)
from .access import (
    PUBLIC_ROLE,
    AccessDispatcher,
    Directive,
    DirectiveResolver,
    DirectiveTable,
    Outcome,
    OutcomeKind,
    OverrideTable,
    RoleAccess,
    RoleHierarchy,
    RoleNode,
    parse_directives,
)

__all__ = [
    'HierarchyStyle',
    'LogLevel',
    'RedirectPolicy',
    'RoleAccessConfig',
    'load_config_from_env',
    'AccessDeniedError',
    'ConfigurationError',
    'CyclicHierarchyError',
    'HierarchyConfigError',
    'MissingActionError',
    'PrivateActionError',
    'RoleAccessError',
    'RoleNotFoundError',
    'AccessLoggerAdapter',
    'RoleAccessFormatter',
    'get_access_logger',
    'safe_preview',
    'setup_logging',
    'ActionChecker',
    'HandlerActions',
    'MappingMetadataSource',
    'MetadataSource',
    'RoleSupplier',
    'StaticRoleSupplier',
    'PUBLIC_ROLE',
    'AccessDispatcher',
    'Directive',
    'DirectiveResolver',
    'DirectiveTable',
    'Outcome',
    'OutcomeKind',
    'OverrideTable',
    'RoleAccess',
    'RoleHierarchy',
    'RoleNode',
    'parse_directives',
]

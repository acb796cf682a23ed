"""
dirquery - read-only LDAP directory searches for flow-based automation

Builds a fresh LDAP(S) session per request, runs one search and turns any
failure into a stable, user-facing error record.
"""

__version__ = "1.0.0"

from .constants import Colors, DEFAULT_FILTER, DEFAULT_SCOPE, SCOPES
from .models import (
    ConnectionConfig,
    ConnectionDescriptor,
    ErrorInfo,
    SearchRequest,
    SearchResult,
    StatusUpdate,
    TlsOptions,
)
from .ldap import (
    LdapError,
    LdapSession,
    SearchOrchestrator,
    build_descriptor,
    classify,
    create_ldap_error,
    execute,
    RESULT_CODES,
    NAME_CODES,
)
from .node import SearchNode
from .config import load_config, build_connection_config, ConfigError
from .cli import main

__all__ = [
    # Version
    "__version__",
    # Constants
    "Colors",
    "DEFAULT_FILTER",
    "DEFAULT_SCOPE",
    "SCOPES",
    # Models
    "ConnectionConfig",
    "ConnectionDescriptor",
    "ErrorInfo",
    "SearchRequest",
    "SearchResult",
    "StatusUpdate",
    "TlsOptions",
    # LDAP
    "LdapError",
    "LdapSession",
    "SearchOrchestrator",
    "build_descriptor",
    "classify",
    "create_ldap_error",
    "execute",
    "RESULT_CODES",
    "NAME_CODES",
    # Node
    "SearchNode",
    # Config
    "load_config",
    "build_connection_config",
    "ConfigError",
    # CLI
    "main",
]

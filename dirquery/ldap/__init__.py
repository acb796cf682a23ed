"""LDAP utilities for directory searches."""

from .errors import (
    AD_ERROR_CODES,
    CODE_NAMES,
    NAME_CODES,
    RESULT_CODES,
    LdapError,
    classify,
    classify_short,
    create_ldap_error,
    get_error_info,
    parse_ad_error_code,
)
from .connection import LdapSession, build_descriptor, build_tls
from .search import SearchOrchestrator, execute, parse_attributes

__all__ = [
    "AD_ERROR_CODES",
    "CODE_NAMES",
    "NAME_CODES",
    "RESULT_CODES",
    "LdapError",
    "classify",
    "classify_short",
    "create_ldap_error",
    "get_error_info",
    "parse_ad_error_code",
    "LdapSession",
    "build_descriptor",
    "build_tls",
    "SearchOrchestrator",
    "execute",
    "parse_attributes",
]

"""Data models for directory search requests and results."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

from .constants import (
    DEFAULT_FILTER,
    DEFAULT_PORTS,
    DEFAULT_SCOPE,
    PROTOCOL_ALIASES,
    PROTOCOL_LDAP,
    PROTOCOLS,
)


@dataclass(frozen=True)
class ConnectionConfig:
    """Static connection settings, supplied once per configured server."""
    host: str
    port: Optional[int] = None  # defaults to 389 (ldap) / 636 (ldaps)
    protocol: str = PROTOCOL_LDAP  # ldap | ldaps (plain and tls accepted)
    base_dn: str = ""
    tls_insecure: bool = False
    ca_pem: Optional[str] = None  # PEM text of one or more CAs
    bind_dn: Optional[str] = None
    bind_password: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        protocol = PROTOCOL_ALIASES.get(str(self.protocol or PROTOCOL_LDAP).strip().lower())
        if protocol is None:
            raise ValueError(f"Unknown protocol '{self.protocol}' (expected one of: {', '.join(PROTOCOLS)})")
        object.__setattr__(self, "protocol", protocol)
        if not self.port:
            object.__setattr__(self, "port", DEFAULT_PORTS[protocol])

    @property
    def url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"


@dataclass
class SearchRequest:
    """Per-invocation search parameters. Unset fields fall back to defaults."""
    base_dn: Optional[str] = None
    filter: str = DEFAULT_FILTER
    scope: str = DEFAULT_SCOPE
    attributes: Union[List[str], str, None] = None
    bind_dn: Optional[str] = None
    bind_password: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class TlsOptions:
    """TLS settings for an ldaps connection."""
    verify: bool
    server_name: str  # SNI and certificate hostname
    ca_pem: Optional[str] = None


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Everything needed to construct a directory client session."""
    url: str
    host: str
    port: int
    use_ssl: bool
    tls: Optional[TlsOptions] = None  # absent for plain ldap


@dataclass
class ErrorInfo:
    """Normalized description of a failure."""
    code: Optional[int]
    name: str
    short: str
    description: str
    message: str = ""
    detail: Optional[str] = None  # AD sub-error status, e.g. ERROR_ACCOUNT_LOCKED_OUT

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if d["detail"] is None:
            del d["detail"]
        return d


@dataclass
class SearchResult:
    """Raw entries returned by a successful search."""
    entries: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def status(self) -> str:
        return f"ok ({len(self.entries)})"


@dataclass(frozen=True)
class StatusUpdate:
    """Advisory progress update for display by the host."""
    state: str  # connecting | searching | ok | error
    text: str
    fill: str = "grey"
    shape: str = "dot"

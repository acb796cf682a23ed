"""Connection descriptors and the ldap3-backed directory session."""

import logging
import ssl
from typing import Any, Dict, List, Optional

from ldap3 import ALL_ATTRIBUTES, BASE, LEVEL, NONE, SIMPLE, SUBTREE, Connection, Server, Tls

from ..constants import PROTOCOL_LDAPS, SCOPE_BASE, SCOPE_ONE, SCOPE_SUB
from ..models import ConnectionConfig, ConnectionDescriptor, TlsOptions

logger = logging.getLogger(__name__)

LDAP3_SCOPES = {
    SCOPE_BASE: BASE,
    SCOPE_ONE: LEVEL,
    SCOPE_SUB: SUBTREE,
}


def build_descriptor(config: ConnectionConfig) -> ConnectionDescriptor:
    """
    Turn static configuration into a client construction descriptor.

    For ldaps the descriptor always carries TLS options: verification is
    disabled exactly when tls_insecure is set, the server name is always the
    configured host, and CA PEM text is attached verbatim when not blank.
    Plain ldap descriptors carry no TLS options at all.
    """
    tls = None
    use_ssl = config.protocol == PROTOCOL_LDAPS
    if use_ssl:
        ca_pem = config.ca_pem if config.ca_pem and str(config.ca_pem).strip() else None
        tls = TlsOptions(
            verify=not config.tls_insecure,
            server_name=config.host,
            ca_pem=ca_pem,
        )
    return ConnectionDescriptor(
        url=config.url,
        host=config.host,
        port=config.port,
        use_ssl=use_ssl,
        tls=tls,
    )


def build_tls(options: TlsOptions) -> Tls:
    """Build the ldap3 Tls object for a descriptor's TLS options."""
    tls_kwargs: Dict[str, Any] = {
        "validate": ssl.CERT_REQUIRED if options.verify else ssl.CERT_NONE,
        "sni": options.server_name,
    }
    if options.ca_pem:
        tls_kwargs["ca_certs_data"] = options.ca_pem
    return Tls(**tls_kwargs)


class LdapSession:
    """
    A single-use directory session built from a ConnectionDescriptor.

    Construction performs no network I/O; the socket is opened on the first
    bind or search. Failures are raised as ldap3 exceptions, which carry the
    numeric LDAP result code in their `result` attribute where one exists.

    Example:
        session = LdapSession(build_descriptor(config))
        try:
            session.bind("cn=admin,dc=example,dc=com", "secret")
            entries = session.search("dc=example,dc=com", scope="sub", filter="(cn=*)")
        finally:
            session.unbind()
    """

    def __init__(self, descriptor: ConnectionDescriptor):
        self.descriptor = descriptor
        tls = build_tls(descriptor.tls) if descriptor.tls else None
        self.server = Server(
            descriptor.host,
            port=descriptor.port,
            use_ssl=descriptor.use_ssl,
            tls=tls,
            get_info=NONE,
        )
        self.connection = Connection(self.server, raise_exceptions=True)

    def _ensure_open(self) -> None:
        """Open the socket if it is not open yet."""
        if self.connection.closed:
            logger.debug("Opening connection to %s", self.descriptor.url)
            self.connection.open()

    def bind(self, dn: str, password: str) -> None:
        """Authenticate the session with a simple bind."""
        self._ensure_open()
        self.connection.rebind(user=dn, password=password, authentication=SIMPLE)
        logger.debug("Bound to %s as %s", self.descriptor.url, dn)

    def search(
        self,
        base_dn: str,
        scope: str = SCOPE_SUB,
        filter: str = "(objectClass=*)",
        attributes: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Perform an LDAP search.

        Args:
            base_dn: Entry under which the search is rooted
            scope: base, one or sub
            filter: LDAP filter string
            attributes: Attribute names to return (server default set if omitted)

        Returns:
            List of entries as {"dn": ..., <attribute>: <value>, ...} dicts
        """
        self._ensure_open()
        self.connection.search(
            search_base=base_dn,
            search_filter=filter,
            search_scope=LDAP3_SCOPES[scope],
            attributes=attributes or ALL_ATTRIBUTES,
        )
        entries = []
        for item in self.connection.response or []:
            if item.get("type") != "searchResEntry":
                continue
            entry = {"dn": item.get("dn", "")}
            entry.update(dict(item.get("attributes") or {}))
            entries.append(entry)
        return entries

    def unbind(self) -> None:
        """Close the session."""
        if not self.connection.closed:
            self.connection.unbind()

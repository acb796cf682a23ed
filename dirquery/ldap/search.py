"""Search orchestration: validate, connect, bind, search, close."""

import logging
from typing import Any, Callable, List, Optional, Union

from ..constants import (
    DEFAULT_FILTER,
    DEFAULT_SCOPE,
    PARAM_ERROR,
    SCOPES,
    STATE_CONNECTING,
    STATE_ERROR,
    STATE_OK,
    STATE_SEARCHING,
)
from ..models import (
    ConnectionConfig,
    ConnectionDescriptor,
    ErrorInfo,
    SearchRequest,
    SearchResult,
    StatusUpdate,
)
from .connection import LdapSession, build_descriptor
from .errors import classify, create_ldap_error

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ConnectionDescriptor], Any]
StatusCallback = Callable[[StatusUpdate], None]


def parse_attributes(value: Union[List[str], str, None]) -> Optional[List[str]]:
    """
    Normalize requested attributes.

    A list passes through unchanged; a string is split on commas and
    trimmed. Empty input returns None so the attribute option is omitted.
    """
    if not value:
        return None
    if isinstance(value, (list, tuple)):
        return list(value)
    attributes = [part.strip() for part in str(value).split(",")]
    return [a for a in attributes if a] or None


class SearchOrchestrator:
    """
    Runs one directory search per call to execute().

    A fresh session is created for every invocation and always closed
    before returning, so instances can be shared between callers.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        client_factory: Optional[ClientFactory] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.config = config
        self.client_factory = client_factory or LdapSession
        self.on_status = on_status

    def _status(self, state: str, text: str, fill: str, shape: str = "dot") -> None:
        if self.on_status is None:
            return
        try:
            self.on_status(StatusUpdate(state=state, text=text, fill=fill, shape=shape))
        except Exception:
            logger.debug("Status callback failed", exc_info=True)

    def _validate(self, request: SearchRequest, default_base_dn: Optional[str]) -> str:
        """Return the effective base DN or raise a ParamError."""
        if not self.config.host:
            raise create_ldap_error(PARAM_ERROR, "LDAP host is not configured")
        base_dn = request.base_dn or default_base_dn or self.config.base_dn
        if not base_dn:
            raise create_ldap_error(PARAM_ERROR, "Missing base DN")
        scope = request.scope or DEFAULT_SCOPE
        if scope not in SCOPES:
            raise create_ldap_error(PARAM_ERROR, f"Invalid search scope: {scope}")
        return base_dn

    def _fail(self, err: Exception) -> ErrorInfo:
        info = classify(err)
        logger.info("LDAP search on %s failed: %s (%s)", self.config.url, info.short, info.message)
        self._status(STATE_ERROR, info.short, fill="red")
        return info

    def execute(
        self,
        request: Optional[SearchRequest] = None,
        default_base_dn: Optional[str] = None,
    ) -> Union[SearchResult, ErrorInfo]:
        """
        Execute a search request.

        Args:
            request: Per-invocation parameters (defaults apply when None)
            default_base_dn: Base DN used when the request has none, checked
                before the connection's own base DN

        Returns:
            SearchResult on success, ErrorInfo on any failure
        """
        request = request or SearchRequest()
        try:
            base_dn = self._validate(request, default_base_dn)
        except Exception as e:
            return self._fail(e)

        scope = request.scope or DEFAULT_SCOPE
        search_filter = request.filter or DEFAULT_FILTER
        attributes = parse_attributes(request.attributes)
        bind_dn = request.bind_dn or self.config.bind_dn
        bind_password = request.bind_password or self.config.bind_password

        self._status(STATE_CONNECTING, "connecting", fill="yellow", shape="ring")
        try:
            client = self.client_factory(build_descriptor(self.config))
        except Exception as e:
            return self._fail(e)

        try:
            if bind_dn and bind_password:
                client.bind(bind_dn, bind_password)

            self._status(STATE_SEARCHING, "searching", fill="blue")
            options = {"scope": scope, "filter": search_filter}
            if attributes:
                options["attributes"] = attributes
            entries = client.search(base_dn, **options)
        except Exception as e:
            return self._fail(e)
        finally:
            try:
                client.unbind()
            except Exception:
                logger.debug("Ignoring error while closing LDAP session", exc_info=True)

        result = SearchResult(entries=entries)
        logger.info("LDAP search under %s returned %d entries", base_dn, len(result.entries))
        self._status(STATE_OK, result.status, fill="green")
        return result


def execute(
    config: ConnectionConfig,
    request: Optional[SearchRequest] = None,
    client_factory: Optional[ClientFactory] = None,
    on_status: Optional[StatusCallback] = None,
) -> Union[SearchResult, ErrorInfo]:
    """Run a single search against the configured server."""
    return SearchOrchestrator(config, client_factory=client_factory, on_status=on_status).execute(request)

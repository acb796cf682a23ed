"""Message-driven search node for flow-based hosts."""

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from .constants import DEFAULT_FILTER, DEFAULT_SCOPE, PARAM_ERROR, STATE_ERROR
from .ldap.errors import classify, create_ldap_error
from .ldap.search import ClientFactory, SearchOrchestrator
from .models import ConnectionConfig, ErrorInfo, SearchRequest, StatusUpdate

logger = logging.getLogger(__name__)


class SearchNode:
    """
    Runs a directory search for each incoming message.

    Node-level defaults (base DN, filter, scope, attributes) apply when a
    message does not override them; the connection's base DN and bind
    credentials apply last. Results are written back onto the message:
    `payload` on success, `error` on failure.

    Recognized message keys: base, filter, scope, attributes, bindDN,
    bindCredentials.
    """

    def __init__(
        self,
        config: Optional[ConnectionConfig],
        base: str = "",
        filter: str = DEFAULT_FILTER,
        scope: str = DEFAULT_SCOPE,
        attributes: Union[List[str], str, None] = "",
        client_factory: Optional[ClientFactory] = None,
        on_status: Optional[Callable[[StatusUpdate], None]] = None,
    ):
        self.config = config
        self.base = base or ""
        self.filter = filter or DEFAULT_FILTER
        self.scope = scope or DEFAULT_SCOPE
        self.attributes = attributes or ""
        self.client_factory = client_factory
        self.on_status = on_status
        self.status: Optional[StatusUpdate] = None

    def _set_status(self, update: StatusUpdate) -> None:
        self.status = update
        if self.on_status is None:
            return
        try:
            self.on_status(update)
        except Exception:
            logger.debug("Status callback failed", exc_info=True)

    def _request_from(self, msg: Dict[str, Any]) -> SearchRequest:
        return SearchRequest(
            base_dn=msg.get("base") or None,
            filter=msg.get("filter") or self.filter,
            scope=msg.get("scope") or self.scope,
            attributes=msg.get("attributes") or self.attributes,
            bind_dn=msg.get("bindDN") or None,
            bind_password=msg.get("bindCredentials") or None,
        )

    def _attach_error(self, msg: Dict[str, Any], info: ErrorInfo) -> Dict[str, Any]:
        msg["error"] = info.to_dict()
        return msg

    def handle(self, msg: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Process one message and return it with `payload` or `error` set."""
        msg = msg if msg is not None else {}
        try:
            if self.config is None:
                info = classify(create_ldap_error(PARAM_ERROR, "Missing LDAP config reference"))
                self._set_status(StatusUpdate(state=STATE_ERROR, text=info.short, fill="red"))
                return self._attach_error(msg, info)

            orchestrator = SearchOrchestrator(
                self.config,
                client_factory=self.client_factory,
                on_status=self._set_status,
            )
            outcome = orchestrator.execute(self._request_from(msg), default_base_dn=self.base)
            if isinstance(outcome, ErrorInfo):
                return self._attach_error(msg, outcome)
            msg["payload"] = outcome.entries
            return msg
        except Exception as e:
            logger.exception("Search node failed to process message")
            self._set_status(StatusUpdate(state=STATE_ERROR, text="error", fill="red"))
            msg["error"] = {"name": type(e).__name__, "code": None, "message": str(e),
                            "short": "error", "description": "An error occurred."}
            return msg

    def close(self) -> None:
        """Reset the displayed status."""
        self.status = None

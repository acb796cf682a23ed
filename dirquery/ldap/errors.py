"""LDAP result code tables and error classification."""

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple

from ..models import ErrorInfo

logger = logging.getLogger(__name__)

# LDAP result codes (RFC 4511 section 4.1.9) plus the client-side codes
# 81-123 used by the common LDAP client libraries.
# code -> (short, description)
RESULT_CODES: Mapping = MappingProxyType({
    0: ("success", "The operation completed successfully."),
    1: ("operations error", "The server encountered an error processing the request in its current sequence."),
    2: ("protocol error", "The server received data that is not well-formed or violates the protocol."),
    3: ("time limit exceeded", "The time limit specified by the client was exceeded before the operation completed."),
    4: ("size limit exceeded", "The size limit specified by the client was exceeded before the operation completed."),
    5: ("compare false", "The compare operation completed and the assertion evaluated to false."),
    6: ("compare true", "The compare operation completed and the assertion evaluated to true."),
    7: ("auth method not supported", "The requested authentication method or mechanism is not supported by the server."),
    8: ("stronger auth required", "The server requires a stronger form of authentication for this operation."),
    10: ("referral", "The request must be sent to another server (referral returned)."),
    11: ("admin limit exceeded", "An administrative limit configured on the server was exceeded."),
    12: ("unavailable critical extension", "A control marked critical is not recognized or not appropriate for the operation."),
    13: ("confidentiality required", "The operation requires a confidential (TLS protected) connection."),
    14: ("sasl bind in progress", "The server requires the client to continue the SASL bind exchange."),
    16: ("no such attribute", "The named entry does not contain the specified attribute or value."),
    17: ("undefined attribute type", "An attribute type in the request is not defined in the server schema."),
    18: ("inappropriate matching", "A matching rule was used that is not defined for the attribute type."),
    19: ("constraint violation", "An attribute value violates a constraint defined by the server."),
    20: ("attribute or value exists", "The attribute or value being added already exists in the entry."),
    21: ("invalid attribute syntax", "An attribute value does not conform to the attribute syntax."),
    32: ("no such object", "The base DN or target entry of the operation does not exist."),
    33: ("alias problem", "An alias encountered while processing the request is invalid."),
    34: ("invalid dn syntax", "A distinguished name in the request is not syntactically valid."),
    35: ("is leaf", "The specified entry is a leaf entry."),
    36: ("alias dereferencing problem", "A problem occurred while dereferencing an alias."),
    48: ("inappropriate authentication", "The client attempted to bind in an inappropriate way, e.g. anonymously where not allowed."),
    49: ("invalid credentials", "The bind DN or password is incorrect, or the account cannot be used."),
    50: ("insufficient access rights", "The bound identity lacks the rights required to perform the operation."),
    51: ("busy", "The server is too busy to process the request. Try again later."),
    52: ("unavailable", "The server is shutting down or a required subsystem is unavailable."),
    53: ("unwilling to perform", "The server is unwilling to perform the operation."),
    54: ("loop detect", "The server detected an internal loop while processing the request."),
    64: ("naming violation", "The entry name violates naming restrictions."),
    65: ("object class violation", "The entry would violate its object class definitions."),
    66: ("not allowed on non leaf", "The operation is not permitted on an entry that has children."),
    67: ("not allowed on rdn", "The operation would modify an attribute that is part of the RDN."),
    68: ("entry already exists", "The target entry already exists."),
    69: ("object class mods prohibited", "Modifying the object class of the entry is not permitted."),
    70: ("results too large", "The results of the request are too large."),
    71: ("affects multiple dsas", "The operation would affect more than one directory server."),
    80: ("other", "An unknown error occurred on the server."),
    81: ("server down", "The LDAP server is unreachable or closed the connection."),
    82: ("local error", "A local error occurred in the LDAP client."),
    83: ("encoding error", "The client failed to encode the request."),
    84: ("decoding error", "The client failed to decode the server response."),
    85: ("timeout", "Operation exceeded the timeout limit awaiting server response."),
    86: ("auth unknown", "The authentication method requested is unknown to the client."),
    87: ("filter error", "The search filter is not valid."),
    88: ("user canceled", "The operation was canceled by the user."),
    89: ("param error", "A parameter supplied to the operation is missing or invalid."),
    90: ("no memory", "The client ran out of memory."),
    91: ("connection error", "Cannot reach LDAP host/port. Verify hostname, port, firewall, and TLS settings."),
    92: ("not supported", "The requested feature is not supported."),
    93: ("control not found", "The requested control was not found."),
    94: ("no results returned", "No results were returned from the server."),
    95: ("more results to return", "More results remain to be returned."),
    96: ("client loop", "The client detected a loop, e.g. while following referrals."),
    97: ("referral limit exceeded", "The referral hop limit was exceeded."),
    100: ("invalid response", "The server returned an invalid response."),
    101: ("ambiguous response", "The server returned an ambiguous response."),
    112: ("tls not supported", "TLS is not supported by the server or client."),
    113: ("intermediate response", "The server returned an intermediate response."),
    114: ("unknown type", "The server returned an unknown response type."),
    118: ("canceled", "The operation was canceled."),
    119: ("no such operation", "The operation to cancel is unknown to the server."),
    120: ("too late", "It is too late to cancel the operation."),
    121: ("cannot cancel", "The operation cannot be canceled."),
    122: ("assertion failed", "The assertion control evaluated to false."),
    123: ("authorization denied", "The proxied authorization was denied."),
})

# Canonical error-kind names, one per code. When several names share a
# code, the name listed here is the default for synthesized errors.
_CANONICAL_NAMES: Tuple[Tuple[str, int], ...] = (
    ("OperationsError", 1),
    ("ProtocolError", 2),
    ("TimeLimitExceededError", 3),
    ("SizeLimitExceededError", 4),
    ("CompareFalseError", 5),
    ("CompareTrueError", 6),
    ("AuthMethodNotSupportedError", 7),
    ("StrongAuthRequiredError", 8),
    ("ReferralError", 10),
    ("AdminLimitExceededError", 11),
    ("UnavailableCriticalExtensionError", 12),
    ("ConfidentialityRequiredError", 13),
    ("SaslBindInProgress", 14),
    ("NoSuchAttributeError", 16),
    ("UndefinedTypeError", 17),
    ("InappropriateMatchingError", 18),
    ("ConstraintViolationError", 19),
    ("TypeOrValueExistsError", 20),
    ("InvalidSyntaxError", 21),
    ("NoSuchObjectError", 32),
    ("AliasProblemError", 33),
    ("InvalidDNSyntaxError", 34),
    ("IsLeafError", 35),
    ("AliasDereferencingProblemError", 36),
    ("InappropriateAuthenticationError", 48),
    ("InvalidCredentialsError", 49),
    ("InsufficientAccessRightsError", 50),
    ("BusyError", 51),
    ("UnavailableError", 52),
    ("UnwillingToPerformError", 53),
    ("LoopDetectError", 54),
    ("NamingViolationError", 64),
    ("ObjectClassViolationError", 65),
    ("NotAllowedOnNonLeafError", 66),
    ("NotAllowedOnRDNError", 67),
    ("AlreadyExistsError", 68),
    ("NoObjectClassModsError", 69),
    ("ResultsTooLargeError", 70),
    ("AffectsMultipleDSAsError", 71),
    ("OtherError", 80),
    ("ServerDownError", 81),
    ("LocalError", 82),
    ("EncodingError", 83),
    ("DecodingError", 84),
    ("TimeoutError", 85),
    ("AuthUnknownError", 86),
    ("FilterError", 87),
    ("UserCancelledError", 88),
    ("ParamError", 89),
    ("NoMemoryError", 90),
    ("ConnectError", 91),
    ("NotSupportedError", 92),
    ("ControlNotFoundError", 93),
    ("NoResultsReturnedError", 94),
    ("MoreResultsToReturnError", 95),
    ("ClientLoopError", 96),
    ("ReferralLimitExceededError", 97),
    ("InvalidResponseError", 100),
    ("AmbiguousResponseError", 101),
    ("TLSNotSupportedError", 112),
    ("CanceledError", 118),
    ("NoSuchOperationError", 119),
    ("TooLateError", 120),
    ("CannotCancelError", 121),
    ("AssertionFailedError", 122),
    ("AuthorizationDeniedError", 123),
)

# ldap3 exceptions raised without a numeric result code
_LDAP3_NAMES: Tuple[Tuple[str, int], ...] = (
    ("LDAPSocketOpenError", 91),
    ("LDAPSocketSendError", 81),
    ("LDAPSocketReceiveError", 81),
    ("LDAPSessionTerminatedByServerError", 81),
    ("LDAPCommunicationError", 81),
    ("LDAPResponseTimeoutError", 85),
    ("LDAPInvalidFilterError", 87),
    ("LDAPInvalidScopeError", 89),
    ("LDAPInvalidDnError", 34),
    ("LDAPStartTLSError", 112),
    ("LDAPSSLConfigurationError", 82),
    ("LDAPSSLNotSupportedError", 112),
)

NAME_CODES: Mapping = MappingProxyType(dict(_CANONICAL_NAMES + _LDAP3_NAMES))
CODE_NAMES: Mapping = MappingProxyType({code: name for name, code in reversed(_CANONICAL_NAMES)})

# Friendlier wording for common cases
_REWORDED_SHORT = {
    32: "base dn not found",
    50: "insufficient rights",
}

_CONNECTION_SIGNATURES = (
    "econnrefused",
    "connection refused",
    "enotfound",
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "ehostunreach",
    "no route to host",
    "host is unreachable",
    "econnreset",
    "connection reset",
)
_TIMEOUT_SIGNATURES = ("timeout", "timed out", "etimedout")
_TIMEOUT_NAMES = {"timeout", "TimeoutError", "LDAPResponseTimeoutError"}

GENERIC_DESCRIPTION = "An error occurred."

# AD sub-error codes extracted from LDAP error messages (hex values after "data")
# These are Windows System Error Codes (Win32)
# Reference: https://docs.microsoft.com/en-us/windows/win32/debug/system-error-codes
AD_ERROR_CODES = {
    0x525: "ERROR_NO_SUCH_USER",           # 1317 - The specified account does not exist
    0x52e: "ERROR_LOGON_FAILURE",          # 1326 - Unknown user name or bad password
    0x530: "ERROR_INVALID_LOGON_HOURS",    # 1328 - Account logon time restriction violation
    0x531: "ERROR_INVALID_WORKSTATION",    # 1329 - Account not allowed to log on from this computer
    0x532: "ERROR_PASSWORD_EXPIRED",       # 1330 - The password has expired
    0x533: "ERROR_ACCOUNT_DISABLED",       # 1331 - Account currently disabled
    0x534: "ERROR_LOGON_TYPE_NOT_GRANTED", # 1332 - Logon type not granted
    0x701: "ERROR_ACCOUNT_EXPIRED",        # 1793 - The user's account has expired
    0x773: "ERROR_PASSWORD_MUST_CHANGE",   # 1907 - User must change password before first logon
    0x775: "ERROR_ACCOUNT_LOCKED_OUT",     # 1909 - Account is currently locked out
}

# Matches patterns like: "data 52e," or "data 775,"
AD_ERROR_CODE_RE = re.compile(r"data\s+([0-9a-fA-F]+)")


class LdapError(Exception):
    """An LDAP failure carrying a result code and an error-kind name."""

    def __init__(self, message: str, code: Optional[int] = None, name: str = "LDAPError"):
        super().__init__(message)
        self.message = message
        self.code = code
        self.name = name


def parse_ad_error_code(error_message: str) -> Optional[int]:
    """Extract the AD-specific error code from an LDAP error message."""
    match = AD_ERROR_CODE_RE.search(error_message)
    return int(match.group(1), 16) if match else None


def code_to_info(code: Any) -> Optional[Tuple[str, str]]:
    """Look up (short, description) for a numeric result code."""
    if isinstance(code, int) and not isinstance(code, bool):
        return RESULT_CODES.get(code)
    return None


def create_ldap_error(code: int, message: Optional[str] = None, name: Optional[str] = None) -> LdapError:
    """
    Synthesize a local LDAP error for a result code.

    Args:
        code: LDAP result code
        message: Error text (defaults to the table description, then short)
        name: Error-kind name (defaults to the canonical name for the code)

    Returns:
        LdapError instance ready to be raised
    """
    info = code_to_info(code)
    if not message:
        message = (info[1] or info[0]) if info else "LDAP error"
    return LdapError(message, code=code, name=name or CODE_NAMES.get(code, "LDAPError"))


def _error_fields(err: Any) -> Tuple[Optional[int], str, str]:
    """Pull (code, name, raw message) out of an exception or a mapping."""
    if isinstance(err, Mapping):
        code = err.get("code")
        name = err.get("name") or "Error"
        raw = err.get("message") or ""
    else:
        code = getattr(err, "code", None)
        if code is None:
            # ldap3 operation results expose the code as `result`
            code = getattr(err, "result", None)
        # AttributeError.name and ImportError.name hold an attribute or
        # module name, not the kind of error
        name = getattr(err, "name", None)
        if isinstance(err, (AttributeError, ImportError, NameError)) or not isinstance(name, str) or not name:
            name = type(err).__name__
        raw = getattr(err, "message", None)
        if not isinstance(raw, str) or not raw:
            raw = str(err)
    if not isinstance(code, int) or isinstance(code, bool):
        code = None
    return code, str(name), str(raw)


def get_error_info(err: Any) -> ErrorInfo:
    """
    Map any failure to a normalized ErrorInfo.

    Resolution order: connection heuristic, timeout heuristic, explicit
    result code, error-kind name, raw-message fallback.
    """
    code, name, raw = _error_fields(err)
    lowered = raw.lower()

    if any(sig in lowered for sig in _CONNECTION_SIGNATURES):
        short, description = RESULT_CODES[91]
        return ErrorInfo(code=91, name=name, short=short, description=description, message=raw)

    if name in _TIMEOUT_NAMES or any(sig in lowered for sig in _TIMEOUT_SIGNATURES):
        short, description = RESULT_CODES[85]
        return ErrorInfo(code=85, name=name, short=short, description=description, message=raw)

    resolved = code
    mapped = code_to_info(code)
    if mapped is None and code is None and name in NAME_CODES:
        resolved = NAME_CODES[name]
        mapped = code_to_info(resolved)

    detail = None
    ad_code = parse_ad_error_code(raw)
    if ad_code is not None:
        detail = AD_ERROR_CODES.get(ad_code)

    if mapped is not None:
        short, description = mapped
        short = _REWORDED_SHORT.get(resolved, short)
        return ErrorInfo(code=resolved, name=name, short=short, description=description,
                         message=raw, detail=detail)

    return ErrorInfo(code=code, name=name, short=raw or name or "error",
                     description=GENERIC_DESCRIPTION, message=raw, detail=detail)


def classify(err: Any) -> ErrorInfo:
    """Classify a failure, degrading to a generic record instead of raising."""
    try:
        return get_error_info(err)
    except Exception:
        logger.exception("Failed to classify LDAP error")
        return ErrorInfo(code=None, name="Error", short="error",
                         description=GENERIC_DESCRIPTION, message="")


def classify_short(err: Any) -> str:
    """Return only the short status phrase for a failure."""
    return classify(err).short

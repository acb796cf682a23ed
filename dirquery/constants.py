"""Constants used throughout the application."""


class Colors:
    """ANSI color codes for terminal output."""
    NC = '\033[0m'
    RED = '\033[0;31m'
    BLUE = '\033[0;34m'
    GREEN = '\033[0;32m'
    LBLUE = '\033[1;34m'
    ORANGE = '\033[0;33m'

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        cls.NC = cls.RED = cls.BLUE = cls.GREEN = cls.LBLUE = cls.ORANGE = ''


PROTOCOL_LDAP = "ldap"
PROTOCOL_LDAPS = "ldaps"
PROTOCOLS = (PROTOCOL_LDAP, PROTOCOL_LDAPS)

# Accepted spellings for the protocol setting
PROTOCOL_ALIASES = {
    "ldap": PROTOCOL_LDAP,
    "plain": PROTOCOL_LDAP,
    "ldaps": PROTOCOL_LDAPS,
    "tls": PROTOCOL_LDAPS,
}

DEFAULT_PORTS = {
    PROTOCOL_LDAP: 389,
    PROTOCOL_LDAPS: 636,
}

DEFAULT_FILTER = "(objectClass=*)"

SCOPE_BASE = "base"
SCOPE_ONE = "one"
SCOPE_SUB = "sub"
SCOPES = (SCOPE_BASE, SCOPE_ONE, SCOPE_SUB)
DEFAULT_SCOPE = SCOPE_SUB

# Result code for local parameter validation failures
PARAM_ERROR = 89

# Status states reported while a search runs
STATE_CONNECTING = "connecting"
STATE_SEARCHING = "searching"
STATE_OK = "ok"
STATE_ERROR = "error"

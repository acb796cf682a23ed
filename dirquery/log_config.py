"""Logging setup for the command-line interface.

Library modules only create module-level loggers; handlers are attached
here, once, by the CLI. Output goes to stderr so stdout stays reserved for
search results.
"""

import logging
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Verbosity level -> logging level
_VERBOSITY_LEVELS = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
}

# Tracks the installed handler so reconfiguration replaces it
_console_handler: Optional[logging.Handler] = None


def setup_logging(verbose: int = 1) -> None:
    """Configure the root logger for the given verbosity (0-3)."""
    global _console_handler

    level = _VERBOSITY_LEVELS.get(max(0, min(3, int(verbose or 0))), logging.WARNING)
    root = logging.getLogger()

    if _console_handler and _console_handler in root.handlers:
        root.removeHandler(_console_handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT))
    _console_handler = handler

    root.setLevel(level)
    root.addHandler(handler)

    # ldap3 logs through its own logger; keep it quiet unless debugging
    logging.getLogger("ldap3").setLevel(max(level, logging.WARNING))

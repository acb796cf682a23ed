"""Configuration file handling."""

import argparse
import configparser
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import DEFAULT_FILTER, DEFAULT_SCOPE, PROTOCOL_ALIASES, PROTOCOL_LDAP, PROTOCOLS
from .models import ConnectionConfig


DEFAULT_CONFIG_TEMPLATE = """\
# dirquery Configuration File
# ---------------------------
# Values given on the command line take precedence over this file.

[server]
# LDAP server hostname or IP address
host = ldap.example.com
# ldap (plain) or ldaps (TLS)
protocol = ldaps
# Override port number (optional, leave empty for 389 / 636)
port =
# Default base DN for searches
base_dn = dc=example,dc=com
# Disable TLS certificate verification (not recommended)
tls_insecure = false
# PEM file with one or more trusted CA certificates (optional)
ca_file =

[bind]
# Leave empty for anonymous searches
bind_dn =
bind_password =

[search]
# Search defaults (optional)
base =
filter = (objectClass=*)
# base, one or sub
scope = sub
# Comma-separated attribute names, empty for the server default set
attributes =
"""


class ConfigError(ValueError):
    """Raised when configuration values are missing or invalid."""


def normalize_protocol(value: Optional[str]) -> str:
    """Map a protocol setting to ldap or ldaps."""
    if not value:
        return PROTOCOL_LDAP
    protocol = PROTOCOL_ALIASES.get(value.strip().lower())
    if protocol is None:
        raise ConfigError(f"Unknown protocol '{value}' (expected one of: {', '.join(PROTOCOLS)})")
    return protocol


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from INI file.

    Returns a dict with all config values, using None for unset values.
    """
    if not Path(config_path).is_file():
        raise ConfigError(f"Configuration file not found: {config_path}")

    config = configparser.ConfigParser(interpolation=None)
    try:
        config.read(config_path)
    except configparser.Error as e:
        raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    result: Dict[str, Any] = {}

    # [server] section
    if config.has_section('server'):
        result['host'] = config.get('server', 'host', fallback=None)
        result['protocol'] = config.get('server', 'protocol', fallback=None)
        port_str = config.get('server', 'port', fallback='')
        try:
            result['port'] = int(port_str) if port_str.strip() else None
        except ValueError as e:
            raise ConfigError(f"Invalid port: {port_str}") from e
        base_dn = config.get('server', 'base_dn', fallback='')
        result['base_dn'] = base_dn if base_dn.strip() else None
        try:
            result['tls_insecure'] = config.getboolean('server', 'tls_insecure', fallback=False)
        except ValueError as e:
            raise ConfigError(f"Invalid tls_insecure value: {e}") from e
        ca_file = config.get('server', 'ca_file', fallback='')
        result['ca_file'] = ca_file if ca_file.strip() else None

    # [bind] section
    if config.has_section('bind'):
        bind_dn = config.get('bind', 'bind_dn', fallback='')
        result['bind_dn'] = bind_dn if bind_dn.strip() else None
        bind_password = config.get('bind', 'bind_password', fallback='')
        result['bind_password'] = bind_password if bind_password else None

    # [search] section
    if config.has_section('search'):
        base = config.get('search', 'base', fallback='')
        result['base'] = base if base.strip() else None
        result['filter'] = config.get('search', 'filter', fallback=DEFAULT_FILTER) or None
        result['scope'] = config.get('search', 'scope', fallback=DEFAULT_SCOPE) or None
        attributes = config.get('search', 'attributes', fallback='')
        result['attributes'] = attributes if attributes.strip() else None

    return result


def merge_config_with_args(config: Dict[str, Any], args: argparse.Namespace) -> argparse.Namespace:
    """
    Merge config file values with CLI args. CLI args take precedence.
    """
    for config_key, config_value in config.items():
        if config_value is None:
            continue

        if hasattr(args, config_key):
            current_value = getattr(args, config_key)
            # If CLI provided a value (not None and not the argparse default), keep it.
            if current_value is not None:
                if isinstance(current_value, bool) and not current_value and config_value:
                    setattr(args, config_key, config_value)
                # Preserve explicit CLI values (including False) unless config is True.
                continue

        setattr(args, config_key, config_value)

    return args


def read_ca_file(ca_file: str) -> str:
    """Read PEM text (possibly several certificates) from a file."""
    try:
        return Path(ca_file).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read CA file {ca_file}: {e}") from e


def build_connection_config(values: Dict[str, Any]) -> ConnectionConfig:
    """
    Build a ConnectionConfig from merged configuration values.

    Args:
        values: Dict with host, port, protocol, base_dn, tls_insecure,
            ca_pem or ca_file, bind_dn and bind_password keys

    Returns:
        Immutable ConnectionConfig
    """
    ca_pem = values.get('ca_pem')
    if not ca_pem and values.get('ca_file'):
        ca_pem = read_ca_file(values['ca_file'])

    return ConnectionConfig(
        host=(values.get('host') or '').strip(),
        port=values.get('port'),
        protocol=normalize_protocol(values.get('protocol')),
        base_dn=values.get('base_dn') or '',
        tls_insecure=bool(values.get('tls_insecure')),
        ca_pem=ca_pem,
        bind_dn=values.get('bind_dn'),
        bind_password=values.get('bind_password'),
    )


def generate_config_file(output_path: Optional[str] = None) -> str:
    """Generate a template configuration file."""
    if output_path:
        with open(output_path, 'w') as f:
            f.write(DEFAULT_CONFIG_TEMPLATE)
        return f"Configuration template written to: {output_path}"
    else:
        return DEFAULT_CONFIG_TEMPLATE

"""Command-line interface for dirquery."""

import argparse
import json
import sys

from .config import (
    ConfigError,
    build_connection_config,
    generate_config_file,
    load_config,
    merge_config_with_args,
)
from .constants import Colors, SCOPES, STATE_ERROR, STATE_OK
from .ldap import RESULT_CODES
from .log_config import setup_logging
from .models import StatusUpdate
from .node import SearchNode


# Args that may also come from the config file
_CONFIG_KEYS = [
    'host', 'port', 'protocol', 'base_dn', 'tls_insecure', 'ca_file',
    'bind_dn', 'bind_password', 'base', 'filter', 'scope', 'attributes',
]


def print_status(update: StatusUpdate) -> None:
    """Print a search status update to stderr."""
    if update.state == STATE_ERROR:
        color = Colors.RED
    elif update.state == STATE_OK:
        color = Colors.GREEN
    else:
        color = Colors.BLUE
    print(f"{color}[*] {update.text}{Colors.NC}", file=sys.stderr)


def cmd_search(args) -> int:
    """Run a single directory search and print the entries as JSON."""
    config_values = {}
    if args.config:
        try:
            config_values = load_config(args.config)
            print(f"{Colors.GREEN}[+] Loaded config from: {args.config}{Colors.NC}", file=sys.stderr)
        except ConfigError as e:
            print(f"{Colors.RED}[!] Failed to load config: {e}{Colors.NC}", file=sys.stderr)
            return 1

    for key in _CONFIG_KEYS:
        if not hasattr(args, key):
            setattr(args, key, None)

    args = merge_config_with_args(config_values, args)

    try:
        connection = build_connection_config(vars(args))
    except ConfigError as e:
        print(f"{Colors.RED}[!] {e}{Colors.NC}", file=sys.stderr)
        return 1

    node = SearchNode(
        connection,
        base=args.base or "",
        filter=args.filter,
        scope=args.scope,
        attributes=args.attributes,
        on_status=print_status,
    )

    msg = node.handle({})
    if "error" in msg:
        error = msg["error"]
        print(json.dumps(error, indent=2))
        print(f"{Colors.RED}[!] {error['short']}: {error['description']}{Colors.NC}", file=sys.stderr)
        return 1

    if not msg["payload"]:
        print(f"{Colors.ORANGE}[!] No entries found{Colors.NC}", file=sys.stderr)
    print(json.dumps(msg["payload"], indent=2, default=str))
    return 0


def cmd_codes(args) -> int:
    """List the LDAP result codes and their status phrases."""
    for code, (short, description) in sorted(RESULT_CODES.items()):
        if args.verbose_codes:
            print(f"{Colors.LBLUE}{code:>4}{Colors.NC}  {short:<32} {description}")
        else:
            print(f"{Colors.LBLUE}{code:>4}{Colors.NC}  {short}")
    return 0


def cmd_generate_config(args) -> int:
    """Write or print a configuration template."""
    try:
        output = generate_config_file(args.output)
    except OSError as e:
        print(f"{Colors.RED}[!] Failed to write config: {e}{Colors.NC}", file=sys.stderr)
        return 1
    if args.output:
        print(f"{Colors.GREEN}[+] {output}{Colors.NC}", file=sys.stderr)
    else:
        print(output, end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Read-only LDAP directory searches with normalized errors.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", type=int, choices=[0, 1, 2, 3], default=1,
                        help="Log verbosity (0=errors only, 3=debug, default: 1)")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Search subcommand
    search_parser = subparsers.add_parser(
        "search",
        help="Run a directory search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Anonymous subtree search
  %(prog)s -H ldap.example.com --base-dn dc=example,dc=com -f '(cn=Alice*)'

  # LDAPS with a private CA, selected attributes, one-level scope
  %(prog)s -H ldap.example.com --protocol ldaps --ca-file ca.pem \\
      --base ou=people,dc=example,dc=com -s one -a 'cn, mail' \\
      -D cn=reader,dc=example,dc=com -w secret

  # Everything from a config file
  %(prog)s -c dirquery.ini
        """,
    )
    search_parser.add_argument("-c", "--config", help="Configuration file (INI format)")
    search_parser.add_argument("-H", "--host", help="LDAP server hostname or IP address")
    search_parser.add_argument("-p", "--port", type=int, help="Override port number")
    search_parser.add_argument("--protocol", choices=["ldap", "ldaps", "plain", "tls"],
                               help="Connection protocol (default: ldap)")
    search_parser.add_argument("--base-dn", dest="base_dn", help="Default base DN of the server")
    search_parser.add_argument("--insecure", dest="tls_insecure", action="store_true", default=None,
                               help="Disable TLS certificate verification")
    search_parser.add_argument("--ca-file", dest="ca_file", help="PEM file with trusted CA certificates")
    search_parser.add_argument("-D", "--bind-dn", dest="bind_dn", help="Bind DN")
    search_parser.add_argument("-w", "--bind-password", dest="bind_password", help="Bind password")
    search_parser.add_argument("-b", "--base", help="Search base DN (overrides --base-dn)")
    search_parser.add_argument("-f", "--filter", help="LDAP filter (default: (objectClass=*))")
    search_parser.add_argument("-s", "--scope", help=f"Search scope: {', '.join(SCOPES)} (default: sub)")
    search_parser.add_argument("-a", "--attributes", help="Comma-separated attributes to return")
    search_parser.set_defaults(func=cmd_search)

    # Codes subcommand
    codes_parser = subparsers.add_parser("codes", help="List LDAP result codes")
    codes_parser.add_argument("-l", "--long", dest="verbose_codes", action="store_true",
                              help="Include descriptions")
    codes_parser.set_defaults(func=cmd_codes)

    # Generate-config subcommand
    gen_parser = subparsers.add_parser("generate-config", help="Write a configuration template")
    gen_parser.add_argument("-o", "--output", help="Output file (prints to stdout if omitted)")
    gen_parser.set_defaults(func=cmd_generate_config)

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Disable colors if not a TTY
    if not sys.stderr.isatty():
        Colors.disable()

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

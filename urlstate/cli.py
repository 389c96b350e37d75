# -*- coding: utf-8 -*-
"""Location: ./urlstate/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

urlstate command line.
Encodes JSON state into query string text and back, and builds URLs:

- ``urlstate encode '{"page": 2}'`` prints ``page:2``
- ``urlstate encode --fields '{"page": 2, "q": "a b"}'`` prints ``page=:2&q=a%20b``
- ``urlstate decode 'page:2'`` prints ``{"page":2}``
- ``urlstate url 'https://example.com/list' '{"page": 2}'`` prints the URL

JSON is read from the argument, or from stdin when it is ``-`` or missing.
The format comes from ``--format`` or ``URLSTATE_DEFAULT_FORMAT``, and
``--option separators.entry=;`` overrides single format options.
"""

# Standard
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

# Third-Party
import orjson

# First-Party
from urlstate import __version__
from urlstate.config import configure_logging, get_settings
from urlstate.errors import UrlStateError
from urlstate.format import FieldsFormat, QueryStringFormat
from urlstate.format.json_format import to_json_value
from urlstate.querystring import create_url, fields_from_query, query_from_fields

logger = logging.getLogger(__name__)


class CLIError(Exception):
    """Base class for CLI-related errors."""


def parse_option(text: str) -> Dict[str, Any]:
    """Turn ``path.to.option=value`` into a nested options mapping.

    Values are read as JSON when they parse, otherwise as plain text.

    Args:
        text: The raw ``--option`` argument.

    Returns:
        Dict[str, Any]: Nested mapping holding the one option.

    Raises:
        CLIError: If there is no ``=`` or the name is empty.

    Examples:
        >>> parse_option("separators.entry=;")
        {'separators': {'entry': ';'}}
        >>> parse_option("markers.primitive=false")
        {'markers': {'primitive': False}}
    """
    name, sep, raw = text.partition("=")
    if not sep or not name:
        raise CLIError(f"Invalid option {text!r}, expected KEY=VALUE")
    try:
        value: Any = orjson.loads(raw)
    except orjson.JSONDecodeError:
        value = raw
    for part in reversed(name.split(".")):
        value = {part: value}
    return value


def merge_options(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge option mappings, ``override`` winning.

    Examples:
        >>> merge_options({"separators": {"entry": ";"}}, {"separators": {"array": "|"}})
        {'separators': {'entry': ';', 'array': '|'}}
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_options(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_json(text: Optional[str]) -> Any:
    """Parse a JSON argument, reading stdin for ``-`` or no argument.

    Args:
        text: The argument value.

    Returns:
        Any: The parsed value.

    Raises:
        CLIError: If the input is not valid JSON.
    """
    if text is None or text == "-":
        text = sys.stdin.read()
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError as e:
        raise CLIError(f"Invalid JSON input: {e}") from e


def dump_json(value: Any, pretty: bool = False) -> str:
    """Render a decoded state as JSON text."""
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(to_json_value(value), option=option).decode()


def resolve_format(args: argparse.Namespace) -> FieldsFormat:
    """Build the format selected by the global arguments.

    Args:
        args: Parsed arguments.

    Returns:
        FieldsFormat: The format to use.
    """
    settings = get_settings()
    options = dict(settings.format_options)
    for text in args.option or []:
        options = merge_options(options, parse_option(text))
    fmt = settings.model_copy(update={"format_options": options}).build_format(args.format)
    logger.debug(f"Using {fmt!r}")
    return fmt


def require_namespaced(fmt: FieldsFormat) -> QueryStringFormat:
    """Reject formats restricted to standalone fields.

    Raises:
        CLIError: If the format has no namespaced layout.
    """
    if not isinstance(fmt, QueryStringFormat):
        raise CLIError("This format only supports standalone fields, use --fields")
    return fmt


def encode_command(args: argparse.Namespace) -> None:
    """Encode JSON state and print the text."""
    fmt = resolve_format(args)
    state = load_json(args.state)
    if args.fields:
        print(query_from_fields(fmt.stringify_fields(state)))
    else:
        print(require_namespaced(fmt).stringify(state))


def decode_command(args: argparse.Namespace) -> None:
    """Decode text and print the state as JSON."""
    fmt = resolve_format(args)
    hint = load_json(args.hint) if args.hint is not None else None
    if args.fields:
        state = fmt.parse_fields(fields_from_query(args.text), hint)
    else:
        state = require_namespaced(fmt).parse_text(args.text, hint)
    print(dump_json(state, args.pretty))


def url_command(args: argparse.Namespace) -> None:
    """Print a URL carrying the encoded state."""
    fmt = require_namespaced(resolve_format(args))
    key = args.key or get_settings().state_key
    print(create_url(args.base_url, key, load_json(args.state), fmt))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the urlstate commands.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(prog="urlstate", description="Encode and decode application state in URL query strings")

    parser.add_argument("--version", "-V", action="version", version=f"urlstate {__version__}")
    parser.add_argument("--format", "-f", choices=["typed", "plain", "json"], help="Format to use (default: URLSTATE_DEFAULT_FORMAT or typed)")
    parser.add_argument("--option", "-o", action="append", metavar="KEY=VALUE", help="Override a format option, e.g. separators.entry=; (repeatable)")
    parser.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level (default: URLSTATE_LOG_LEVEL or WARNING)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Encode command
    encode_parser = subparsers.add_parser("encode", help="Encode JSON state")
    encode_parser.add_argument("state", nargs="?", help="JSON state, '-' or omitted to read stdin")
    encode_parser.add_argument("--fields", action="store_true", help="Write standalone fields as a query string")
    encode_parser.set_defaults(func=encode_command)

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode encoded state into JSON")
    decode_parser.add_argument("text", help="Encoded text, or a query string with --fields")
    decode_parser.add_argument("--fields", action="store_true", help="Read standalone fields from a query string")
    decode_parser.add_argument("--hint", help="JSON reference state used to recover types")
    decode_parser.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    decode_parser.set_defaults(func=decode_command)

    # URL command
    url_parser = subparsers.add_parser("url", help="Build a URL carrying encoded state")
    url_parser.add_argument("base_url", help="URL to add the state to")
    url_parser.add_argument("state", nargs="?", help="JSON state, '-' or omitted to read stdin")
    url_parser.add_argument("--key", "-k", help="Query parameter holding the state (default: URLSTATE_STATE_KEY or state)")
    url_parser.set_defaults(func=url_command)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point.

    Args:
        argv: Arguments, defaulting to ``sys.argv[1:]``.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level or get_settings().log_level)
    try:
        args.func(args)
    except (CLIError, UrlStateError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

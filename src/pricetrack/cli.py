"""
Command line interface.

    pricetrack normalize URL [URL ...]
    pricetrack identify URL [URL ...]
    pricetrack resolve VALUE [VALUE ...]
    pricetrack check [--rules PATH] URL [URL ...]
    pricetrack rules [--rules PATH]
    pricetrack serve [--host HOST] [--port PORT]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from pricetrack.config import RulesConfig
from pricetrack.errors import InvalidURL, RuleSourceError
from pricetrack.identity import get_hasher, normalize
from pricetrack.rules import DomainResolver, DomainRuleTable, load_rules

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="pricetrack",
        description="Canonicalize product URLs and check them against domain rules.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("normalize", "Print the canonical form of each URL."),
        ("identify", "Print the document ID of each URL."),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("urls", nargs="+", metavar="URL")

    resolve = commands.add_parser(
        "resolve", help="Print the document ID of each URL, passing IDs through."
    )
    resolve.add_argument("values", nargs="+", metavar="VALUE")

    default_rules = RulesConfig().source

    check = commands.add_parser("check", help="Check URLs against the domain rules.")
    check.add_argument(
        "--rules",
        type=Path,
        default=default_rules,
        help=f"Rules directory or JSON file (default: {default_rules}).",
    )
    check.add_argument("urls", nargs="+", metavar="URL")

    rules = commands.add_parser("rules", help="List the supported domains.")
    rules.add_argument(
        "--rules",
        type=Path,
        default=default_rules,
        help=f"Rules directory or JSON file (default: {default_rules}).",
    )

    serve = commands.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind host (defaults to config).")
    serve.add_argument(
        "--port", type=int, default=None, help="Bind port (defaults to config)."
    )

    return parser.parse_args(argv)


def _map_urls(values: Sequence[str], transform: Callable[[str], str]) -> int:
    """Print ``transform(value)`` per value; report invalid URLs on stderr."""
    status = 0
    for value in values:
        try:
            print(transform(value))
        except InvalidURL as e:
            print(f"error: {e}", file=sys.stderr)
            status = 1
    return status


def _load_table(source: Path) -> DomainRuleTable | None:
    try:
        return load_rules(source)
    except RuleSourceError as e:
        logger.error(str(e))
        return None


def run_check(source: Path, urls: Sequence[str]) -> int:
    table = _load_table(source)
    if table is None:
        return 2

    resolver = DomainResolver(table)
    status = 0
    for url in urls:
        rule = resolver.rule_for(url)
        if rule is None:
            hostname = resolver.hostname_of(url) or "-"
            print(f"unsupported\t{hostname}\t{url}")
            status = 1
        else:
            print(f"supported\t{rule.hostname}\t{rule.parser}\t{url}")
    return status


def run_rules(source: Path) -> int:
    table = _load_table(source)
    if table is None:
        return 2

    for hostname in table:
        entry = table.rules[hostname]
        print(f"{hostname}\t{entry.parser}\t{entry.color or '-'}")
    return 0


def run_serve(host: Optional[str], port: Optional[int]) -> int:
    import uvicorn

    from pricetrack.api.server import app
    from pricetrack.config import get_config

    config = get_config()
    uvicorn.run(
        app,
        host=host or config.service.host,
        port=port or config.service.port,
        log_level=config.log_level.lower(),
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "normalize":
        return _map_urls(args.urls, normalize)
    if args.command == "identify":
        return _map_urls(args.urls, get_hasher().identify)
    if args.command == "resolve":
        return _map_urls(args.values, get_hasher().resolve_id)
    if args.command == "check":
        return run_check(args.rules, args.urls)
    if args.command == "rules":
        return run_rules(args.rules)
    return run_serve(args.host, args.port)


if __name__ == "__main__":
    sys.exit(main())

"""
JudgeFinder - CLI Entry Point

Usage:
    python -m src.judgefinder resolve <identifier> [options]
    python -m src.judgefinder search <query> [--limit N] [--type judge|court|jurisdiction ...]
    python -m src.judgefinder suggest <query> [--limit N]

Examples:
    # Resolve a profile identifier
    python -m src.judgefinder resolve jane-a-doe

    # Search courts only, against a specific database
    python -m src.judgefinder search "superior" --type court --postgres-url postgresql://...
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from src.common.logging import configure_sanitized_logging
from src.common.telemetry import init_telemetry, shutdown_telemetry
from src.judgefinder.config import JudgeFinderConfig
from src.judgefinder.errors import BackendUnavailableError, InvalidInputError, JudgeFinderError
from src.judgefinder.factory import JudgeFinderServices, build_services
from src.judgefinder.models import SearchResultKind

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_INPUT = 2
EXIT_BACKEND_UNAVAILABLE = 3
EXIT_ERROR = 1


def setup_logging(level: str) -> None:
    """Configure logging. Logs go to stderr; stdout carries only the JSON result."""
    configure_sanitized_logging(level=getattr(logging, level.upper()))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="python -m src.judgefinder",
        description="Judge lookup and search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Connection options
    parser.add_argument("--postgres-url", default=None, help="PostgreSQL connection URL")
    parser.add_argument("--redis-url", default=None, help="Redis connection URL (enables Redis)")
    parser.add_argument("--no-redis", action="store_true", help="Disable Redis caching")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (default: from config)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    resolve = commands.add_parser("resolve", help="Resolve an identifier to a judge")
    resolve.add_argument("identifier", help="Identifier such as jane-a-doe")

    search = commands.add_parser("search", help="Relevance search")
    search.add_argument("query", nargs="?", default="", help="Search text (empty to browse)")
    search.add_argument("--limit", type=int, default=None, help="Maximum results")
    search.add_argument(
        "--type",
        dest="types",
        action="append",
        choices=[kind.value for kind in SearchResultKind],
        help="Restrict to an entity type (repeatable)",
    )

    suggest = commands.add_parser("suggest", help="Typeahead suggestions")
    suggest.add_argument("query", help="Partial search text")
    suggest.add_argument("--limit", type=int, default=None, help="Maximum suggestions")

    return parser


def build_config(args: argparse.Namespace) -> JudgeFinderConfig:
    """Build configuration from args and environment."""
    overrides: dict[str, object] = {}

    if args.postgres_url:
        overrides["postgres_url"] = args.postgres_url
    if args.redis_url:
        overrides["redis_url"] = args.redis_url
        overrides["redis_enabled"] = True
    if args.no_redis:
        overrides["redis_enabled"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()

    return JudgeFinderConfig(**overrides)


async def run_command(args: argparse.Namespace, services: JudgeFinderServices) -> dict:
    """Execute the selected sub-command and return its JSON payload."""
    if args.command == "resolve":
        result = await services.resolver.resolve(args.identifier)
        return result.to_dict()
    if args.command == "search":
        response = await services.search.search(args.query, args.limit, args.types)
        return response.to_dict()
    if args.command == "suggest":
        suggestions = await services.search.suggest(args.query, args.limit)
        return suggestions.to_dict()
    raise ValueError(f"Unknown command: {args.command}")


async def run(args: argparse.Namespace, config: JudgeFinderConfig) -> dict:
    services = await build_services(config)
    try:
        return await run_command(args, services)
    finally:
        await services.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    config = build_config(args)
    setup_logging(config.log_level)

    if config.telemetry_enabled:
        init_telemetry(service_name="judgefinder", otlp_endpoint=config.otlp_endpoint)

    try:
        payload = asyncio.run(run(args, config))
    except InvalidInputError as e:
        print(json.dumps({"error": e.to_dict()}), file=sys.stderr)
        return EXIT_INVALID_INPUT
    except BackendUnavailableError as e:
        logger.error(f"Backend unavailable: {e}")
        print(json.dumps({"error": e.to_dict()}), file=sys.stderr)
        return EXIT_BACKEND_UNAVAILABLE
    except JudgeFinderError as e:
        logger.exception(f"Lookup failed: {e}")
        print(json.dumps({"error": e.to_dict()}), file=sys.stderr)
        return EXIT_ERROR
    finally:
        shutdown_telemetry()

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

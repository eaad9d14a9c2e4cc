"""
keyvault CLI — entry point for all operations.

Usage:
    keyvault serve                  # Start the API server
    keyvault migrate                # Apply pending database migrations
    keyvault migrate --status       # Show applied vs pending migrations
    keyvault query '<query>'        # Parse a search query and print its AST
    keyvault version                # Show version
"""

from __future__ import annotations

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keyvault",
        description="keyvault — project-scoped JSON secrets with boolean search.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--log-level", help="Logging level (default: $KEYVAULT_LOG_LEVEL or WARNING)")

    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", help="Bind address (default: $KEYVAULT_HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="Port (default: $KEYVAULT_PORT or 3000)")

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Run database migrations")
    migrate_parser.add_argument("--dry-run", action="store_true", help="List pending migrations without executing")
    migrate_parser.add_argument("--status", action="store_true", help="Show applied vs pending migrations")
    migrate_parser.add_argument("version_arg", nargs="?", metavar="VERSION", help="Apply only this version")

    # query
    query_parser = subparsers.add_parser("query", help="Parse a search query and print its AST")
    query_parser.add_argument("text", help="Query string, e.g. '(error OR warning) -debug'")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from keyvault import __version__

        print(f"keyvault {__version__}")
        return 0

    _configure_logging(args.log_level)

    if args.command == "serve":
        return _cmd_serve(args)
    elif args.command == "migrate":
        return _cmd_migrate(args)
    elif args.command == "query":
        return _cmd_query(args)
    else:
        parser.print_help()
        return 0


def _configure_logging(level: str | None) -> None:
    from keyvault.config import get_config

    resolved = (level or get_config().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.WARNING),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from keyvault.config import get_config

    cfg = get_config()
    host = args.host or cfg.host
    port = args.port or cfg.port

    print(f"Starting keyvault API on {host}:{port}...")
    uvicorn.run("keyvault.api.app:app", host=host, port=port, log_level=cfg.log_level.lower())
    return 0


def _cmd_migrate(args: argparse.Namespace) -> int:
    from keyvault.db import migrate

    try:
        if args.status:
            print(migrate.format_status(migrate.status()))
            return 0
        done = migrate.apply(version=args.version_arg, dry_run=args.dry_run)
    except Exception as e:
        print(f"Error: Migration failed: {e}", file=sys.stderr)
        print("Check PG_HOST, POSTGRES_DB and POSTGRES_USER/POSTGRES_PASSWORD.", file=sys.stderr)
        return 1

    if not done:
        print("Nothing to apply.")
    for mig in done:
        prefix = "[dry-run] Would apply" if args.dry_run else "Applied"
        print(f"{prefix} {mig.filename} (version {mig.version})")
    return 0


def _cmd_query(args: argparse.Namespace) -> int:
    from keyvault.query import QuerySyntaxError, dump, parse_query

    try:
        node = parse_query(args.text)
    except QuerySyntaxError as e:
        print(args.text, file=sys.stderr)
        print(" " * e.position + "^", file=sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(dump(node) if node is not None else "(empty query: matches everything)")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Job-Board Authorization Service - Entry Point

Runs the HTTP service or the out-of-band role reconciliation pass.
"""

import asyncio
import argparse
import json
import logging
import sys

from .config import load_config
from .core.auth.reconcile import reconcile_roles
from .data.repos.grants import GrantRepository
from .data.repos.principals import PrincipalRepository
from .server import configure_logging, create_store_client, run_server

logger = logging.getLogger(__name__)


async def run_reconcile(config, dry_run: bool) -> int:
    """Run one reconciliation pass and print the report as JSON."""
    if config.storage.is_memory:
        logger.warning("Reconciling an in-memory store has nothing to repair")

    client = create_store_client(config.storage)
    report = await reconcile_roles(
        GrantRepository(client),
        PrincipalRepository(client),
        dry_run=dry_run,
    )
    print(json.dumps(report.to_dict(), indent=2))
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(
        prog="jobboard-authz",
        description="Job-board delegated administration service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the HTTP service
  python -m jobboard_authz serve

  # Custom config and port
  python -m jobboard_authz serve --config ./config/authz.yaml --port 8080

  # Report role/grant divergence without changing anything
  python -m jobboard_authz reconcile --dry-run
"""
    )

    parser.add_argument(
        '--config', '-c',
        help='Path to authz.yaml (default: search ./authz.yaml, ./config/authz.yaml)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command')

    serve = subparsers.add_parser('serve', help='Run the HTTP service (default)')
    serve.add_argument('--host', help='Bind address (default: from config)')
    serve.add_argument('--port', type=int, help='Port (default: from config)')

    reconcile = subparsers.add_parser(
        'reconcile',
        help='Repair sub-admin roles that diverged from their grants'
    )
    reconcile.add_argument(
        '--dry-run',
        action='store_true',
        help='Report divergence without writing'
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, KeyError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.logging, debug=args.debug)

    if args.command == 'reconcile':
        return await run_reconcile(config, dry_run=args.dry_run)

    await run_server(
        config,
        host=getattr(args, 'host', None),
        port=getattr(args, 'port', None),
    )
    return 0


def run():
    """Entry point for console script"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

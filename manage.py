#!/usr/bin/env python3
"""
Toolcrib management CLI.

Usage:
    python manage.py serve                      Start the API server
    python manage.py migrate [--no-backup]      Apply pending schema migrations
    python manage.py status                     Show migration status and schema checks
    python manage.py reconcile [--dry-run] [--aggregate ID]
                                                Recompute stock from the ledger
"""

import argparse
import asyncio
import sys
from pathlib import Path

from toolcrib.application.services import build_container
from toolcrib.config import Settings, configure_logging, get_settings
from toolcrib.infrastructure.storage.sqlite.migrations import (
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


def cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    host = args.host or settings.api.host
    port = args.port or settings.api.port
    print(f"Starting server on {host}:{port}...")
    uvicorn.run(
        "toolcrib.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
    )


def cmd_migrate(args: argparse.Namespace, settings: Settings) -> None:
    db_path = args.db_path or settings.storage.db_path
    results = asyncio.run(
        initialize_database(db_path, create_backup_before=not args.no_backup)
    )
    if not results:
        print("Database is up to date.")
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    if any(not r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace, settings: Settings) -> None:
    db_path = args.db_path or settings.storage.db_path

    async def run() -> None:
        status = await get_migration_status(db_path)
        print(f"Database exists: {status['exists']}")
        print(f"Applied migrations: {status['applied_migrations']}")
        print(f"Pending migrations: {status['pending_migrations']}")
        if not status["exists"]:
            return
        for check in await verify_schema_integrity(db_path):
            print(f"[{check['status']}] {check['check']}")

    asyncio.run(run())


def cmd_reconcile(args: argparse.Namespace, settings: Settings) -> None:
    async def run() -> int:
        await initialize_database(settings.storage.db_path, create_backup_before=False)
        container = build_container(settings)
        try:
            report = await container.reconciler.reconcile(
                aggregate_id=args.aggregate, dry_run=args.dry_run
            )
        finally:
            await container.close()

        mode = "dry run" if report.dry_run else "applied"
        print(f"Checked {report.checked} aggregates ({mode}).")
        for entry in report.drifted:
            if entry.unresolvable:
                outcome = "UNRESOLVABLE"
            elif entry.corrected:
                outcome = "CORRECTED"
            else:
                outcome = "DRIFT"
            print(
                f"[{outcome}] aggregate {entry.aggregate_id}: "
                f"stock {entry.previous_stock} -> ledger {entry.ledger_stock}"
            )
        return 1 if any(e.unresolvable for e in report.drifted) else 0

    sys.exit(asyncio.run(run()))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Toolcrib management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_status.set_defaults(func=cmd_status)

    # reconcile
    p_reconcile = sub.add_parser("reconcile", help="Recompute stock from the ledger")
    p_reconcile.add_argument("--dry-run", action="store_true", help="Report drift without fixing it")
    p_reconcile.add_argument("--aggregate", type=int, default=None, help="Only this aggregate ID")
    p_reconcile.set_defaults(func=cmd_reconcile)

    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings)
    args.func(args, settings)


if __name__ == "__main__":
    main()

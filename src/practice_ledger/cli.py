"""Practice ledger command line interface.

Runs business hub commands against the configured database and prints
the JSON response.

Usage:
    practice-ledger init-db
    practice-ledger reconcile --organization-id X --user-id U
    practice-ledger compliance-report --organization-id X --user-id U --window-days 90
    practice-ledger analytics --organization-id X --user-id U
    practice-ledger bill --organization-id X --user-id U --matter-id M --entry-type time --quantity 1.5
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from practice_ledger.config import Settings, get_settings
from practice_ledger.database import create_schema, dispose_db, get_session
from practice_ledger.errors import StoreError
from practice_ledger.hub import Action, CallerIdentity, PracticeLedgerEngine
from practice_ledger.store import LedgerStore

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


class LedgerCli:
    """Practice ledger command line interface."""

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.session_factory = session_factory or get_session
        self.settings = settings or get_settings()
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="practice-ledger",
            description="Practice ledger operational tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")

        reconcile = subparsers.add_parser(
            "reconcile",
            help="Reconcile active trust accounts",
        )
        self._add_caller_args(reconcile)

        compliance = subparsers.add_parser(
            "compliance-report",
            help="Score compliance events over a trailing window",
        )
        self._add_caller_args(compliance)
        compliance.add_argument(
            "--window-days",
            type=int,
            help="Window length in days (default: COMPLIANCE_WINDOW_DAYS)",
        )

        analytics = subparsers.add_parser(
            "analytics",
            help="Show matter, billing and trust rollups",
        )
        self._add_caller_args(analytics)

        bill = subparsers.add_parser(
            "bill",
            help="Record a billing entry on a matter",
        )
        self._add_caller_args(bill)
        bill.add_argument("--matter-id", type=parse_uuid, required=True, help="Matter ID")
        bill.add_argument(
            "--entry-type",
            choices=["time", "expense", "flat_fee"],
            required=True,
            help="Kind of entry",
        )
        bill.add_argument("--quantity", type=str, help="Hours or unit count")
        bill.add_argument("--rate", type=str, help="Rate, or the amount of an expense")
        bill.add_argument("--description", type=str, default="", help="Entry description")
        bill.add_argument("--date", type=str, help="Entry date (YYYY-MM-DD, default: today)")
        bill.add_argument(
            "--non-billable",
            action="store_true",
            help="Record the entry as non-billable",
        )

        return parser

    @staticmethod
    def _add_caller_args(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--organization-id",
            type=parse_uuid,
            required=True,
            help="Organization to act on",
        )
        parser.add_argument(
            "--user-id",
            type=str,
            required=True,
            help="Acting user (must be an active member of the organization)",
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "init-db": self._cmd_init_db,
            "reconcile": self._cmd_reconcile,
            "compliance-report": self._cmd_compliance_report,
            "analytics": self._cmd_analytics,
            "bill": self._cmd_bill,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create database tables."""

        async def _init() -> None:
            try:
                await create_schema()
            finally:
                await dispose_db()

        asyncio.run(_init())
        print("Database schema created")
        return 0

    def _cmd_reconcile(self, args: argparse.Namespace) -> int:
        """Reconcile trust accounts."""
        return self._run_command(args, {"action": Action.TRUST_RECONCILIATION.value})

    def _cmd_compliance_report(self, args: argparse.Namespace) -> int:
        """Generate a compliance report."""
        payload: dict[str, Any] = {"action": Action.COMPLIANCE_REPORT.value}
        if args.window_days is not None:
            payload["window_days"] = args.window_days
        return self._run_command(args, payload)

    def _cmd_analytics(self, args: argparse.Namespace) -> int:
        """Show practice analytics."""
        return self._run_command(args, {"action": Action.ANALYTICS.value})

    def _cmd_bill(self, args: argparse.Namespace) -> int:
        """Record a billing entry."""
        billing_data: dict[str, Any] = {
            "entry_type": args.entry_type,
            "description": args.description,
            "billable": not args.non_billable,
            "user_id": args.user_id,
        }
        if args.quantity is not None:
            billing_data["quantity"] = args.quantity
        if args.rate is not None:
            billing_data["rate"] = args.rate
        if args.date is not None:
            billing_data["entry_date"] = args.date
        return self._run_command(
            args,
            {
                "action": Action.BILLING_AUTOMATION.value,
                "matter_id": str(args.matter_id),
                "billing_data": billing_data,
            },
        )

    def _run_command(self, args: argparse.Namespace, payload: dict[str, Any]) -> int:
        payload["organization_id"] = str(args.organization_id)
        identity = CallerIdentity(user_id=args.user_id)

        async def _execute() -> dict[str, Any]:
            try:
                return await self.execute(identity, payload)
            finally:
                if self.session_factory is get_session:
                    await dispose_db()

        body = asyncio.run(_execute())
        print(json.dumps(body, indent=2))
        return 0 if body.get("success") else 1

    async def execute(self, identity: CallerIdentity, payload: dict[str, Any]) -> dict[str, Any]:
        """Run one command in its own unit of work and return the response body."""
        async with self.session_factory() as session:
            store = LedgerStore(session)
            engine = PracticeLedgerEngine(store, self.settings)
            response = await engine.handle(identity, payload)
            try:
                if response.success:
                    await store.commit()
                else:
                    await store.rollback()
            except StoreError as e:
                logger.exception("Could not finish the unit of work")
                return e.to_dict()
        return response.to_dict()


def main() -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    cli = LedgerCli(settings=settings)
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

"""Payroll Command Line Interface.

Usage:
    python -m cast_payroll store --store-id X [--role cast|staff] [--now ISO]
    python -m cast_payroll profile --profile-id X [--now ISO]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import Awaitable, Callable
from uuid import UUID

from cast_payroll.config import get_settings
from cast_payroll.database import dispose_db, get_session
from cast_payroll.schemas import PayrollResponse
from cast_payroll.services.payroll_service import (
    PayrollService,
    ProfileNotFoundError,
    StoreNotFoundError,
)


def parse_datetime(s: str) -> datetime:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


class PayrollCli:
    """Payroll Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m cast_payroll",
            description="Compute per-business-day cast payroll",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # store command
        store = subparsers.add_parser(
            "store",
            help="Payroll for every profile of a store",
        )
        store.add_argument(
            "--store-id",
            type=parse_uuid,
            required=True,
            help="Store to compute payroll for",
        )
        store.add_argument(
            "--role",
            type=str,
            default="cast",
            help="Role filter: cast (default), staff (staff + admin) or any role",
        )
        self._add_common(store)

        # profile command
        profile = subparsers.add_parser(
            "profile",
            help="Payroll of a single profile",
        )
        profile.add_argument(
            "--profile-id",
            type=parse_uuid,
            required=True,
            help="Profile to compute payroll for",
        )
        self._add_common(profile)

        return parser

    @staticmethod
    def _add_common(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--now",
            type=parse_datetime,
            help="Compute as of this timestamp (ISO format, default: current time)",
        )
        parser.add_argument(
            "--indent",
            type=int,
            default=2,
            help="JSON indentation (default: 2)",
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[..., int]] = {
            "store": self._cmd_store,
            "profile": self._cmd_profile,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _cmd_store(self, args: argparse.Namespace) -> int:
        """Compute store payroll."""

        async def compute(service: PayrollService) -> PayrollResponse:
            return await service.compute_store_payroll(args.store_id, role=args.role, now=args.now)

        return self._execute(compute, args.indent)

    def _cmd_profile(self, args: argparse.Namespace) -> int:
        """Compute a single profile's payroll."""

        async def compute(service: PayrollService) -> PayrollResponse:
            return await service.compute_profile_payroll(args.profile_id, now=args.now)

        return self._execute(compute, args.indent)

    def _execute(
        self,
        compute: Callable[[PayrollService], Awaitable[PayrollResponse]],
        indent: int,
    ) -> int:
        try:
            response = asyncio.run(self._with_session(compute))
        except (StoreNotFoundError, ProfileNotFoundError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

        print(response.model_dump_json(by_alias=True, indent=indent))
        return 0

    @staticmethod
    async def _with_session(
        compute: Callable[[PayrollService], Awaitable[PayrollResponse]],
    ) -> PayrollResponse:
        try:
            async with get_session() as session:
                return await compute(PayrollService(session))
        finally:
            await dispose_db()


def main() -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

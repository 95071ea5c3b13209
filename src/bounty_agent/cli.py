from __future__ import annotations

import json
import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Callable, Sequence

from bounty_agent.commands import (
    run_convert_amount,
    run_payout_stats,
    run_quote_bounty,
    run_reconcile_payout,
    run_release_bounty,
)
from bounty_agent.config import AppSettings, get_settings
from bounty_agent.observability.logging import configure_logging
from bounty_agent.types import CommandResult, CommandStatus

CommandHandler = Callable[[Namespace, AppSettings], CommandResult]

COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "quote-bounty": run_quote_bounty,
    "release-bounty": run_release_bounty,
    "payout-stats": run_payout_stats,
    "reconcile-payout": run_reconcile_payout,
    "convert-amount": run_convert_amount,
}


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="bounty-agent", description="Bounty payout agent CLI")
    parser.add_argument("--json", action="store_true", help="emit machine-readable JSON output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote-bounty")
    quote.add_argument("--repo-id", required=True)

    release = subparsers.add_parser("release-bounty")
    release.add_argument("--repo-id", required=True)
    release.add_argument("--contributor-wallet", required=True)
    release.add_argument("--pr-number", required=True, type=int)
    release.add_argument("--amount", default=None, help="NEAR amount; quoted from the contract if omitted")

    subparsers.add_parser("payout-stats")

    reconcile = subparsers.add_parser("reconcile-payout")
    reconcile.add_argument("--repo-id", required=True)
    reconcile.add_argument("--pr-number", required=True, type=int)
    reconcile.add_argument("--tx-hash", default=None)
    reconcile.add_argument("--sender-account-id", default=None)
    reconcile.add_argument("--mark-unpaid", action="store_true")

    convert = subparsers.add_parser("convert-amount")
    convert_group = convert.add_mutually_exclusive_group(required=True)
    convert_group.add_argument("--to-yocto", default=None)
    convert_group.add_argument("--from-yocto", default=None)

    return parser


def _emit_result(result: CommandResult, *, as_json: bool) -> None:
    if as_json:
        print(result.to_json())
        return

    print(f"{result.command}: {result.status.value}")
    if result.details:
        print(json.dumps(result.details, indent=2, sort_keys=True))


def entrypoint(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    settings = get_settings()
    configure_logging(settings.log_level, stream=sys.stderr)

    handler = COMMAND_HANDLERS[str(args.command)]
    result = handler(args, settings)
    _emit_result(result, as_json=bool(args.json))
    return 1 if result.status == CommandStatus.FAILED else 0


if __name__ == "__main__":
    raise SystemExit(entrypoint())

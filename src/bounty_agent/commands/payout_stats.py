from __future__ import annotations

from argparse import Namespace

from bounty_agent.config import AppSettings
from bounty_agent.store.payout_ledger import LedgerReadError, build_payout_ledger
from bounty_agent.types import CommandResult, CommandStatus


def run_payout_stats(_: Namespace, settings: AppSettings) -> CommandResult:
    ledger_name = settings.payout_ledger_path or "memory"
    try:
        stats = build_payout_ledger(settings).stats()
    except LedgerReadError as exc:
        return CommandResult(
            command="payout-stats",
            status=CommandStatus.FAILED,
            details={"ledger": ledger_name, "error": str(exc)},
        )
    return CommandResult(
        command="payout-stats",
        status=CommandStatus.EXECUTED,
        details={
            "ledger": ledger_name,
            "payouts": stats.as_dict(),
        },
    )

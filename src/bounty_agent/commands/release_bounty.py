from __future__ import annotations

import asyncio
from argparse import Namespace

from bounty_agent.config import AppSettings
from bounty_agent.domain import PayoutOutcome, PayoutRequest, PayoutStatus
from bounty_agent.near.agent_client import RemoteCallError
from bounty_agent.runtime.container import build_executor, open_agent
from bounty_agent.store.payout_ledger import LedgerReadError, build_payout_ledger
from bounty_agent.types import CommandResult, CommandStatus

OUTCOME_COMMAND_STATUS: dict[PayoutStatus, CommandStatus] = {
    PayoutStatus.PAID: CommandStatus.EXECUTED,
    PayoutStatus.ALREADY_PAID: CommandStatus.ALREADY_PAID,
    PayoutStatus.REJECTED: CommandStatus.FAILED,
    PayoutStatus.UNKNOWN: CommandStatus.PENDING,
    PayoutStatus.RECONCILIATION_REQUIRED: CommandStatus.PENDING,
}


async def _release(settings: AppSettings, request: PayoutRequest) -> PayoutOutcome:
    ledger = build_payout_ledger(settings)
    async with open_agent(settings) as agent:
        executor = build_executor(settings, agent, ledger)
        return await executor.release_bounty(request)


def run_release_bounty(args: Namespace, settings: AppSettings) -> CommandResult:
    raw_amount = getattr(args, "amount", None)
    request = PayoutRequest(
        repo_id=str(getattr(args, "repo_id", "")).strip(),
        contributor_wallet=str(getattr(args, "contributor_wallet", "")).strip(),
        pr_number=int(getattr(args, "pr_number", 0)),
        amount=str(raw_amount).strip() if raw_amount else None,
    )
    try:
        request.ensure_canonical()
    except ValueError as exc:
        return CommandResult(
            command="release-bounty",
            status=CommandStatus.FAILED,
            details={"error": str(exc)},
        )

    try:
        outcome = asyncio.run(_release(settings, request))
    except (RemoteCallError, LedgerReadError) as exc:
        return CommandResult(
            command="release-bounty",
            status=CommandStatus.FAILED,
            details={
                "repo_id": request.repo_id,
                "pr_number": request.pr_number,
                "error": str(exc),
            },
        )

    return CommandResult(
        command="release-bounty",
        status=OUTCOME_COMMAND_STATUS.get(outcome.status, CommandStatus.FAILED),
        details={
            "repo_id": request.repo_id,
            "pr_number": request.pr_number,
            "outcome": outcome.as_dict(),
        },
    )

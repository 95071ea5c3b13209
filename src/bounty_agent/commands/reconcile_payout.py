from __future__ import annotations

import asyncio
from argparse import Namespace

from bounty_agent.config import AppSettings
from bounty_agent.domain import is_terminal_status
from bounty_agent.near.agent_client import RemoteCallError
from bounty_agent.near.rpc_client import RpcClientFactory
from bounty_agent.orchestration.reconciliation import PayoutReconciler, ReconciliationResult
from bounty_agent.store.payout_ledger import LedgerReadError, LedgerWriteError, build_payout_ledger
from bounty_agent.types import CommandResult, CommandStatus


async def _reconcile(
    settings: AppSettings,
    repo_id: str,
    pr_number: int,
    *,
    tx_hash: str | None,
    sender_account_id: str | None,
    mark_unpaid: bool,
) -> ReconciliationResult:
    rpc = RpcClientFactory(settings).create()
    try:
        reconciler = PayoutReconciler(build_payout_ledger(settings), rpc)
        return await reconciler.reconcile(
            repo_id,
            pr_number,
            tx_hash=tx_hash,
            sender_account_id=sender_account_id,
            mark_unpaid=mark_unpaid,
        )
    finally:
        await rpc.aclose()


def run_reconcile_payout(args: Namespace, settings: AppSettings) -> CommandResult:
    repo_id = str(getattr(args, "repo_id", "")).strip()
    if not repo_id:
        return CommandResult(
            command="reconcile-payout",
            status=CommandStatus.FAILED,
            details={"error": "repo_id is required"},
        )

    raw_pr_number = getattr(args, "pr_number", None)
    if isinstance(raw_pr_number, bool):
        return CommandResult(
            command="reconcile-payout",
            status=CommandStatus.FAILED,
            details={"error": "pr_number must be an integer"},
        )
    try:
        pr_number = int(raw_pr_number)
    except (TypeError, ValueError):
        return CommandResult(
            command="reconcile-payout",
            status=CommandStatus.FAILED,
            details={"error": "pr_number must be an integer"},
        )

    tx_hash = str(getattr(args, "tx_hash", "") or "").strip() or None
    sender = str(getattr(args, "sender_account_id", "") or "").strip() or None
    mark_unpaid = bool(getattr(args, "mark_unpaid", False))
    if tx_hash and mark_unpaid:
        return CommandResult(
            command="reconcile-payout",
            status=CommandStatus.FAILED,
            details={"error": "--tx-hash and --mark-unpaid are mutually exclusive"},
        )

    try:
        result = asyncio.run(
            _reconcile(
                settings,
                repo_id,
                pr_number,
                tx_hash=tx_hash,
                sender_account_id=sender,
                mark_unpaid=mark_unpaid,
            )
        )
    except (RemoteCallError, LedgerReadError, LedgerWriteError) as exc:
        return CommandResult(
            command="reconcile-payout",
            status=CommandStatus.FAILED,
            details={"repo_id": repo_id, "pr_number": pr_number, "error": str(exc)},
        )

    if result.status is None:
        status = CommandStatus.FAILED
    elif is_terminal_status(result.status):
        status = CommandStatus.EXECUTED
    else:
        status = CommandStatus.PENDING

    return CommandResult(command="reconcile-payout", status=status, details=result.as_dict())

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

from bounty_agent.domain import PayoutRecord, PayoutStatus, is_terminal_status
from bounty_agent.near.rpc_client import TransactionState
from bounty_agent.observability.logging import get_logger
from bounty_agent.store.payout_ledger import PayoutLedger

OPERATOR_UNPAID_MESSAGE = "operator confirmed the transfer did not land"


class TransactionLookup(Protocol):
    async def tx_status(self, tx_hash: str, sender_account_id: str) -> TransactionState:
        ...


def reconcile_status(current_status: PayoutStatus, target_status: PayoutStatus) -> PayoutStatus:
    if is_terminal_status(current_status):
        return current_status
    return target_status


@dataclass(slots=True, frozen=True)
class ReconciliationResult:
    repo_id: str
    pr_number: int
    status: PayoutStatus | None
    reason: str
    record: PayoutRecord | None = None
    settled: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "repo_id": self.repo_id,
            "pr_number": self.pr_number,
            "status": self.status.value if self.status is not None else None,
            "reason": self.reason,
            "settled": self.settled,
            "record": self.record.as_dict() if self.record is not None else None,
        }


class PayoutReconciler:
    """Settles payouts whose outcome is unknown by appending a resolution record.

    Nothing is re-attempted here; once a payout is settled as unpaid the
    executor will accept a fresh attempt for the same pull request.
    """

    def __init__(self, ledger: PayoutLedger, rpc: TransactionLookup) -> None:
        self._ledger = ledger
        self._rpc = rpc

    async def reconcile(
        self,
        repo_id: str,
        pr_number: int,
        *,
        tx_hash: str | None = None,
        sender_account_id: str | None = None,
        mark_unpaid: bool = False,
    ) -> ReconciliationResult:
        logger = get_logger("payout_reconciler").bind(repo_id=repo_id, pr_number=pr_number)
        latest = await asyncio.to_thread(self._ledger.latest_for, repo_id, pr_number)
        if latest is None:
            return ReconciliationResult(
                repo_id, pr_number, None, "no payout attempt recorded"
            )

        if is_terminal_status(latest.status):
            return ReconciliationResult(
                repo_id, pr_number, latest.status, "payout already settled", record=latest
            )

        if tx_hash:
            if not sender_account_id:
                return ReconciliationResult(
                    repo_id,
                    pr_number,
                    latest.status,
                    "sender_account_id is required to look up a transaction",
                    record=latest,
                )
            state = await self._rpc.tx_status(tx_hash, sender_account_id)
            logger.info("payout_transaction_polled", transaction_hash=tx_hash, state=state.value)
            if state == TransactionState.NOT_FOUND:
                return ReconciliationResult(
                    repo_id,
                    pr_number,
                    latest.status,
                    "transaction not found or still executing; retry reconciliation later",
                    record=latest,
                )
            if state == TransactionState.SUCCEEDED:
                target = PayoutStatus.RECONCILED_PAID
                resolution = _resolution(latest, target, transaction_hash=tx_hash)
            else:
                target = PayoutStatus.RECONCILED_UNPAID
                resolution = _resolution(
                    latest, target, error_message=f"transaction {tx_hash} failed on chain"
                )
        elif mark_unpaid:
            target = PayoutStatus.RECONCILED_UNPAID
            resolution = _resolution(latest, target, error_message=OPERATOR_UNPAID_MESSAGE)
        else:
            return ReconciliationResult(
                repo_id,
                pr_number,
                latest.status,
                "tx_hash or mark_unpaid is required to settle an unknown payout",
                record=latest,
            )

        await asyncio.to_thread(self._ledger.append, resolution)
        logger.warning(
            "payout_reconciled",
            status=reconcile_status(latest.status, target).value,
            transaction_hash=resolution.transaction_hash,
        )
        return ReconciliationResult(
            repo_id, pr_number, resolution.status, "payout settled", record=resolution, settled=True
        )


def _resolution(
    latest: PayoutRecord,
    status: PayoutStatus,
    *,
    transaction_hash: str | None = None,
    error_message: str | None = None,
) -> PayoutRecord:
    return PayoutRecord(
        repo_id=latest.repo_id,
        pr_number=latest.pr_number,
        contributor_wallet=latest.contributor_wallet,
        amount=latest.amount,
        status=status,
        transaction_hash=transaction_hash,
        error_message=error_message,
    )

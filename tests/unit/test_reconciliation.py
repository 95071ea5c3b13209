from __future__ import annotations

import asyncio

from bounty_agent.domain import PayoutRecord, PayoutStatus
from bounty_agent.near.rpc_client import TransactionState
from bounty_agent.orchestration.reconciliation import PayoutReconciler


class StubRpc:
    def __init__(self, state: TransactionState) -> None:
        self.state = state
        self.lookups: list[tuple[str, str]] = []

    async def tx_status(self, tx_hash: str, sender_account_id: str) -> TransactionState:
        self.lookups.append((tx_hash, sender_account_id))
        return self.state


def _unknown() -> PayoutRecord:
    return PayoutRecord(
        repo_id="acme/widgets",
        pr_number=42,
        contributor_wallet="alice.near",
        amount="1.5",
        status=PayoutStatus.UNKNOWN,
        error_message="no response within 60.0s; transfer may still land",
    )


def _reconcile(ledger, rpc, **kwargs):
    return asyncio.run(PayoutReconciler(ledger, rpc).reconcile("acme/widgets", 42, **kwargs))


def test_missing_attempt_cannot_be_reconciled(ledger) -> None:
    result = _reconcile(ledger, StubRpc(TransactionState.SUCCEEDED), mark_unpaid=True)

    assert result.status is None
    assert result.settled is False
    assert len(ledger) == 0


def test_settled_payout_is_left_unchanged(ledger) -> None:
    paid = PayoutRecord("acme/widgets", 42, "alice.near", "1.5", PayoutStatus.PAID, "tx1")
    ledger.append(paid)

    result = _reconcile(ledger, StubRpc(TransactionState.FAILED), tx_hash="tx1", sender_account_id="a")

    assert result.status == PayoutStatus.PAID
    assert result.settled is False
    assert ledger.records() == (paid,)


def test_confirmed_transaction_appends_reconciled_paid(ledger) -> None:
    ledger.append(_unknown())
    rpc = StubRpc(TransactionState.SUCCEEDED)

    result = _reconcile(ledger, rpc, tx_hash="tx1", sender_account_id="agent.testnet")

    assert result.settled is True
    assert result.status == PayoutStatus.RECONCILED_PAID
    assert rpc.lookups == [("tx1", "agent.testnet")]
    assert [record.status for record in ledger.records()] == [
        PayoutStatus.UNKNOWN,
        PayoutStatus.RECONCILED_PAID,
    ]
    assert ledger.stats().total_amount_paid == "1.5"


def test_failed_transaction_appends_reconciled_unpaid(ledger) -> None:
    ledger.append(_unknown())

    result = _reconcile(
        ledger, StubRpc(TransactionState.FAILED), tx_hash="tx1", sender_account_id="agent.testnet"
    )

    assert result.status == PayoutStatus.RECONCILED_UNPAID
    assert "failed on chain" in str(result.record.error_message)


def test_transaction_not_found_keeps_payout_unknown(ledger) -> None:
    ledger.append(_unknown())

    result = _reconcile(
        ledger, StubRpc(TransactionState.NOT_FOUND), tx_hash="tx1", sender_account_id="agent.testnet"
    )

    assert result.settled is False
    assert result.status == PayoutStatus.UNKNOWN
    assert len(ledger) == 1


def test_tx_lookup_requires_sender(ledger) -> None:
    ledger.append(_unknown())
    rpc = StubRpc(TransactionState.SUCCEEDED)

    result = _reconcile(ledger, rpc, tx_hash="tx1")

    assert result.settled is False
    assert rpc.lookups == []


def test_operator_can_mark_unknown_payout_unpaid(ledger) -> None:
    ledger.append(_unknown())

    result = _reconcile(ledger, StubRpc(TransactionState.SUCCEEDED), mark_unpaid=True)

    assert result.settled is True
    assert result.status == PayoutStatus.RECONCILED_UNPAID
    assert ledger.latest_for("acme/widgets", 42).status == PayoutStatus.RECONCILED_UNPAID


def test_reconcile_without_evidence_does_nothing(ledger) -> None:
    ledger.append(_unknown())

    result = _reconcile(ledger, StubRpc(TransactionState.SUCCEEDED))

    assert result.settled is False
    assert len(ledger) == 1

"""Bounty payout orchestration.

``PayoutExecutor.release_bounty`` is the single entry point used by the webhook
layer once a merged pull request qualifies. It never raises: every failure is
returned as a ``PayoutOutcome`` and, when a remote call was attempted, written
to the payout ledger.
"""

from __future__ import annotations

import asyncio
from typing import Any

from bounty_agent.domain import (
    UNKNOWN_ERROR,
    UNKNOWN_TRANSACTION_HASH,
    PayoutOutcome,
    PayoutRecord,
    PayoutRequest,
    PayoutStatus,
)
from bounty_agent.near.agent_client import RemoteLedger, RemoteOutcomeUnknown
from bounty_agent.near.bounty_quote import BountyQuoteClient
from bounty_agent.near.units import to_yocto
from bounty_agent.observability.logging import get_logger
from bounty_agent.orchestration.payout_guard import KeyedLocks, check_payout_safety
from bounty_agent.store.payout_ledger import LedgerReadError, LedgerWriteError, PayoutLedger

RELEASE_BOUNTY_METHOD = "release_bounty"
DEFAULT_PAYOUT_GAS = 100_000_000_000_000
DEFAULT_PAYOUT_TIMEOUT_SECONDS = 60.0


def extract_transaction_hash(result: Any) -> str:
    if isinstance(result, dict):
        transaction = result.get("transaction")
        if isinstance(transaction, dict):
            tx_hash = transaction.get("hash")
            if isinstance(tx_hash, str) and tx_hash:
                return tx_hash
    return UNKNOWN_TRANSACTION_HASH


def failure_message(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or UNKNOWN_ERROR


class PayoutExecutor:
    def __init__(
        self,
        agent: RemoteLedger,
        ledger: PayoutLedger,
        quotes: BountyQuoteClient,
        *,
        gas: int = DEFAULT_PAYOUT_GAS,
        timeout_seconds: float = DEFAULT_PAYOUT_TIMEOUT_SECONDS,
    ) -> None:
        self._agent = agent
        self._ledger = ledger
        self._quotes = quotes
        self._gas = gas
        self._timeout_seconds = timeout_seconds
        self._locks = KeyedLocks()

    async def release_bounty(self, request: PayoutRequest) -> PayoutOutcome:
        logger = get_logger("payout_executor").bind(
            repo_id=request.repo_id,
            pr_number=request.pr_number,
        )
        async with self._locks.hold(request.idempotency_key):
            try:
                prior_status, prior = await asyncio.to_thread(
                    check_payout_safety, self._ledger, request.repo_id, request.pr_number
                )
            except LedgerReadError as exc:
                logger.error("payout_ledger_read_failed", error=str(exc))
                return PayoutOutcome(
                    success=False,
                    status=PayoutStatus.REJECTED,
                    error_message=f"payout history unavailable: {exc}",
                    recorded=False,
                )
            if prior_status is not None and prior is not None:
                logger.info(
                    "payout_skipped",
                    status=prior_status.value,
                    existing_status=prior.status.value,
                    existing_transaction_hash=prior.transaction_hash,
                )
                return PayoutOutcome.skipped(prior_status, prior)

            return await self._attempt(request, logger)

    async def _attempt(self, request: PayoutRequest, logger: Any) -> PayoutOutcome:
        amount = request.amount or await self._quotes.get_bounty(request.repo_id)
        logger.info(
            "payout_attempt",
            contributor_wallet=request.contributor_wallet,
            amount=amount,
        )

        try:
            result = await asyncio.wait_for(
                self._agent.call(
                    RELEASE_BOUNTY_METHOD,
                    {
                        "repo_id": request.repo_id,
                        "recipient": request.contributor_wallet,
                        "amount": to_yocto(amount),
                    },
                    gas=self._gas,
                ),
                timeout=self._timeout_seconds,
            )
        except (TimeoutError, RemoteOutcomeUnknown) as exc:
            message = failure_message(exc)
            if isinstance(exc, TimeoutError):
                message = f"no response within {self._timeout_seconds}s; transfer may still land"
            logger.error("payout_outcome_unknown", error=message, amount=amount)
            record = self._record(request, amount, PayoutStatus.UNKNOWN, error_message=message)
        except Exception as exc:
            message = failure_message(exc)
            logger.error("payout_rejected", error=message, amount=amount)
            record = self._record(request, amount, PayoutStatus.REJECTED, error_message=message)
        else:
            tx_hash = extract_transaction_hash(result)
            if tx_hash == UNKNOWN_TRANSACTION_HASH:
                logger.warning("payout_transaction_hash_missing")
            logger.info("payout_succeeded", transaction_hash=tx_hash, amount=amount)
            record = self._record(request, amount, PayoutStatus.PAID, transaction_hash=tx_hash)

        recorded = await self._append(record, logger)
        return PayoutOutcome.from_record(record, recorded=recorded)

    def _record(
        self,
        request: PayoutRequest,
        amount: str,
        status: PayoutStatus,
        *,
        transaction_hash: str | None = None,
        error_message: str | None = None,
    ) -> PayoutRecord:
        return PayoutRecord(
            repo_id=request.repo_id,
            pr_number=request.pr_number,
            contributor_wallet=request.contributor_wallet,
            amount=amount,
            status=status,
            transaction_hash=transaction_hash,
            error_message=error_message,
        )

    async def _append(self, record: PayoutRecord, logger: Any) -> bool:
        try:
            await asyncio.to_thread(self._ledger.append, record)
        except LedgerWriteError as exc:
            if record.success:
                # Funds have moved without an audit entry.
                logger.critical("payout_ledger_write_failed", error=str(exc), **record.as_dict())
            else:
                logger.error("payout_ledger_write_failed", error=str(exc), **record.as_dict())
            return False
        return True

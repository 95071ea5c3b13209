from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from bounty_agent.domain.status import (
    PAID_STATUSES,
    RECORDED_STATUSES,
    PayoutStatus,
    is_paid_status,
)

UNKNOWN_TRANSACTION_HASH = "unknown"
UNKNOWN_ERROR = "Unknown error"

PayoutKey = tuple[str, int]


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True, frozen=True)
class PayoutRequest:
    repo_id: str
    contributor_wallet: str
    pr_number: int
    amount: str | None = None

    @property
    def idempotency_key(self) -> PayoutKey:
        return (self.repo_id, self.pr_number)

    def ensure_canonical(self) -> None:
        if not self.repo_id:
            raise ValueError("repo_id is required")
        if not self.contributor_wallet:
            raise ValueError("contributor_wallet is required")
        if self.pr_number < 0:
            raise ValueError("pr_number must be non-negative")


@dataclass(slots=True, frozen=True)
class PayoutRecord:
    repo_id: str
    pr_number: int
    contributor_wallet: str
    amount: str
    status: PayoutStatus
    transaction_hash: str | None = None
    error_message: str | None = None
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def success(self) -> bool:
        return is_paid_status(self.status)

    @property
    def key(self) -> PayoutKey:
        return (self.repo_id, self.pr_number)

    def as_dict(self) -> dict[str, Any]:
        return {
            "repo_id": self.repo_id,
            "pr_number": self.pr_number,
            "contributor_wallet": self.contributor_wallet,
            "amount": self.amount,
            "status": self.status.value,
            "success": self.success,
            "transaction_hash": self.transaction_hash,
            "error_message": self.error_message,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayoutRecord:
        status = PayoutStatus(data["status"])
        if status not in RECORDED_STATUSES:
            raise ValueError(f"{status.value} is an outcome, not a ledger status")
        return cls(
            repo_id=str(data["repo_id"]),
            pr_number=int(data["pr_number"]),
            contributor_wallet=str(data["contributor_wallet"]),
            amount=str(data["amount"]),
            status=status,
            transaction_hash=data.get("transaction_hash"),
            error_message=data.get("error_message"),
            timestamp=str(data["timestamp"]),
        )


@dataclass(slots=True, frozen=True)
class PayoutOutcome:
    """Result handed back to the caller of a payout; never an exception."""

    success: bool
    status: PayoutStatus
    transaction_hash: str | None = None
    error_message: str | None = None
    record: PayoutRecord | None = None
    recorded: bool = True

    @classmethod
    def from_record(cls, record: PayoutRecord, *, recorded: bool = True) -> PayoutOutcome:
        if record.success:
            return cls(
                success=True,
                status=record.status,
                transaction_hash=record.transaction_hash or UNKNOWN_TRANSACTION_HASH,
                record=record,
                recorded=recorded,
            )
        return cls(
            success=False,
            status=record.status,
            error_message=record.error_message or UNKNOWN_ERROR,
            record=record,
            recorded=recorded,
        )

    @classmethod
    def skipped(cls, status: PayoutStatus, existing: PayoutRecord) -> PayoutOutcome:
        if status == PayoutStatus.ALREADY_PAID:
            return cls(
                success=True,
                status=status,
                transaction_hash=existing.transaction_hash or UNKNOWN_TRANSACTION_HASH,
                record=existing,
                recorded=False,
            )
        return cls(
            success=False,
            status=status,
            error_message="previous payout outcome is unknown; reconcile before retrying",
            record=existing,
            recorded=False,
        )

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "status": self.status.value,
            "recorded": self.recorded,
        }
        if self.success:
            data["transaction_hash"] = self.transaction_hash
        else:
            data["error_message"] = self.error_message
        if self.record is not None:
            data["record"] = self.record.as_dict()
        return data


@dataclass(slots=True, frozen=True)
class PayoutStats:
    total_attempts: int = 0
    success_count: int = 0
    failure_count: int = 0
    unknown_count: int = 0
    reconciled_count: int = 0
    total_amount_paid: str = "0"

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_attempts": self.total_attempts,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "unknown_count": self.unknown_count,
            "reconciled_count": self.reconciled_count,
            "total_amount_paid": self.total_amount_paid,
        }


def _decimal_amount(amount: str) -> Decimal:
    try:
        value = Decimal(amount)
    except InvalidOperation:
        return Decimal(0)
    return value if value.is_finite() else Decimal(0)


def summarize_payouts(records: Iterable[PayoutRecord]) -> PayoutStats:
    counts = {status: 0 for status in PayoutStatus}
    total = Decimal(0)
    for record in records:
        counts[record.status] += 1
        if record.status in PAID_STATUSES:
            total += _decimal_amount(record.amount)

    return PayoutStats(
        total_attempts=(
            counts[PayoutStatus.PAID]
            + counts[PayoutStatus.REJECTED]
            + counts[PayoutStatus.UNKNOWN]
        ),
        success_count=counts[PayoutStatus.PAID],
        failure_count=counts[PayoutStatus.REJECTED],
        unknown_count=counts[PayoutStatus.UNKNOWN],
        reconciled_count=(
            counts[PayoutStatus.RECONCILED_PAID] + counts[PayoutStatus.RECONCILED_UNPAID]
        ),
        total_amount_paid=str(total),
    )

from __future__ import annotations

from enum import StrEnum


class PayoutStatus(StrEnum):
    PAID = "paid"
    REJECTED = "rejected"
    UNKNOWN = "unknown"
    RECONCILED_PAID = "reconciled_paid"
    RECONCILED_UNPAID = "reconciled_unpaid"
    # Outcome-only: never written to the ledger.
    ALREADY_PAID = "already_paid"
    RECONCILIATION_REQUIRED = "reconciliation_required"


RECORDED_STATUSES: frozenset[PayoutStatus] = frozenset(
    {
        PayoutStatus.PAID,
        PayoutStatus.REJECTED,
        PayoutStatus.UNKNOWN,
        PayoutStatus.RECONCILED_PAID,
        PayoutStatus.RECONCILED_UNPAID,
    }
)

TERMINAL_STATUSES: frozenset[PayoutStatus] = frozenset(
    {
        PayoutStatus.PAID,
        PayoutStatus.REJECTED,
        PayoutStatus.RECONCILED_PAID,
        PayoutStatus.RECONCILED_UNPAID,
    }
)

PAID_STATUSES: frozenset[PayoutStatus] = frozenset(
    {
        PayoutStatus.PAID,
        PayoutStatus.RECONCILED_PAID,
    }
)


def is_terminal_status(status: PayoutStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_paid_status(status: PayoutStatus) -> bool:
    return status in PAID_STATUSES

"""Domain models for bounty payouts and their audit records."""

from bounty_agent.domain.payout import (
    UNKNOWN_ERROR,
    UNKNOWN_TRANSACTION_HASH,
    PayoutKey,
    PayoutOutcome,
    PayoutRecord,
    PayoutRequest,
    PayoutStats,
    summarize_payouts,
)
from bounty_agent.domain.status import PayoutStatus, is_paid_status, is_terminal_status

__all__ = [
    "UNKNOWN_ERROR",
    "UNKNOWN_TRANSACTION_HASH",
    "PayoutKey",
    "PayoutOutcome",
    "PayoutRecord",
    "PayoutRequest",
    "PayoutStats",
    "PayoutStatus",
    "is_paid_status",
    "is_terminal_status",
    "summarize_payouts",
]

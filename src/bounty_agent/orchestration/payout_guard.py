from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from bounty_agent.domain import PayoutKey, PayoutRecord, PayoutStatus, is_paid_status
from bounty_agent.store.payout_ledger import PayoutLedger


class KeyedLocks:
    """Per-key asyncio locks, created on demand and dropped once released."""

    def __init__(self) -> None:
        self._locks: dict[PayoutKey, asyncio.Lock] = {}
        self._holders: dict[PayoutKey, int] = {}

    @asynccontextmanager
    async def hold(self, key: PayoutKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def check_payout_safety(
    ledger: PayoutLedger,
    repo_id: str,
    pr_number: int,
) -> tuple[PayoutStatus | None, PayoutRecord | None]:
    records = ledger.records_for(repo_id, pr_number)
    if not records:
        return None, None

    for record in records:
        if is_paid_status(record.status):
            return PayoutStatus.ALREADY_PAID, record

    latest = records[-1]
    if latest.status == PayoutStatus.UNKNOWN:
        return PayoutStatus.RECONCILIATION_REQUIRED, latest

    return None, None

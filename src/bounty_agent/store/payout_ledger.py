"""Append-only storage for payout attempts.

The ledger is the audit trail and the idempotency source of truth: records are
only ever appended, and every aggregate is recomputed from a full scan so it
can never drift from the records themselves.
"""

from __future__ import annotations

import fcntl
import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from bounty_agent.config import AppSettings
from bounty_agent.domain import PayoutRecord, PayoutStats, summarize_payouts


class LedgerWriteError(RuntimeError):
    """A payout record could not be persisted."""


class LedgerReadError(RuntimeError):
    """Stored payout records could not be read back."""


class PayoutLedger(ABC):
    def __init__(self) -> None:
        self._lock = threading.Lock()

    @abstractmethod
    def _persist(self, record: PayoutRecord) -> None:
        ...

    @abstractmethod
    def _snapshot(self) -> tuple[PayoutRecord, ...]:
        ...

    def append(self, record: PayoutRecord) -> None:
        with self._lock:
            self._persist(record)

    def records(self) -> tuple[PayoutRecord, ...]:
        with self._lock:
            return self._snapshot()

    def records_for(self, repo_id: str, pr_number: int) -> tuple[PayoutRecord, ...]:
        key = (repo_id, pr_number)
        return tuple(record for record in self.records() if record.key == key)

    def latest_for(self, repo_id: str, pr_number: int) -> PayoutRecord | None:
        matching = self.records_for(repo_id, pr_number)
        return matching[-1] if matching else None

    def stats(self) -> PayoutStats:
        return summarize_payouts(self.records())

    def __len__(self) -> int:
        return len(self.records())


class InMemoryPayoutLedger(PayoutLedger):
    def __init__(self) -> None:
        super().__init__()
        self._records: list[PayoutRecord] = []

    def _persist(self, record: PayoutRecord) -> None:
        self._records.append(record)

    def _snapshot(self) -> tuple[PayoutRecord, ...]:
        return tuple(self._records)


class JsonlPayoutLedger(PayoutLedger):
    """One JSON object per line, shared between processes.

    Every query re-reads the file under a shared ``flock`` and every append
    holds an exclusive one, so records written by another process (the CLI
    reconciling a payout while the server runs) are seen on the next check.
    The file is validated once on open.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self._path = Path(path)
        self._snapshot()

    @property
    def path(self) -> Path:
        return self._path

    def _snapshot(self) -> tuple[PayoutRecord, ...]:
        if not self._path.exists():
            return ()
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                fcntl.flock(handle.fileno(), fcntl.LOCK_SH)
                lines = handle.readlines()
        except OSError as exc:
            raise LedgerReadError(f"failed to read payout records from {self._path}: {exc}") from exc

        loaded: list[PayoutRecord] = []
        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                loaded.append(PayoutRecord.from_dict(json.loads(line)))
            except (KeyError, TypeError, ValueError) as exc:
                raise LedgerReadError(f"{self._path}:{number}: unreadable payout record: {exc}") from exc
        return tuple(loaded)

    def _persist(self, record: PayoutRecord) -> None:
        line = json.dumps(record.as_dict(), sort_keys=True, separators=(",", ":"))
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                handle.write(line + "\n")
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            raise LedgerWriteError(f"failed to append payout record to {self._path}: {exc}") from exc


def build_payout_ledger(settings: AppSettings) -> PayoutLedger:
    path = settings.payout_ledger_path.strip()
    if path:
        return JsonlPayoutLedger(path)
    return InMemoryPayoutLedger()

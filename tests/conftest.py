from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any

import pytest

from bounty_agent.config import get_settings
from bounty_agent.near.agent_client import AgentNotInitializedError
from bounty_agent.observability.logging import configure_logging
from bounty_agent.store.payout_ledger import InMemoryPayoutLedger


class StubAgent:
    """In-process stand-in for the shade agent's view/call surface."""

    def __init__(
        self,
        *,
        account: str | None = "bounty-agent.testnet",
        view_result: Any = None,
        view_error: Exception | None = None,
        call_result: Any = None,
        call_error: Exception | None = None,
        call_delay: float = 0.0,
    ) -> None:
        self._account = account
        self.view_result = view_result
        self.view_error = view_error
        self.call_result = call_result
        self.call_error = call_error
        self.call_delay = call_delay
        self.views: list[tuple[str, dict[str, Any]]] = []
        self.calls: list[tuple[str, dict[str, Any], int]] = []

    def account_id(self) -> str:
        if self._account is None:
            raise AgentNotInitializedError("shade agent not initialized")
        return self._account

    async def view(self, method_name: str, args: dict[str, Any]) -> Any:
        self.views.append((method_name, args))
        if self.view_error is not None:
            raise self.view_error
        return self.view_result

    async def call(self, method_name: str, args: dict[str, Any], *, gas: int) -> Any:
        self.calls.append((method_name, args, gas))
        if self.call_delay:
            await asyncio.sleep(self.call_delay)
        if self.call_error is not None:
            raise self.call_error
        return self.call_result


@pytest.fixture
def stub_agent() -> type[StubAgent]:
    return StubAgent


@pytest.fixture
def ledger() -> InMemoryPayoutLedger:
    return InMemoryPayoutLedger()


@pytest.fixture(autouse=True)
def _fresh_runtime() -> Iterator[None]:
    get_settings.cache_clear()
    configure_logging("DEBUG")
    yield
    get_settings.cache_clear()

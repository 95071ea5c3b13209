from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from bounty_agent.config import AppSettings
from bounty_agent.near.agent_client import AgentApiClient, AgentClientFactory, RemoteLedger
from bounty_agent.near.bounty_quote import BountyQuoteClient
from bounty_agent.observability.logging import get_logger
from bounty_agent.orchestration.executor import PayoutExecutor
from bounty_agent.store.payout_ledger import PayoutLedger


@asynccontextmanager
async def open_agent(settings: AppSettings) -> AsyncIterator[AgentApiClient]:
    agent = AgentClientFactory(settings).create()
    try:
        account_id = await agent.connect()
        get_logger("runtime").info(
            "agent_initialized",
            agent_account_id=account_id,
            network_id=settings.network_id,
        )
        yield agent
    finally:
        await agent.aclose()


def build_executor(
    settings: AppSettings,
    agent: RemoteLedger,
    ledger: PayoutLedger,
) -> PayoutExecutor:
    return PayoutExecutor(
        agent,
        ledger,
        BountyQuoteClient(agent),
        gas=settings.payout_gas,
        timeout_seconds=settings.payout_timeout_seconds,
    )

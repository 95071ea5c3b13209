from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from fastapi import FastAPI

from bounty_agent.config import AppSettings, get_settings
from bounty_agent.near.agent_client import (
    AgentClientFactory,
    AgentNotInitializedError,
    RemoteLedger,
)
from bounty_agent.near.bounty_quote import BountyQuoteClient
from bounty_agent.observability.logging import configure_logging, get_logger
from bounty_agent.runtime.container import build_executor
from bounty_agent.store.payout_ledger import PayoutLedger, build_payout_ledger

Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[None]]


def build_health_app(
    settings: AppSettings,
    *,
    agent: RemoteLedger,
    ledger: PayoutLedger,
    quotes: BountyQuoteClient,
    lifespan: Lifespan | None = None,
) -> FastAPI:
    app = FastAPI(title=f"{settings.agent_name}-health", version="0.1.0", lifespan=lifespan)

    @app.get("/livez")
    async def livez() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        try:
            account_id: str | None = agent.account_id()
        except AgentNotInitializedError:
            account_id = None
        return {
            "status": "ok" if account_id else "degraded",
            "agent": "registered" if account_id else "unregistered",
            "agentAccountId": account_id,
            "payouts": ledger.stats().as_dict(),
        }

    @app.get("/api/bounty/{owner}/{repo}")
    async def bounty(owner: str, repo: str) -> dict[str, str]:
        repo_id = f"{owner}/{repo}"
        return {"repo_id": repo_id, "amount": await quotes.get_bounty(repo_id)}

    return app


def create_app() -> FastAPI:
    """Composition root for the long-running agent process.

    Run with ``uvicorn bounty_agent.runtime.health_api:create_app --factory``.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    agent = AgentClientFactory(settings).create()
    ledger = build_payout_ledger(settings)
    quotes = BountyQuoteClient(agent)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        account_id = await agent.connect()
        get_logger("runtime").info(
            "agent_initialized",
            agent_account_id=account_id,
            network_id=settings.network_id,
        )
        try:
            yield
        finally:
            await agent.aclose()

    app = build_health_app(settings, agent=agent, ledger=ledger, quotes=quotes, lifespan=lifespan)
    app.state.executor = build_executor(settings, agent, ledger)
    app.state.ledger = ledger
    return app

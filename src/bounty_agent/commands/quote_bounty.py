from __future__ import annotations

import asyncio
from argparse import Namespace

from bounty_agent.config import AppSettings
from bounty_agent.near.agent_client import RemoteCallError
from bounty_agent.near.bounty_quote import BountyQuoteClient
from bounty_agent.runtime.container import open_agent
from bounty_agent.types import CommandResult, CommandStatus


async def _quote(settings: AppSettings, repo_id: str) -> str:
    async with open_agent(settings) as agent:
        return await BountyQuoteClient(agent).get_bounty(repo_id)


def run_quote_bounty(args: Namespace, settings: AppSettings) -> CommandResult:
    repo_id = str(getattr(args, "repo_id", "")).strip()
    if not repo_id:
        return CommandResult(
            command="quote-bounty",
            status=CommandStatus.FAILED,
            details={"error": "repo_id is required"},
        )

    try:
        amount = asyncio.run(_quote(settings, repo_id))
    except RemoteCallError as exc:
        return CommandResult(
            command="quote-bounty",
            status=CommandStatus.FAILED,
            details={"repo_id": repo_id, "error": str(exc)},
        )

    return CommandResult(
        command="quote-bounty",
        status=CommandStatus.EXECUTED,
        details={"repo_id": repo_id, "amount": amount},
    )

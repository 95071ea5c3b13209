from __future__ import annotations

from typing import Any

from bounty_agent.near.agent_client import RemoteLedger
from bounty_agent.near.units import from_yocto
from bounty_agent.observability.logging import get_logger

NO_BOUNTY = "0"


def _raw_yocto(result: Any) -> str:
    if isinstance(result, dict):
        result = result.get("amount")
    if result is None or result == "":
        return "0"
    return str(result)


class BountyQuoteClient:
    """Reads the bounty currently escrowed for a repository on the contract."""

    def __init__(self, agent: RemoteLedger) -> None:
        self._agent = agent

    async def get_bounty(self, repo_id: str) -> str:
        logger = get_logger("bounty_quote")
        try:
            result = await self._agent.view("get_bounty", {"repo_id": repo_id})
        except Exception as exc:
            logger.warning(
                "bounty_quote_unavailable",
                repo_id=repo_id,
                error=str(exc) or type(exc).__name__,
                substituted=NO_BOUNTY,
            )
            return NO_BOUNTY

        return from_yocto(_raw_yocto(result))

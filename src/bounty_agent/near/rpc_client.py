from __future__ import annotations

from enum import StrEnum
from typing import Any

import httpx

from bounty_agent.config import AppSettings
from bounty_agent.near.agent_client import RemoteCallError


class TransactionState(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_FOUND = "not_found"


def _state_from_status(status: Any) -> TransactionState:
    if isinstance(status, dict):
        if "Failure" in status:
            return TransactionState.FAILED
        if "SuccessValue" in status or "SuccessReceiptId" in status:
            return TransactionState.SUCCEEDED
    # NotStarted / Started: the chain has not finished executing it yet.
    return TransactionState.NOT_FOUND


class NearRpcClient:
    """Read-only NEAR JSON-RPC lookups used to settle ambiguous payouts."""

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    async def tx_status(self, tx_hash: str, sender_account_id: str) -> TransactionState:
        payload = {
            "jsonrpc": "2.0",
            "id": "bounty-agent",
            "method": "tx",
            "params": {
                "tx_hash": tx_hash,
                "sender_account_id": sender_account_id,
                "wait_until": "EXECUTED",
            },
        }
        try:
            response = await self._client.post(self._rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteCallError(f"tx status lookup failed: {exc}") from exc

        if not isinstance(body, dict):
            raise RemoteCallError("tx status lookup returned a malformed response")

        error = body.get("error")
        if error:
            cause = error.get("cause") if isinstance(error, dict) else None
            if isinstance(cause, dict) and cause.get("name") == "UNKNOWN_TRANSACTION":
                return TransactionState.NOT_FOUND
            message = error.get("message") if isinstance(error, dict) else None
            raise RemoteCallError(str(message or error))

        result = body.get("result")
        status = result.get("status") if isinstance(result, dict) else None
        return _state_from_status(status)

    async def aclose(self) -> None:
        await self._client.aclose()


class RpcClientFactory:
    """Thin factory for NearRpcClient to keep adapter construction deterministic."""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings

    def create(self, transport: httpx.AsyncBaseTransport | None = None) -> NearRpcClient:
        return NearRpcClient(
            self._settings.near_rpc_url,
            timeout_seconds=self._settings.agent_api_timeout_seconds,
            transport=transport,
        )

from __future__ import annotations

from typing import Any, Protocol

import httpx

from bounty_agent.config import AppSettings
from bounty_agent.types import JsonDict

# Extra HTTP read time on a payout call so the executor timeout fires first.
CALL_TIMEOUT_MARGIN_SECONDS = 5.0


class AgentNotInitializedError(RuntimeError):
    """Raised when the agent is used before its account has been resolved."""


class RemoteCallError(RuntimeError):
    """The remote ledger refused the request, or it was never delivered."""


class RemoteOutcomeUnknown(RuntimeError):
    """The request may have been delivered but no final answer was received."""


class RemoteLedger(Protocol):
    def account_id(self) -> str:
        ...

    async def view(self, method_name: str, args: JsonDict) -> Any:
        ...

    async def call(self, method_name: str, args: JsonDict, *, gas: int) -> Any:
        ...


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    text = response.text.strip()
    return text or f"agent api returned HTTP {response.status_code}"


class AgentApiClient:
    """Client for the shade agent API that signs and relays contract calls."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        call_timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._call_timeout = httpx.Timeout(
            call_timeout_seconds if call_timeout_seconds is not None else timeout_seconds,
            connect=timeout_seconds,
        )
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )
        self._account_id: str | None = None

    async def connect(self) -> str:
        try:
            response = await self._client.post("/api/agent/getAccountId", json={})
        except httpx.HTTPError as exc:
            raise RemoteCallError(f"agent api unreachable: {exc}") from exc
        if response.is_error:
            raise RemoteCallError(_error_message(response))

        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteCallError("agent api returned a non-JSON account response") from exc
        account_id = body.get("accountId") if isinstance(body, dict) else None
        if not isinstance(account_id, str) or not account_id:
            raise RemoteCallError("agent api did not return an accountId")

        self._account_id = account_id
        return account_id

    def account_id(self) -> str:
        if self._account_id is None:
            raise AgentNotInitializedError("shade agent not initialized")
        return self._account_id

    async def view(self, method_name: str, args: JsonDict) -> Any:
        self.account_id()
        try:
            response = await self._client.post(
                "/api/agent/view",
                json={"methodName": method_name, "args": args},
            )
        except httpx.HTTPError as exc:
            raise RemoteCallError(f"view {method_name} failed: {exc}") from exc
        if response.is_error:
            raise RemoteCallError(_error_message(response))
        return response.json()

    async def call(self, method_name: str, args: JsonDict, *, gas: int) -> Any:
        self.account_id()
        try:
            response = await self._client.post(
                "/api/agent/call",
                json={"methodName": method_name, "args": args, "gas": str(gas)},
                timeout=self._call_timeout,
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            raise RemoteCallError(f"agent api unreachable: {exc}") from exc
        except httpx.TransportError as exc:
            raise RemoteOutcomeUnknown(f"{method_name} outcome unknown: {exc}") from exc

        if response.status_code == httpx.codes.GATEWAY_TIMEOUT:
            raise RemoteOutcomeUnknown(_error_message(response))
        if response.is_error:
            raise RemoteCallError(_error_message(response))
        try:
            return response.json()
        except ValueError:
            return None

    async def aclose(self) -> None:
        await self._client.aclose()


class AgentClientFactory:
    """Builds the agent client from settings; the caller owns its lifecycle."""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings

    def create(self, transport: httpx.AsyncBaseTransport | None = None) -> AgentApiClient:
        return AgentApiClient(
            self._settings.agent_api_url,
            timeout_seconds=self._settings.agent_api_timeout_seconds,
            call_timeout_seconds=self._settings.payout_timeout_seconds + CALL_TIMEOUT_MARGIN_SECONDS,
            transport=transport,
        )

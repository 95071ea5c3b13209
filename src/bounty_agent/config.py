from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = "dev"
    log_level: str = "INFO"
    agent_name: str = "bounty-agent"

    network_id: str = "testnet"

    agent_api_url: str = "http://localhost:3140"
    agent_api_timeout_seconds: float = 30.0
    near_rpc_url: str = "https://rpc.testnet.near.org"

    payout_gas: int = 100_000_000_000_000
    payout_timeout_seconds: float = 60.0
    payout_ledger_path: str = ""


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REDACTED = "***REDACTED***"

SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "secret",
        "token",
        "private_key",
        "api_key",
        "password",
        "mnemonic",
        "seed_phrase",
    }
)

# NEAR serialized private keys, e.g. "ed25519:<base58>".
NEAR_KEY_PREFIXES: tuple[str, ...] = ("ed25519:", "secp256k1:")
_MIN_KEY_LENGTH = 64


def _is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    return any(sensitive in normalized for sensitive in SENSITIVE_KEYS)


def _looks_like_near_private_key(value: str) -> bool:
    return value.startswith(NEAR_KEY_PREFIXES) and len(value) >= _MIN_KEY_LENGTH


def redact_sensitive(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {
            key: REDACTED if _is_sensitive_key(str(key)) else redact_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive(item) for item in data]
    if isinstance(data, str) and _looks_like_near_private_key(data):
        return REDACTED
    return data

from bounty_agent.observability.redaction import redact_sensitive


def test_redact_private_key() -> None:
    """Sponsor keys never reach the log stream."""
    data = {"sponsor_private_key": "ed25519:5xyz", "sponsor_account_id": "sponsor.testnet"}
    result = redact_sensitive(data)
    assert result["sponsor_private_key"] == "***REDACTED***"
    assert result["sponsor_account_id"] == "sponsor.testnet"


def test_redact_webhook_secret() -> None:
    data = {"webhook_secret": "whsec_123", "repo_id": "acme/widgets"}
    result = redact_sensitive(data)
    assert result["webhook_secret"] == "***REDACTED***"
    assert result["repo_id"] == "acme/widgets"


def test_redact_token() -> None:
    data = {"github_token": "ghp_abc", "pr_number": 42}
    result = redact_sensitive(data)
    assert result["github_token"] == "***REDACTED***"
    assert result["pr_number"] == 42


def test_redact_seed_phrase() -> None:
    data = {"seed_phrase": "abandon abandon about", "contributor_wallet": "alice.near"}
    result = redact_sensitive(data)
    assert result["seed_phrase"] == "***REDACTED***"
    assert result["contributor_wallet"] == "alice.near"


def test_transaction_hash_is_not_redacted() -> None:
    data = {"transaction_hash": "9FtHUFBQsZ2MG77K3x3MJ9wjX3UT8zE1TczCrhZEcG8U"}
    assert redact_sensitive(data) == data


def test_redact_nested_sensitive() -> None:
    data = {"outer": {"inner_api_key": "secret123", "normal": "value"}}
    result = redact_sensitive(data)
    assert result["outer"]["inner_api_key"] == "***REDACTED***"
    assert result["outer"]["normal"] == "value"


def test_redact_list_of_sensitive() -> None:
    data = {"requests": [{"api_key": "secret1"}, {"api_key": "secret2"}]}
    result = redact_sensitive(data)
    assert result["requests"][0]["api_key"] == "***REDACTED***"
    assert result["requests"][1]["api_key"] == "***REDACTED***"


def test_redact_case_insensitive() -> None:
    data = {"API_KEY": "secret", "Private_Key": "secret", "TOKEN": "secret"}
    result = redact_sensitive(data)
    assert result["API_KEY"] == "***REDACTED***"
    assert result["Private_Key"] == "***REDACTED***"
    assert result["TOKEN"] == "***REDACTED***"


def test_redact_near_private_key_under_any_field() -> None:
    leaked = "ed25519:" + "3" * 88
    result = redact_sensitive({"error": leaked, "note": "ed25519:short"})
    assert result["error"] == "***REDACTED***"
    assert result["note"] == "ed25519:short"

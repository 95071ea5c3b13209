"""Command handlers for the bounty agent CLI."""

from bounty_agent.commands.convert_amount import run_convert_amount
from bounty_agent.commands.payout_stats import run_payout_stats
from bounty_agent.commands.quote_bounty import run_quote_bounty
from bounty_agent.commands.reconcile_payout import run_reconcile_payout
from bounty_agent.commands.release_bounty import run_release_bounty

__all__ = [
    "run_convert_amount",
    "run_payout_stats",
    "run_quote_bounty",
    "run_reconcile_payout",
    "run_release_bounty",
]

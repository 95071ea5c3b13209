"""Bounty payout agent for NEAR shade agents."""

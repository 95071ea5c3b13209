"""Conversion between NEAR amounts and their yoctoNEAR base units."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, localcontext

from bounty_agent.observability.logging import get_logger

YOCTO_PER_NEAR = 10**24
NEAR_DISPLAY_PLACES = 4

# Wide enough for any u128 yocto amount plus the 24 fractional digits.
_PRECISION = 80

_YOCTO_PATTERN = re.compile(r"-?[0-9]+")


def to_yocto(amount: str) -> str:
    """Convert a human-readable NEAR amount into an integer yocto string.

    Unparseable, non-finite or negative input converts to ``"0"`` so that a
    formatting problem never aborts a payout attempt; the remote contract
    rejects a zero transfer downstream.
    """
    raw = str(amount).strip()
    try:
        value = Decimal(raw)
    except InvalidOperation:
        get_logger("near_units").warning("near_amount_unparseable", amount=raw, substituted="0")
        return "0"

    if not value.is_finite() or value < 0:
        get_logger("near_units").warning("near_amount_out_of_range", amount=raw, substituted="0")
        return "0"

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return str(int(value * YOCTO_PER_NEAR))


def from_yocto(yocto: str | int) -> str:
    """Render a yocto amount as NEAR with fixed display precision."""
    raw = str(yocto).strip()
    if not _YOCTO_PATTERN.fullmatch(raw):
        get_logger("near_units").warning("yocto_amount_unparseable", yocto=raw, substituted="0")
        return "0"
    value = int(raw)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        near = Decimal(value) / Decimal(YOCTO_PER_NEAR)
        return f"{near:.{NEAR_DISPLAY_PLACES}f}"

from __future__ import annotations

from argparse import Namespace

from bounty_agent.config import AppSettings
from bounty_agent.near.units import from_yocto, to_yocto
from bounty_agent.types import CommandResult, CommandStatus


def run_convert_amount(args: Namespace, _: AppSettings) -> CommandResult:
    near_amount = getattr(args, "to_yocto", None)
    yocto_amount = getattr(args, "from_yocto", None)

    if near_amount is not None:
        return CommandResult(
            command="convert-amount",
            status=CommandStatus.EXECUTED,
            details={"near": str(near_amount), "yocto": to_yocto(str(near_amount))},
        )

    if yocto_amount is not None:
        return CommandResult(
            command="convert-amount",
            status=CommandStatus.EXECUTED,
            details={"yocto": str(yocto_amount), "near": from_yocto(str(yocto_amount))},
        )

    return CommandResult(
        command="convert-amount",
        status=CommandStatus.FAILED,
        details={"error": "one of --to-yocto or --from-yocto is required"},
    )

"""Application bootstrap.

Loads settings, configures logging, builds the gateway and identity
provider, and runs a session.  Rendering is left to the CLI.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from .core.config import Settings, load_settings
from .core.enums import Operation, Role
from .core.events import DomainEvent
from .core.models import InventoryItem, MutationRequest, MutationResult
from .gateway.identity import StaticIdentityProvider
from .gateway.paper import PaperLedgerGateway
from .observability.logger import setup_logging
from .session.context import SessionContext

logger = logging.getLogger(__name__)

_ALIASES: dict[str, Operation] = {op.ledger_method.lower(): op for op in Operation}
_ALIASES.update({op.value.replace("_", ""): op for op in Operation})
# setPaused needs its argument to pick a direction
_ALIASES.pop("setpaused", None)


@dataclass
class SessionReport:
    """What a finished paper session looked like."""

    account: str
    role: Role
    paused: bool
    permitted: list[Operation]
    results: list[MutationResult] = field(default_factory=list)
    items: list[InventoryItem] = field(default_factory=list)
    events: list[DomainEvent] = field(default_factory=list)
    sync_error: str = ""


def parse_operation(text: str) -> MutationRequest:
    """Parse ``"purchase 1 2"`` style text into a request.

    Accepts snake_case or ledger method names (``restock``,
    ``updatePrice``, ``update_price``).  ``setPaused true|false`` maps to
    pause/unpause.  Numeric arguments become ints.  The ``updateStaff``
    flag accepts ``add``/``remove`` or ``true``/``false``; nowhere else are
    words turned into bools.
    """
    tokens = text.split()
    if not tokens:
        raise ValueError("empty operation")
    name, raw_args = tokens[0], tokens[1:]

    key = name.replace("_", "").replace("-", "").lower()
    if key == "setpaused":
        flag = _flag(raw_args[0]) if len(raw_args) == 1 else None
        if flag is None:
            raise ValueError("setPaused takes one argument: true or false")
        return MutationRequest(operation=Operation.PAUSE if flag else Operation.UNPAUSE)

    op = _ALIASES.get(key)
    if op is None:
        raise ValueError(f"unknown operation {name!r}")

    args: list[Any] = [_coerce(a) for a in raw_args]
    # Only the staff flag is boolean; everywhere else "add" is just a word
    if op == Operation.UPDATE_STAFF and len(raw_args) == 2:
        flag = _flag(raw_args[1])
        if flag is None:
            raise ValueError("updateStaff flag must be add|remove or true|false")
        args[1] = flag
    return MutationRequest(operation=op, args=tuple(args))


def _flag(token: str) -> bool | None:
    low = token.lower()
    if low in ("true", "yes", "add"):
        return True
    if low in ("false", "no", "remove"):
        return False
    return None


def _coerce(token: str) -> Any:
    try:
        return int(token)
    except ValueError:
        return token


async def run_paper(
    settings: Settings,
    operations: list[MutationRequest],
    gateway: PaperLedgerGateway | None = None,
) -> SessionReport:
    """Open a session on a paper ledger, run *operations* in order, report."""
    gateway = gateway or PaperLedgerGateway.from_config(settings.paper)
    identity = StaticIdentityProvider(settings.account)

    async with SessionContext(
        gateway, identity, event_log_capacity=settings.event_log.capacity,
    ) as session:
        results: list[MutationResult] = []
        for request in operations:
            result = await session.dispatcher.dispatch(request)
            results.append(result)
            if not result.success:
                logger.warning("%s", result.notification)
        # Let listeners pick up what the last transactions emitted
        await asyncio.sleep(0)
        await session.aggregator.flush()

        report = SessionReport(
            account=session.account,
            role=session.role,
            paused=session.paused,
            permitted=sorted(session.permitted_operations(), key=lambda o: o.value),
            results=results,
            items=session.mirror.items(),
            sync_error=session.last_sync_error,
        )
    report.events = session.event_log.entries()
    return report


async def run(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
    operations: list[str] | None = None,
) -> SessionReport:
    """Main entry point. Load config, set up logging, run a paper session."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    requests = [parse_operation(text) for text in operations or []]
    logger.info("Starting paper session for %s", settings.account or "<no account>")
    return await run_paper(settings, requests)

"""CLI entry point for the inventory client."""

from __future__ import annotations

import click


@click.group()
def main() -> None:
    """Ledger-backed inventory client."""


@main.command()
def permissions() -> None:
    """Print which operations each role may attempt."""
    from .session.capabilities import CAPABILITY_TABLE

    for (role, paused), ops in CAPABILITY_TABLE.items():
        names = ", ".join(sorted(op.value for op in ops)) or "(none)"
        state = "paused" if paused else "active"
        click.echo(f"{role.value:<7} {state:<7} {names}")


@main.command()
@click.option("--config", default="configs/paper.toml", help="Config file path")
@click.option("--account", default=None, help="Active account address override")
@click.option(
    "--op", "ops", multiple=True,
    help='Operation to dispatch, e.g. "purchase 1 2". Repeatable.',
)
@click.option("--log-level", default=None, help="Log level override")
def paper(config: str, account: str | None, ops: tuple[str, ...], log_level: str | None) -> None:
    """Run a session against an in-memory paper ledger."""
    import asyncio

    from .core.errors import InventoryClientError
    from .main import run

    overrides: dict = {}
    if account:
        overrides["account"] = account
    if log_level:
        overrides["observability"] = {"log_level": log_level, "log_format": "console"}

    try:
        report = asyncio.run(run(config_path=config, overrides=overrides, operations=list(ops)))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--op") from exc
    except InventoryClientError as exc:
        raise click.ClickException(f"Session failed: {exc}") from exc

    role_label = report.role.value + (" (paused)" if report.paused else "")
    click.echo(f"Account: {report.account}")
    click.echo(f"Role:    {role_label}")
    click.echo("Allowed: " + (", ".join(op.value for op in report.permitted) or "(none)"))

    for result in report.results:
        mark = "ok  " if result.success else "FAIL"
        click.echo(f"[{mark}] {result.notification}")

    if report.sync_error:
        click.echo(f"Inventory out of date: {report.sync_error}")
    click.echo("")
    click.echo(f"{'ID':>4}  {'Name':<20} {'Stock':>6} {'Price (wei)':>12} {'Threshold':>9}")
    for item in report.items:
        flag = " LOW" if item.is_low_stock else ""
        click.echo(
            f"{item.id:>4}  {item.name:<20} {item.stock:>6} "
            f"{item.price:>12} {item.threshold:>9}{flag}"
        )

    if report.events:
        click.echo("")
        click.echo("Event log:")
        for event in report.events:
            stamp = event.received_at.strftime("%Y-%m-%d %H:%M:%S")
            click.echo(f"  {stamp}  {event.kind.value:<16} {event.message}")


if __name__ == "__main__":
    main()

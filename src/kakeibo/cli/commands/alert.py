"""Alert commands."""

import click

from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.alert import AlertService
from kakeibo.domain.entities import AlertLevel, AlertStatus
from kakeibo.domain.errors import DomainError


@click.group()
def alert_group():
    """Review and resolve alerts."""
    pass


@alert_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in AlertStatus], case_sensitive=False),
    help="Only alerts with this status",
)
@click.option(
    "--min-level",
    type=click.Choice([lvl.value for lvl in AlertLevel], case_sensitive=False),
    help="Only alerts at or above this level",
)
@click.pass_context
def list_alerts(ctx, status: str | None, min_level: str | None):
    """List alerts, most severe first."""
    service = AlertService(ctx.obj["db"])
    alerts = service.list_alerts(
        status=AlertStatus(status.upper()) if status else None,
        min_level=AlertLevel(min_level.upper()) if min_level else None,
    )
    if not alerts:
        click.echo("No alerts found.")
        return

    for alert in alerts:
        click.echo(
            f"[{alert.level.value:8s}] {alert.status.value:8s} {alert.id} | "
            f"{alert.type.value} | {alert.title}"
        )
        primary = alert.primary_action
        if primary is not None:
            click.echo(f"    -> {primary.label} ({primary.action.value})")


@alert_group.command("show")
@click.argument("alert_id")
@click.pass_context
def show_alert(ctx, alert_id: str):
    """Show an alert with its details and actions."""
    service = AlertService(ctx.obj["db"])
    try:
        alert = service.get(alert_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"{alert.title} [{alert.level.value}, {alert.status.value}]")
    click.echo(alert.message)
    details = alert.details
    if details.card_id:
        click.echo(f"  Card: {details.card_name} ({details.card_id}) {details.billing_month}")
    if details.related_transaction_ids:
        ids = ", ".join(str(i) for i in details.related_transaction_ids)
        click.echo(f"  Related transactions: {ids}")
    for action in alert.actions:
        marker = "*" if action.is_primary else " "
        click.echo(f"  {marker} {action.label} ({action.action.value})")


@alert_group.command("read")
@click.argument("alert_id")
@click.pass_context
def read_alert(ctx, alert_id: str):
    """Mark an alert as read."""
    service = AlertService(ctx.obj["db"])
    try:
        alert = service.mark_read(alert_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Alert {alert.id} is {alert.status.value}")


@alert_group.command("resolve")
@click.argument("alert_id")
@click.option("--by", "resolved_by", help="Who resolved the alert")
@click.option("--note", help="Resolution note")
@click.pass_context
def resolve_alert(ctx, alert_id: str, resolved_by: str | None, note: str | None):
    """Resolve an alert."""
    service = AlertService(ctx.obj["db"])
    try:
        alert = service.resolve(alert_id, resolved_by=resolved_by, note=note)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Alert {alert.id} resolved")


def register_commands(cli):
    """Register alert commands with main CLI."""
    cli.add_command(alert_group, name="alert")

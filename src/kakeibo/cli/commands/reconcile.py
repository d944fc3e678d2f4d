"""Card payment reconciliation command."""

import json

import click

from kakeibo.cli.account_resolution import resolve_account_or_exit
from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.account import AccountService
from kakeibo.domain.errors import DomainError
from kakeibo.domain.reconciliation import ReconciliationService
from kakeibo.utils.amount_parser import format_yen
from kakeibo.utils.date_parser import parse_billing_month, parse_date


@click.command("reconcile")
@click.argument("card_id")
@click.argument("month", metavar="YYYY-MM")
@click.option("--account", required=True, help="Bank account (name or ID) paying the card")
@click.option("--as-of", "as_of", help="Reference date for due-date checks (default: today)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def reconcile(ctx, card_id: str, month: str, account: str, as_of: str | None, as_json: bool):
    """Find the bank withdrawal that paid a card bill.

    Updates the bill's payment status and stores an alert when the payment
    is missing, differs from the billed amount, or is ambiguous.

    Examples:
        kakeibo reconcile smbc-gold 2025-01 --account 1
        kakeibo reconcile smbc-gold 2025-01 --account 給与口座 --as-of 2025-02-10
    """
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = ReconciliationService(db, config.reconciliation, config.alert)

    try:
        reference = parse_date(as_of) if as_of else None
        result, alert = service.reconcile(
            card_id, parse_billing_month(month), account_id, as_of=reference
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        data = result.to_dict()
        data["alertId"] = alert.id if alert else None
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    summary = result.summary
    click.echo(f"{summary.card_name} {summary.billing_month}: {format_yen(summary.net_payment_amount)}")
    if result.matched and result.transaction is not None:
        txn = result.transaction
        click.echo(
            f"  Matched transaction {txn.id} on {txn.date} ({format_yen(txn.amount)}), "
            f"confidence {result.confidence}"
        )
    elif result.matched:
        click.echo("  Nothing to pay after discounts")
    else:
        click.echo(f"  Not matched (best confidence {result.confidence})")
    if result.discrepancy is not None:
        click.echo(f"  {result.discrepancy.reason.value}: {result.discrepancy.message}")
    click.echo(f"  Payment status: {summary.status.value}")
    if alert is not None:
        click.echo(f"  Alert [{alert.level.value}] {alert.title} (ID: {alert.id})")


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile)

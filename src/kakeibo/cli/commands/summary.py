"""Monthly card summary commands."""

import click

from kakeibo.cli.account_resolution import resolve_account_or_exit
from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.account import AccountService
from kakeibo.domain.billing_period import closing_date_for, payment_date_for
from kakeibo.domain.entities import Discount, MonthlyCardSummary
from kakeibo.domain.errors import DomainError, InvalidInputError
from kakeibo.domain.reconciliation import ReconciliationService
from kakeibo.utils.amount_parser import format_yen, parse_amount
from kakeibo.utils.date_parser import parse_billing_month, parse_date


def parse_discount(value: str) -> Discount:
    """Parse 'DESCRIPTION=AMOUNT' into a Discount."""
    description, sep, amount = value.rpartition("=")
    if not sep or not description.strip():
        raise ValueError(f"Discount must look like DESCRIPTION=AMOUNT, got '{value}'")
    return Discount(description=description.strip(), amount=parse_amount(amount))


@click.group()
def summary_group():
    """Manage monthly credit card summaries."""
    pass


@summary_group.command("add")
@click.argument("card_id")
@click.argument("month", metavar="YYYY-MM")
@click.option("--card-name", required=True, help="Card name as printed by the issuer")
@click.option("--closing-date", help="Statement closing date")
@click.option(
    "--closing-day",
    type=click.IntRange(0, 31),
    help="Monthly closing day (0 or 31 for month end)",
)
@click.option("--due-date", help="Payment due (withdrawal) date")
@click.option(
    "--payment-day",
    type=click.IntRange(1, 31),
    help="Payment day in the month after closing",
)
@click.option("--total", help="Total billed amount in yen")
@click.option(
    "--from-account",
    help="Card account (name or ID) whose transactions make up the bill",
)
@click.option(
    "--discount",
    "discounts",
    multiple=True,
    help="Discount as DESCRIPTION=AMOUNT (repeatable)",
)
@click.pass_context
def add_summary(
    ctx,
    card_id: str,
    month: str,
    card_name: str,
    closing_date: str | None,
    closing_day: int | None,
    due_date: str | None,
    payment_day: int | None,
    total: str | None,
    from_account: str | None,
    discounts: tuple[str, ...],
):
    """Register a monthly card summary.

    Give the closing and due dates directly, or the card's closing and
    payment days. With --from-account the total is the sum of the card
    account's transactions billed in the month.

    Examples:
        kakeibo summary add smbc-gold 2025-01 --card-name "三井住友カード" \\
            --closing-date 2024-12-15 --due-date 2025-01-27 --total 125000
        kakeibo summary add rakuten 2025-01 --card-name "楽天カード" \\
            --closing-date 2024-12-31 --due-date 2025-01-27 --total 50000 --discount "ポイント=500"
        kakeibo summary add rakuten 2025-02 --card-name "楽天カード" \\
            --closing-day 0 --payment-day 27 --from-account "楽天カード"
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db, ctx.obj["config"].reconciliation)
    card_account_id = None
    if from_account is not None:
        card_account_id = resolve_account_or_exit(ctx, AccountService(db), from_account)

    try:
        billing_month = parse_billing_month(month)
        parsed_discounts = tuple(parse_discount(d) for d in discounts)
        if card_account_id is not None:
            if total is not None:
                raise InvalidInputError("Use either --total or --from-account, not both")
            if closing_day is None or payment_day is None:
                raise InvalidInputError("--from-account needs --closing-day and --payment-day")
            summary = service.aggregate_summary(
                card_id,
                card_name,
                billing_month,
                closing_day,
                payment_day,
                card_account_id,
                parsed_discounts,
            )
        else:
            if total is None:
                raise InvalidInputError("Either --total or --from-account is required")
            if closing_date is not None:
                closing = parse_date(closing_date)
            elif closing_day is not None:
                closing = closing_date_for(billing_month, closing_day)
            else:
                raise InvalidInputError("Either --closing-date or --closing-day is required")
            if due_date is not None:
                due = parse_date(due_date)
            elif payment_day is not None:
                due = payment_date_for(closing, payment_day)
            else:
                raise InvalidInputError("Either --due-date or --payment-day is required")
            summary = MonthlyCardSummary(
                card_id=card_id,
                card_name=card_name,
                billing_month=billing_month,
                closing_date=closing,
                payment_due_date=due,
                total_amount=parse_amount(total),
                discounts=parsed_discounts,
            )
        summary_id = service.add_summary(summary)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created summary {summary_id} for '{card_id}' {summary.billing_month}")
    if summary.transactions:
        click.echo(
            f"  Line items: {len(summary.transactions)} (total {format_yen(summary.total_amount)})"
        )
    click.echo(f"  Net payment: {format_yen(summary.net_payment_amount)}")
    click.echo(f"  Due: {summary.payment_due_date}")


@summary_group.command("list")
@click.option("--card", "card_id", help="Only this card")
@click.pass_context
def list_summaries(ctx, card_id: str | None):
    """List monthly card summaries."""
    service = ReconciliationService(ctx.obj["db"], ctx.obj["config"].reconciliation)

    summaries = service.list_summaries(card_id)
    if not summaries:
        click.echo("No card summaries found.")
        return

    click.echo("\nCard summaries:")
    click.echo("-" * 72)
    for s in summaries:
        click.echo(
            f"{s.card_id:12s} | {s.billing_month} | {s.card_name:16s} | "
            f"{format_yen(s.net_payment_amount):>12s} | due {s.payment_due_date} | {s.status.value}"
        )


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")

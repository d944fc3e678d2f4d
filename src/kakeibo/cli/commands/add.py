"""Add transaction command."""

import click

from kakeibo.cli.account_resolution import resolve_account_or_exit
from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.account import AccountService
from kakeibo.domain.entities import CategoryType
from kakeibo.domain.errors import DomainError
from kakeibo.domain.transaction import TransactionService
from kakeibo.utils.amount_parser import format_yen, parse_amount
from kakeibo.utils.date_parser import parse_date

CATEGORY_CHOICE = click.Choice([c.value for c in CategoryType], case_sensitive=False)


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Signed amount in yen (e.g., -1500 or ¥300,000)")
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", required=True, type=CATEGORY_CHOICE, help="Main category")
@click.pass_context
def add_transaction(ctx, account: str, date: str, amount: str, description: str, category: str):
    """Add a transaction manually.

    Examples:
        kakeibo add --account 1 --date 2025-01-15 --amount -1500 --description "スターバックス" --category EXPENSE
        kakeibo add --account 給与口座 --date today --amount 300000 --description "給与振込" --category INCOME
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
        return

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
        return

    try:
        transaction_id = transaction_service.create_transaction(
            account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            main_category=CategoryType(category.upper()),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {format_yen(txn_amount)}")
    click.echo(f"  Description: {description}")
    click.echo(f"  Category: {category.upper()}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)

"""Subcategory classification commands."""

import json

import click

from kakeibo.cli.account_resolution import resolve_account_or_exit
from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.account import AccountService
from kakeibo.domain.classification import ClassificationService
from kakeibo.domain.entities import CategoryType, ClassificationResult
from kakeibo.domain.errors import DomainError
from kakeibo.domain.master_data import MasterDataService
from kakeibo.utils.amount_parser import format_yen, parse_amount
from kakeibo.utils.date_parser import parse_date

CATEGORY_CHOICE = click.Choice([c.value for c in CategoryType], case_sensitive=False)


def _service(ctx) -> ClassificationService:
    config = ctx.obj["config"]
    return ClassificationService(ctx.obj["db"], config.classification, config.alert)


def format_result(result: ClassificationResult) -> str:
    merchant = f" | Merchant: {result.merchant_name}" if result.merchant_name else ""
    return (
        f"{result.subcategory_id} | {result.reason.value} | "
        f"confidence {result.confidence:.2f}{merchant}"
    )


@click.command("classify")
@click.argument("description")
@click.option("--amount", required=True, help="Signed amount in yen (e.g., -1500)")
@click.option("--category", required=True, type=CATEGORY_CHOICE, help="Main category")
@click.option("--date", "date_str", help="Transaction date (enables recurrence detection)")
@click.option("--account", help="Account name or ID whose history is used")
@click.pass_context
def classify(ctx, description: str, amount: str, category: str, date_str: str | None, account: str | None):
    """Classify a description without storing anything.

    Examples:
        kakeibo classify "スターバックス コーヒー" --amount -1500 --category EXPENSE
        kakeibo classify "給与振込" --amount 300000 --category INCOME
    """
    service = _service(ctx)
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account)

    try:
        txn_amount = parse_amount(amount)
        txn_date = parse_date(date_str) if date_str else None
        result = service.classify(
            description,
            txn_amount,
            CategoryType(category.upper()),
            transaction_date=txn_date,
            account_id=account_id,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(format_result(result))


@click.command("classify-account")
@click.argument("account", metavar="ACCOUNT")
@click.option("--apply", is_flag=True, help="Store results on the transactions")
@click.option(
    "--min-confidence",
    type=click.FloatRange(0.0, 1.0),
    default=0.0,
    show_default=True,
    help="Only store results at or above this confidence",
)
@click.option("--alerts", is_flag=True, help="Raise alerts for low-confidence results")
@click.pass_context
def classify_account(ctx, account: str, apply: bool, min_confidence: float, alerts: bool):
    """Classify the unconfirmed transactions of an account.

    Manually confirmed transactions are never touched.

    Examples:
        kakeibo classify-account 1
        kakeibo classify-account 1 --apply --min-confidence 0.7
    """
    account_id = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account)
    service = _service(ctx)

    try:
        outcomes = service.classify_account(
            account_id, apply=apply, min_confidence=min_confidence, raise_alerts=alerts
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not outcomes:
        click.echo("No unconfirmed transactions found.")
        return

    applied = 0
    for txn, result in outcomes:
        marker = ""
        if apply and result.confidence >= min_confidence:
            marker = " *"
            applied += 1
        click.echo(
            f"{txn.id:5d} | {txn.date} | {format_yen(txn.amount):>12s} | "
            f"{txn.description[:24]:24s} | {format_result(result)}{marker}"
        )
    if apply:
        click.echo(f"\nApplied {applied} of {len(outcomes)} classifications.")


@click.command("classify-batch")
@click.argument("request_file", type=click.File("r", encoding="utf-8"))
@click.pass_context
def classify_batch(ctx, request_file):
    """Classify a batch request file and print the response as JSON.

    REQUEST_FILE holds {"transactions": [{"transactionId", "description",
    "amount", "mainCategory", "date"}, ...]}; use - for stdin.
    """
    try:
        payload = json.load(request_file)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON: {e}", err=True)
        ctx.exit(1)
        return

    try:
        response = _service(ctx).classify_batch(payload)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(json.dumps(response.to_dict(), ensure_ascii=False, indent=2))


@click.command("confirm")
@click.argument("transaction_id", type=int)
@click.argument("subcategory_id")
@click.pass_context
def confirm(ctx, transaction_id: int, subcategory_id: str):
    """Manually set the subcategory of a transaction.

    Confirmed transactions are skipped by automatic classification.

    Examples:
        kakeibo confirm 12 food_cafe
    """
    try:
        txn = _service(ctx).confirm(transaction_id, subcategory_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Transaction {txn.id} confirmed as '{txn.subcategory_id}'")


@click.command("subcategories")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this main category")
@click.pass_context
def list_subcategories(ctx, category: str | None):
    """List subcategories in tree format."""
    service = MasterDataService(ctx.obj["db"])
    category_type = CategoryType(category.upper()) if category else None

    tree = service.subcategory_tree(category_type)
    if not tree:
        click.echo("No subcategories found. Run 'init-master' to create default data.")
        return

    current = None
    for node in tree:
        sub = node.subcategory
        if sub.category_type != current:
            current = sub.category_type
            click.echo(f"\n{current.value}:")
        default = " [default]" if sub.is_default else ""
        click.echo(f"  {sub.name} (ID: {sub.id}){default}")
        for child in node.children:
            click.echo(f"    {child.subcategory.name} (ID: {child.subcategory.id})")


def register_commands(cli):
    """Register classification commands with main CLI."""
    cli.add_command(classify)
    cli.add_command(classify_account)
    cli.add_command(classify_batch)
    cli.add_command(confirm)
    cli.add_command(list_subcategories)

"""Account management commands."""

import click

from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.account import AccountService
from kakeibo.domain.errors import DomainError


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--institution", help="Bank or card issuer (defaults to account name)")
@click.pass_context
def create_account(ctx, name: str, institution: str | None):
    """Create a new account.

    Examples:
        kakeibo account create "三菱UFJ普通"
        kakeibo account create "給与口座" --institution "みずほ銀行"
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    institution_name = institution if institution is not None else name

    try:
        account_id = service.create_account(name=name, institution=institution_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Institution: {acc.institution}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")

"""Account management commands."""

from decimal import Decimal

import click
from myfinance.domain.account import AccountService
from myfinance.domain.entities import ACCOUNT_TYPES
from myfinance.domain.exchange import SUPPORTED_CURRENCIES
from myfinance.domain.requests import CreateAccountRequest, UpdateAccountRequest
from myfinance.utils.amount_parser import format_amount, parse_amount
from myfinance.utils.date_parser import parse_date
from myfinance.cli.account_resolution import resolve_account_or_exit
from myfinance.cli.error_handling import handle_domain_error, require_user


def _parse_initial(ctx, initial: str | None) -> Decimal:
    if initial is None:
        return Decimal("0")
    try:
        return parse_amount(initial)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _parse_optional_date(ctx, value: str | None):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--currency",
    type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False),
    default="BRL",
    help="Account currency (default: BRL)",
)
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="expense", help="Account type")
@click.option("--color", default="", help="Display color (e.g. #3B82F6)")
@click.option("--initial", help="Opening balance (e.g. 100.00)")
@click.option("--date", "opening_date", default="today", help="Opening balance date (default: today)")
@click.pass_context
def create_account(
    ctx,
    name: str,
    currency: str,
    account_type: str,
    color: str,
    initial: str | None,
    opening_date: str,
):
    """Create a new account with an opening balance.

    Examples:
        myfinance account create "Nubank" --initial 1500.00
        myfinance account create "Wise USD" --currency USD --type income
    """
    user_id = require_user(ctx)
    service = AccountService(ctx.obj["db"])

    initial_value = _parse_initial(ctx, initial)
    when = _parse_optional_date(ctx, opening_date)

    try:
        account = service.create_account(
            user_id,
            CreateAccountRequest(
                name=name,
                currency=currency,
                type=account_type,
                color=color,
                initial_value=initial_value,
                due_date=when,
                competence_date=when,
            ),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{account.name}' ({account.currency}) (ID: {account.id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    user_id = require_user(ctx)
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(user_id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(f"{acc.id} | {acc.name:20s} | {acc.currency} | {acc.type}{status}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--currency", type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False), help="New currency")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--color", help="New display color")
@click.option("--active/--inactive", "is_active", default=None, help="Activate or deactivate")
@click.option("--initial", help="New opening balance (requires --date)")
@click.option("--date", "opening_date", help="Opening balance date")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    currency: str | None,
    account_type: str | None,
    color: str | None,
    is_active: bool | None,
    initial: str | None,
    opening_date: str | None,
) -> None:
    """Update an account.

    ACCOUNT can be an account name or ID. Passing --date rewrites the
    opening balance (creating it when missing) with the --initial value.

    Examples:
        myfinance account update "Nubank" --name "Nubank Conta"
        myfinance account update "Nubank" --initial 2000.00 --date 2024-01-01
    """
    user_id = require_user(ctx)
    service = AccountService(ctx.obj["db"])
    account_obj = resolve_account_or_exit(ctx, service, user_id, account)

    if initial is not None and opening_date is None:
        click.echo("Error: --initial requires --date", err=True)
        ctx.exit(1)
    when = _parse_optional_date(ctx, opening_date)

    try:
        updated = service.update_account(
            account_obj.id,
            user_id,
            UpdateAccountRequest(
                name=name,
                currency=currency,
                type=account_type,
                color=color,
                is_active=is_active,
                initial_value=_parse_initial(ctx, initial),
                due_date=when,
                competence_date=when,
            ),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account '{updated.name}'")
    if when is not None:
        balance = service.get_opening_balance(updated.id, user_id)
        if balance is not None:
            click.echo(f"Opening balance: {format_amount(balance.amount, updated.currency)} on {balance.due_date}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if it has no live transactions.

    Examples:
        myfinance account delete "Nubank"
    """
    user_id = require_user(ctx)
    service = AccountService(ctx.obj["db"])
    account_obj = resolve_account_or_exit(ctx, service, user_id, account)

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete account '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_obj.id, user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")

"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from myfinance.domain.account import AccountService
from myfinance.domain.entities import Account


def resolve_account(account_service: AccountService, user_id: str, account: str) -> Account:
    """Resolve an account name or ID to an account.

    Raises:
        ValueError: If no account matches, or the name is ambiguous
    """
    accounts = account_service.list_accounts(user_id)
    for acc in accounts:
        if acc.id == account:
            return acc

    matches = [acc for acc in accounts if acc.name.lower() == account.strip().lower()]
    if not matches:
        raise ValueError(f"Account '{account}' not found")
    if len(matches) > 1:
        raise ValueError(f"Account name '{account}' is ambiguous; use the account ID")
    return matches[0]


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, user_id: str, account: str
) -> Account:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, user_id, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)

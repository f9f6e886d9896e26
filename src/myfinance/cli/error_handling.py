"""CLI error handling helpers."""

import click

from myfinance.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_user(ctx: click.Context) -> str:
    """Return the acting user ID, or exit when none was given."""
    user_id = ctx.obj.get("user_id")
    if not user_id:
        click.echo("Error: No user selected. Pass --user or set MYFINANCE_USER_ID.", err=True)
        ctx.exit(1)
    return user_id

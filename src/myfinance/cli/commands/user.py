"""User management commands."""

import click
from myfinance.domain.user import UserService
from myfinance.cli.error_handling import handle_domain_error, require_user


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("register")
@click.argument("name")
@click.argument("email")
@click.password_option(help="Password (at least 8 characters)")
@click.pass_context
def register_user(ctx, name: str, email: str, password: str):
    """Register a user and create their default categories.

    Examples:
        myfinance user register "Ana" ana@example.com
    """
    service = UserService(ctx.obj["db"])

    try:
        user = service.register(name=name, email=email, password=password)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Registered user '{user.name}' (ID: {user.id})")
    click.echo(f"Set MYFINANCE_USER_ID={user.id} or pass --user to act as this user.")


@user_group.command("login")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, help="Password")
@click.pass_context
def login(ctx, email: str, password: str):
    """Check credentials and print the user ID."""
    service = UserService(ctx.obj["db"])

    user = service.authenticate(email, password)
    if user is None:
        click.echo("Error: Invalid email or password", err=True)
        ctx.exit(1)
    click.echo(user.id)


@user_group.command("show")
@click.pass_context
def show_user(ctx):
    """Show the current user."""
    user_id = require_user(ctx)
    service = UserService(ctx.obj["db"])

    try:
        user = service.get_user(user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{user.name} <{user.email}> (ID: {user.id})")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")

"""Exchange rate commands."""

import click
from myfinance.domain.exchange import CurrencyConverter, SUPPORTED_CURRENCIES, create_rate_source
from myfinance.cli.error_handling import handle_domain_error


@click.group()
def exchange_group():
    """Look up exchange rates."""
    pass


@exchange_group.command("rate")
@click.argument("from_currency", type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False))
@click.argument("to_currency", type=click.Choice(SUPPORTED_CURRENCIES, case_sensitive=False))
@click.option("--amount", type=float, default=1.0, help="Amount to convert (default: 1)")
@click.pass_context
def rate(ctx, from_currency: str, to_currency: str, amount: float):
    """Show the conversion rate between two currencies.

    Uses the live ExchangeRate-API when EXCHANGE_API_KEY is set, otherwise
    a fixed rate table.
    """
    converter = CurrencyConverter(create_rate_source())
    try:
        conversion = converter.convert(from_currency, to_currency, amount)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"{amount:.2f} {from_currency.upper()} = {conversion.converted_amount:.2f} {to_currency.upper()} "
        f"(rate {conversion.rate:.4f})"
    )


def register_commands(cli):
    """Register exchange commands with main CLI."""
    cli.add_command(exchange_group, name="exchange")

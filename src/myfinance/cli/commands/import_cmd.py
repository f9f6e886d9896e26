"""OFX import command."""

from pathlib import Path

import click
from myfinance.domain.account import AccountService
from myfinance.domain.ofx_import import OFXImportService
from myfinance.utils.amount_parser import format_amount, to_minor_units
from myfinance.cli.account_resolution import resolve_account_or_exit
from myfinance.cli.error_handling import handle_domain_error, require_user


@click.command("import-ofx")
@click.argument("ofx_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID to import into")
@click.option("--preview", is_flag=True, help="Only show the transactions found in the file")
@click.pass_context
def import_ofx(ctx, ofx_file: str, account: str, preview: bool):
    """Import transactions from an OFX bank statement."""
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    service = OFXImportService(db)
    account_obj = resolve_account_or_exit(ctx, AccountService(db), user_id, account)
    content = Path(ofx_file).read_bytes()

    if preview:
        records = service.preview(content)
        click.echo(f"Found {len(records)} transaction(s):")
        for record in records:
            amount = format_amount(abs(to_minor_units(record.amount)), account_obj.currency)
            click.echo(f"  {record.posted} {record.type:<8} {amount:>14}  {record.description}")
        return

    try:
        result = service.import_ofx(user_id, account_obj.id, content)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"\nImport complete:")
    click.echo(f"  Imported: {result['imported']} transactions")
    click.echo(f"  Skipped: {result['skipped']} transactions")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_ofx)

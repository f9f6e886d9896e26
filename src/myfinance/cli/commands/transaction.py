"""Transaction management commands."""

import click
from myfinance.domain.account import AccountService
from myfinance.domain.category import CategoryService
from myfinance.domain.entities import Transaction, TRANSACTION_TYPES
from myfinance.domain.exchange import CurrencyConverter, create_rate_source
from myfinance.domain.requests import TransferRequest
from myfinance.domain.transaction import TransactionService
from myfinance.utils.amount_parser import format_amount, parse_amount, to_minor_units
from myfinance.utils.date_parser import parse_date
from myfinance.cli.account_resolution import resolve_account_or_exit
from myfinance.cli.commands.category import resolve_category_or_exit
from myfinance.cli.error_handling import handle_domain_error, require_user


def _minor_units_or_exit(ctx, amount: str) -> int:
    try:
        return to_minor_units(parse_amount(amount))
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _date_or_exit(ctx, value: str, label: str = "date"):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _transaction_service(ctx) -> TransactionService:
    return TransactionService(ctx.obj["db"], CurrencyConverter(create_rate_source()))


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES), required=True, help="income or expense")
@click.option("--amount", required=True, help="Amount in major units (e.g., 123.45)")
@click.option("--category", required=True, help="Category name or ID")
@click.option("--description", default="", help="Transaction description")
@click.option("--date", "due_date", default="today", help="Due date (default: today)")
@click.option("--competence-date", help="Competence date (defaults to the due date)")
@click.option("--paid", is_flag=True, help="Mark as paid")
@click.option("--observation", default="", help="Free-form note")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    transaction_type: str,
    amount: str,
    category: str,
    description: str,
    due_date: str,
    competence_date: str | None,
    paid: bool,
    observation: str,
):
    """Add an income or expense transaction.

    Examples:
        myfinance transaction add --account Nubank --type expense --amount 42.90 --category Mercado
    """
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    account_obj = resolve_account_or_exit(ctx, AccountService(db), user_id, account)
    category_obj = resolve_category_or_exit(ctx, CategoryService(db), user_id, category, transaction_type)

    payload = {
        "type": transaction_type,
        "amount": _minor_units_or_exit(ctx, amount),
        "account_id": account_obj.id,
        "category_id": category_obj.id,
        "description": description,
        "due_date": due_date,
        "competence_date": competence_date or due_date,
        "is_paid": paid,
        "observation": observation,
    }
    try:
        txn = _transaction_service(ctx).submit_transaction(user_id, payload)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created transaction {txn.id}")


@transaction_group.command("transfer")
@click.option("--from", "source", required=True, help="Source account name or ID")
@click.option("--to", "destination", required=True, help="Destination account name or ID")
@click.option("--amount", required=True, help="Amount in the source currency (e.g., 100.00)")
@click.option("--description", default="Transferência", help="Description for both sides")
@click.option("--date", "due_date", default="today", help="Due date (default: today)")
@click.option("--competence-date", help="Competence date (defaults to the due date)")
@click.option("--paid/--unpaid", default=True, help="Mark both sides as paid (default: paid)")
@click.option("--observation", default="", help="Free-form note")
@click.option("--rate", type=float, help="Manual exchange rate, skipping the rate lookup")
@click.pass_context
def transfer(
    ctx,
    source: str,
    destination: str,
    amount: str,
    description: str,
    due_date: str,
    competence_date: str | None,
    paid: bool,
    observation: str,
    rate: float | None,
):
    """Transfer money between two accounts.

    Accounts in different currencies are converted with the configured
    rate source, or with --rate.

    Examples:
        myfinance transaction transfer --from Nubank --to "Wise USD" --amount 100.00 --rate 0.20
    """
    user_id = require_user(ctx)
    account_service = AccountService(ctx.obj["db"])
    source_account = resolve_account_or_exit(ctx, account_service, user_id, source)
    destination_account = resolve_account_or_exit(ctx, account_service, user_id, destination)

    due = _date_or_exit(ctx, due_date)
    competence = _date_or_exit(ctx, competence_date, "competence date") if competence_date else due

    try:
        result = _transaction_service(ctx).create_transfer(
            user_id,
            TransferRequest(
                source_account_id=source_account.id,
                destination_account_id=destination_account.id,
                amount=_minor_units_or_exit(ctx, amount),
                description=description,
                due_date=due,
                competence_date=competence,
                is_paid=paid,
                observation=observation,
                use_manual_rate=rate is not None,
                manual_rate=rate,
            ),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Transfer {result.transfer_id}")
    click.echo(f"  Debit:  {format_amount(result.debit.amount, source_account.currency)} from '{source_account.name}'")
    click.echo(f"  Credit: {format_amount(result.credit.amount, destination_account.currency)} to '{destination_account.name}'")
    if result.exchange_info is not None:
        click.echo(f"  Rate:   {result.exchange_info.exchange_rate:.4f}")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def list_transactions(ctx, account: str | None, start_date: str | None, end_date: str | None):
    """View transactions ordered by due date."""
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    account_service = AccountService(db)

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, user_id, account).id
    start = _date_or_exit(ctx, start_date, "start date") if start_date else None
    end = _date_or_exit(ctx, end_date, "end date") if end_date else None

    transactions = TransactionService(db).list_transactions(user_id, account_id=account_id, start_date=start, end_date=end)
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc for acc in account_service.list_accounts(user_id)}
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(f"{'Date':<12} {'Type':<8} {'Amount':>16} {'Account':<20} {'Description':<30} ID")
    click.echo("-" * 110)
    for txn in transactions:
        acc = accounts.get(txn.account_id)
        currency = acc.currency if acc else ""
        marker = " *" if txn.transfer_id else ""
        click.echo(
            f"{str(txn.due_date):<12} {txn.type:<8} {format_amount(txn.amount, currency):>16} "
            f"{(acc.name if acc else 'Unknown'):<20} {txn.description[:30]:<30} {txn.id}{marker}"
        )


def _show(txn: Transaction) -> None:
    click.echo(f"Transaction ID: {txn.id}")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Amount: {format_amount(txn.amount)} ({txn.type})")
    click.echo(f"  Due: {txn.due_date}  Competence: {txn.competence_date}")
    click.echo(f"  Paid: {'yes' if txn.is_paid else 'no'}")
    if txn.observation:
        click.echo(f"  Observation: {txn.observation}")
    if txn.transfer_id:
        click.echo(f"  Transfer: {txn.transfer_id}")


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show a transaction."""
    user_id = require_user(ctx)
    try:
        txn = TransactionService(ctx.obj["db"]).get_transaction(transaction_id, user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    _show(txn)


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--amount", help="New amount in major units")
@click.option("--description", help="New description")
@click.option("--date", "due_date", help="New due date")
@click.option("--competence-date", help="New competence date")
@click.option("--paid/--unpaid", "is_paid", default=None, help="Mark as paid or unpaid")
@click.option("--observation", help="New note")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    amount: str | None,
    description: str | None,
    due_date: str | None,
    competence_date: str | None,
    is_paid: bool | None,
    observation: str | None,
) -> None:
    """Update only the given fields of a transaction.

    Examples:
        myfinance transaction update <ID> --amount 75.00 --paid
    """
    user_id = require_user(ctx)

    updates = {}
    if amount is not None:
        updates["amount"] = _minor_units_or_exit(ctx, amount)
    if description is not None:
        updates["description"] = description
    if due_date is not None:
        updates["due_date"] = due_date
    if competence_date is not None:
        updates["competence_date"] = competence_date
    if is_paid is not None:
        updates["is_paid"] = is_paid
    if observation is not None:
        updates["observation"] = observation

    try:
        TransactionService(ctx.obj["db"]).update_transaction_partial(transaction_id, user_id, updates)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction; both sides of a transfer are deleted together.

    Examples:
        myfinance transaction delete <ID>
    """
    user_id = require_user(ctx)
    service = TransactionService(ctx.obj["db"])

    try:
        txn = service.get_transaction(transaction_id, user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    # Confirm deletion
    what = "both sides of this transfer" if txn.transfer_id else f"transaction {transaction_id}"
    if not yes and not click.confirm(f"Are you sure you want to delete {what}?"):
        click.echo("Deletion cancelled.")
        return

    count = service.delete_transaction(transaction_id, user_id)
    click.echo(f"Deleted {count} transaction(s)")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")

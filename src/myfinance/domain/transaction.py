"""Transaction domain service, including the transfer workflow."""

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Optional

from myfinance.database.base import Database
from myfinance.domain.entities import (
    Account,
    EXPENSE,
    ExchangeInfo,
    INCOME,
    Transaction,
    TransferResult,
    TRANSACTION_TYPES,
)
from myfinance.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)
from myfinance.domain.exchange import CurrencyConverter
from myfinance.domain.requests import (
    TransactionRequest,
    TransferRequest,
    parse_transaction_request,
)
from myfinance.utils.amount_parser import to_major_units, to_minor_units
from myfinance.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = ("id", "user_id", "created_at")
NULLABLE_FIELDS = ("recurring_type", "parent_transaction_id")
# Fixed on both sides of a transfer
TRANSFER_LOCKED_FIELDS = ("type", "account_id")


def exchange_annotation(rate: float, from_currency: str, to_currency: str) -> str:
    """Return the observation note recorded on cross-currency transfers."""
    return f"Câmbio: {rate:.4f} {from_currency}/{to_currency}"


def _check_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("Amount must be an integer number of cents")
    if amount < 0:
        raise ValidationError("Amount must not be negative")
    return amount


class TransactionService:
    """Service for managing transactions and transfers."""

    def __init__(self, db: Database, converter: Optional[CurrencyConverter] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            converter: Currency converter used by cross-currency transfers
        """
        self.db = db
        self.converter = converter

    def _get_account(self, account_id: str, user_id: str) -> Account:
        account = self.db.get_account(account_id, user_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def _check_category(self, category_id: str, user_id: str) -> None:
        category = self.db.get_category(category_id)
        if category is None or not (category.is_system or category.user_id == user_id):
            raise NotFoundError(category_not_found(category_id))

    def _check_transfer_side(self, existing: Transaction, fields: dict[str, Any]) -> None:
        if not existing.transfer_id:
            return
        for key in TRANSFER_LOCKED_FIELDS:
            if key in fields and fields[key] != getattr(existing, key):
                raise ValidationError(f"Cannot change {key} of a transfer transaction")

    def create_transaction(self, user_id: str, request: TransactionRequest) -> Transaction:
        """Create a plain income or expense transaction.

        Args:
            user_id: Owner of the transaction
            request: Transaction fields

        Returns:
            The created transaction

        Raises:
            ValidationError: If the type or amount is invalid
            NotFoundError: If the account or category is not visible to the user
        """
        if request.type not in TRANSACTION_TYPES:
            raise ValidationError(f"Invalid transaction type '{request.type}'")
        amount = _check_amount(request.amount)
        self._get_account(request.account_id, user_id)
        self._check_category(request.category_id, user_id)

        transaction_id = self.db.create_transaction(
            user_id=user_id,
            description=request.description,
            amount=amount,
            transaction_type=request.type,
            category_id=request.category_id,
            account_id=request.account_id,
            due_date=request.due_date,
            competence_date=request.competence_date,
            is_paid=request.is_paid,
            observation=request.observation,
            is_recurring=request.is_recurring,
            recurring_type=request.recurring_type,
            installments=request.installments,
            current_installment=request.current_installment,
            parent_transaction_id=request.parent_transaction_id,
        )
        return self.get_transaction(transaction_id, user_id)

    def create_transfer(self, user_id: str, request: TransferRequest) -> TransferResult:
        """Move money between two accounts as a linked expense/income pair.

        Cross-currency amounts are converted in major units and rounded half
        up back to minor units. The rate used is noted in the observation.
        Both sides are written in one unit of work.

        Args:
            user_id: Owner of both accounts
            request: Transfer fields; ``amount`` is in the source currency

        Returns:
            TransferResult with both transactions, the shared transfer ID and
            exchange information when a conversion occurred

        Raises:
            NotFoundError: If either account is missing
            ValidationError: If the accounts are the same or the amount is invalid
            ConversionUnavailableError: If no rate can be resolved
            PersistenceError: If the pair cannot be stored (nothing is kept)
        """
        amount = _check_amount(request.amount)
        source = self._get_account(request.source_account_id, user_id)
        destination = self._get_account(request.destination_account_id, user_id)
        if source.id == destination.id:
            raise ValidationError("Source and destination accounts must differ")

        transfer_category = self.db.ensure_transfer_category()
        transfer_id = str(uuid.uuid4())

        exchange_info = None
        observation = request.observation
        credit_amount = amount
        if source.currency != destination.currency:
            if self.converter is None:
                raise ValidationError("Currency conversion is not configured")
            manual_rate = request.manual_rate if request.use_manual_rate else None
            conversion = self.converter.convert(
                source.currency,
                destination.currency,
                float(to_major_units(amount)),
                manual_rate=manual_rate,
            )
            credit_amount = to_minor_units(conversion.converted_amount)
            note = exchange_annotation(conversion.rate, source.currency, destination.currency)
            observation = f"{observation} | {note}" if observation else note
            exchange_info = ExchangeInfo(
                from_currency=source.currency,
                to_currency=destination.currency,
                exchange_rate=conversion.rate,
                original_amount=amount,
                converted_amount=credit_amount,
            )

        narrative = {
            "user_id": user_id,
            "description": request.description,
            "category_id": transfer_category.id,
            "due_date": request.due_date,
            "competence_date": request.competence_date,
            "is_paid": request.is_paid,
            "observation": observation,
            "is_recurring": request.is_recurring,
            "recurring_type": request.recurring_type,
            "installments": request.installments,
            "current_installment": request.current_installment,
            "parent_transaction_id": request.parent_transaction_id,
            "transfer_id": transfer_id,
        }
        with self.db.unit_of_work():
            debit_id = self.db.create_transaction(
                amount=amount,
                transaction_type=EXPENSE,
                account_id=source.id,
                **narrative,
            )
            credit_id = self.db.create_transaction(
                amount=credit_amount,
                transaction_type=INCOME,
                account_id=destination.id,
                **narrative,
            )

        logger.info(
            "Transfer %s: %d %s from %s to %d %s on %s",
            transfer_id,
            amount,
            source.currency,
            source.id,
            credit_amount,
            destination.currency,
            destination.id,
        )
        debit = self.get_transaction(debit_id, user_id)
        credit = self.get_transaction(credit_id, user_id)
        return TransferResult(debit=debit, credit=credit, transfer_id=transfer_id, exchange_info=exchange_info)

    def submit_transaction(self, user_id: str, payload: dict[str, Any]) -> Transaction | TransferResult:
        """Create a transaction or a transfer from a raw payload."""
        request = parse_transaction_request(payload)
        if isinstance(request, TransferRequest):
            return self.create_transfer(user_id, request)
        return self.create_transaction(user_id, request)

    def get_transaction(self, transaction_id: str, user_id: str) -> Transaction:
        """Get a transaction owned by the user.

        Raises:
            NotFoundError: If it does not exist for the user
        """
        transaction = self.db.get_transaction(transaction_id, user_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def get_transfer(self, transfer_id: str, user_id: str) -> list[Transaction]:
        """Get both live sides of a transfer, debit first.

        Raises:
            NotFoundError: If no live transaction carries the transfer ID
        """
        pair = self.db.list_transactions_by_transfer_id(transfer_id, user_id)
        if not pair:
            raise NotFoundError(f"Transfer {transfer_id} not found")
        return sorted(pair, key=lambda t: t.type != EXPENSE)

    def list_transactions(
        self,
        user_id: str,
        account_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List live transactions by due date; an empty list when there are none."""
        return self.db.list_transactions(user_id, account_id=account_id, start_date=start_date, end_date=end_date)

    def update_transaction(self, transaction_id: str, user_id: str, request: TransactionRequest) -> Transaction:
        """Replace every mutable field of a transaction.

        Raises:
            NotFoundError: If the transaction, account or category is missing
            ValidationError: If the type or amount is invalid
        """
        existing = self.get_transaction(transaction_id, user_id)
        if request.type not in TRANSACTION_TYPES:
            raise ValidationError(f"Invalid transaction type '{request.type}'")
        self._check_transfer_side(existing, {"type": request.type, "account_id": request.account_id})
        amount = _check_amount(request.amount)
        self._get_account(request.account_id, user_id)
        self._check_category(request.category_id, user_id)

        self.db.update_transaction(
            replace(
                existing,
                description=request.description,
                amount=amount,
                type=request.type,
                category_id=request.category_id,
                account_id=request.account_id,
                due_date=request.due_date,
                competence_date=request.competence_date,
                is_paid=request.is_paid,
                observation=request.observation,
                is_recurring=request.is_recurring,
                recurring_type=request.recurring_type,
                installments=request.installments,
                current_installment=request.current_installment,
                parent_transaction_id=request.parent_transaction_id,
            )
        )
        return self.get_transaction(transaction_id, user_id)

    def update_transaction_partial(self, transaction_id: str, user_id: str, updates: dict[str, Any]) -> Transaction:
        """Update a subset of a transaction's fields.

        ``id``, ``user_id`` and ``created_at`` are ignored. Date strings are
        parsed. The transfer link cannot be set, and the type and account of
        a transfer side are fixed.

        Raises:
            ValidationError: If no updatable field remains or a value is invalid
            NotFoundError: If the transaction or a referenced entity is missing
        """
        existing = self.get_transaction(transaction_id, user_id)
        fields = {k: v for k, v in updates.items() if k not in PROTECTED_FIELDS}

        if "transfer_id" in fields:
            raise ValidationError("transfer_id cannot be updated")
        for key, value in fields.items():
            if value is None and key not in NULLABLE_FIELDS:
                raise ValidationError(f"Field '{key}' cannot be empty")
        self._check_transfer_side(existing, fields)

        if "amount" in fields:
            fields["amount"] = _check_amount(fields["amount"])
        if "type" in fields and fields["type"] not in TRANSACTION_TYPES:
            raise ValidationError(f"Invalid transaction type '{fields['type']}'")
        for key in ("due_date", "competence_date"):
            if key in fields:
                try:
                    fields[key] = parse_date(fields[key])
                except ValueError as e:
                    raise ValidationError(f"Invalid {key}: {e}") from e
        if fields.get("account_id") is not None:
            self._get_account(fields["account_id"], user_id)
        if fields.get("category_id") is not None:
            self._check_category(fields["category_id"], user_id)

        self.db.update_transaction_partial(transaction_id, user_id, fields)
        return self.get_transaction(transaction_id, user_id)

    def delete_transaction(self, transaction_id: str, user_id: str) -> int:
        """Soft delete a transaction; deleting one side of a transfer removes both.

        Returns:
            Number of transactions deleted

        Raises:
            NotFoundError: If the transaction does not exist for the user
        """
        transaction = self.get_transaction(transaction_id, user_id)
        if transaction.transfer_id:
            count = self.db.soft_delete_transactions_by_transfer_id(transaction.transfer_id, user_id)
            logger.info("Deleted transfer %s (%d transactions)", transaction.transfer_id, count)
            return count
        self.db.soft_delete_transaction(transaction_id, user_id)
        return 1

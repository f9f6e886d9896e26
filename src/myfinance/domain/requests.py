"""Request shapes accepted by the domain services.

Transfers are a distinct request variant rather than a plain transaction
whose ``category_id`` carries the destination account. Use
``parse_transaction_request`` to turn a raw payload into the right one.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from myfinance.domain.entities import EXPENSE, TRANSFER, TRANSACTION_TYPES
from myfinance.domain.errors import ValidationError
from myfinance.utils.date_parser import parse_date


@dataclass(frozen=True)
class CreateAccountRequest:
    """Input for account creation, including the opening balance."""

    name: str
    currency: str
    due_date: date
    competence_date: date
    type: str = EXPENSE
    color: str = ""
    is_active: bool = True
    initial_value: Decimal = Decimal("0")


@dataclass(frozen=True)
class UpdateAccountRequest:
    """Input for account updates; None leaves a field unchanged.

    The opening balance is only touched when both dates are supplied.
    """

    name: Optional[str] = None
    currency: Optional[str] = None
    color: Optional[str] = None
    type: Optional[str] = None
    is_active: Optional[bool] = None
    initial_value: Decimal = Decimal("0")
    due_date: Optional[date] = None
    competence_date: Optional[date] = None


@dataclass(frozen=True)
class CreateCategoryRequest:
    name: str
    type: str
    description: str = ""
    color: str = ""
    icon: str = ""
    parent_id: Optional[str] = None
    visible: bool = True


@dataclass(frozen=True)
class UpdateCategoryRequest:
    """Input for category updates; None (or an empty color) keeps the value."""

    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None
    visible: Optional[bool] = None


@dataclass(frozen=True)
class TransactionRequest:
    """A plain income or expense transaction."""

    description: str
    amount: int
    type: str
    category_id: str
    account_id: str
    due_date: date
    competence_date: date
    is_paid: bool = False
    observation: str = ""
    is_recurring: bool = False
    recurring_type: Optional[str] = None
    installments: int = 1
    current_installment: int = 1
    parent_transaction_id: Optional[str] = None


@dataclass(frozen=True)
class TransferRequest:
    """Money moved from one account to another, possibly across currencies.

    ``amount`` is expressed in the source account's minor units. When
    ``use_manual_rate`` is set, ``manual_rate`` overrides the rate lookup.
    """

    source_account_id: str
    destination_account_id: str
    amount: int
    description: str
    due_date: date
    competence_date: date
    is_paid: bool = False
    observation: str = ""
    is_recurring: bool = False
    recurring_type: Optional[str] = None
    installments: int = 1
    current_installment: int = 1
    parent_transaction_id: Optional[str] = None
    use_manual_rate: bool = False
    manual_rate: Optional[float] = None


def _require(payload: dict[str, Any], key: str) -> Any:
    value = payload.get(key)
    if value is None or value == "":
        raise ValidationError(f"Field '{key}' is required")
    return value


def _parse_amount(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Amount must be an integer number of cents")
    try:
        amount = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid amount '{value}'") from e
    if amount != value and not isinstance(value, str):
        raise ValidationError("Amount must be an integer number of cents")
    if amount < 0:
        raise ValidationError("Amount must not be negative")
    return amount


def _parse_int(payload: dict[str, Any], key: str, default: int = 1) -> int:
    value = payload.get(key)
    if value in (None, "", 0):
        return default
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {key} '{value}'")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {key} '{value}'") from e


def _parse_rate(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid manual_rate '{value}'") from e


def _parse_date_field(payload: dict[str, Any], key: str) -> date:
    try:
        return parse_date(_require(payload, key))
    except ValueError as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Invalid {key}: {e}") from e


def _narrative_fields(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "description": str(payload.get("description") or ""),
        "amount": _parse_amount(_require(payload, "amount")),
        "due_date": _parse_date_field(payload, "due_date"),
        "competence_date": _parse_date_field(payload, "competence_date"),
        "is_paid": bool(payload.get("is_paid", False)),
        "observation": str(payload.get("observation") or ""),
        "is_recurring": bool(payload.get("is_recurring", False)),
        "recurring_type": payload.get("recurring_type"),
        "installments": _parse_int(payload, "installments"),
        "current_installment": _parse_int(payload, "current_installment"),
        "parent_transaction_id": payload.get("parent_transaction_id"),
    }


def parse_transaction_request(payload: dict[str, Any]) -> TransactionRequest | TransferRequest:
    """Resolve a raw transaction payload into its request variant.

    A payload with ``type == "transfer"`` becomes a TransferRequest. The
    destination is read from ``destination_account_id``, falling back to
    ``category_id`` for clients that still send it there.

    Raises:
        ValidationError: If required fields are missing or malformed
    """
    kind = _require(payload, "type")
    fields = _narrative_fields(payload)

    if kind == TRANSFER:
        destination = payload.get("destination_account_id") or payload.get("category_id")
        if not destination:
            raise ValidationError("Field 'destination_account_id' is required")
        return TransferRequest(
            source_account_id=_require(payload, "account_id"),
            destination_account_id=destination,
            use_manual_rate=bool(payload.get("use_manual_rate", False)),
            manual_rate=_parse_rate(payload.get("manual_rate")),
            **fields,
        )

    if kind not in TRANSACTION_TYPES:
        raise ValidationError(f"Invalid transaction type '{kind}'")
    return TransactionRequest(
        type=kind,
        category_id=_require(payload, "category_id"),
        account_id=_require(payload, "account_id"),
        **fields,
    )

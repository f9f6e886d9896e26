"""OFX import domain service."""

import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from myfinance.database.base import Database
from myfinance.domain.entities import EXPENSE, INCOME, Transaction
from myfinance.domain.errors import NotFoundError, account_not_found
from myfinance.domain.requests import TransactionRequest
from myfinance.domain.transaction import TransactionService
from myfinance.utils.amount_parser import to_minor_units
from myfinance.utils.date_parser import parse_ofx_date

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Transação importada"

_TAG = re.compile(r"^<(TRNAMT|DTPOSTED|NAME|MEMO|FITID)>([^<]*)")


@dataclass(frozen=True)
class OFXRecord:
    """One <STMTTRN> statement line; ``amount`` is signed, in major units."""

    fitid: str
    amount: Decimal
    posted: date
    name: str = ""
    memo: str = ""

    @property
    def type(self) -> str:
        return INCOME if self.amount > 0 else EXPENSE

    @property
    def description(self) -> str:
        return self.name.strip() or self.memo.strip() or DEFAULT_DESCRIPTION


def parse_ofx(content: str | bytes) -> list[OFXRecord]:
    """Extract statement transactions from OFX content.

    Both SGML (unclosed leaf tags) and XML forms are accepted. Records with
    a zero amount or without a posting date are dropped.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError:
            content = content.decode("latin-1")

    records = []
    current: Optional[dict[str, Any]] = None
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line == "<STMTTRN>":
            current = {}
        elif line == "</STMTTRN>" and current is not None:
            if current.get("amount") and current.get("posted") is not None:
                records.append(
                    OFXRecord(
                        fitid=current.get("fitid", ""),
                        amount=current["amount"],
                        posted=current["posted"],
                        name=current.get("name", ""),
                        memo=current.get("memo", ""),
                    )
                )
            current = None
        elif current is not None:
            match = _TAG.match(line)
            if match is None:
                continue
            tag, value = match.group(1), match.group(2).strip()
            if tag == "TRNAMT":
                try:
                    current["amount"] = Decimal(value.replace(",", "."))
                except InvalidOperation:
                    pass
            elif tag == "DTPOSTED":
                try:
                    current["posted"] = parse_ofx_date(value)
                except ValueError:
                    pass
            else:
                current[tag.lower()] = value
    return records


class OFXImportService:
    """Service for importing OFX bank statements."""

    def __init__(self, db: Database):
        """Initialize OFX import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transaction_service = TransactionService(db)

    def preview(self, content: str | bytes) -> list[OFXRecord]:
        """Parse OFX content without writing anything."""
        return parse_ofx(content)

    def import_ofx(self, user_id: str, account_id: str, content: str | bytes) -> dict[str, Any]:
        """Import OFX statement transactions into an account.

        Args:
            user_id: Owner of the account
            account_id: Account receiving the transactions
            content: Raw OFX file content

        Returns:
            Dict with import statistics:
            - imported: number of transactions imported
            - skipped: number of records skipped (duplicates or failures)
            - errors: list of error messages

        Raises:
            NotFoundError: If the account does not exist for the user
        """
        if self.db.get_account(account_id, user_id) is None:
            raise NotFoundError(account_not_found(account_id))

        records = parse_ofx(content)
        category = self.db.ensure_transfer_category()
        existing = self.db.list_transactions(user_id, account_id=account_id)

        imported = 0
        skipped = 0
        errors = []

        for record in records:
            label = record.fitid or record.posted.isoformat()
            try:
                amount = abs(to_minor_units(record.amount))
                description = record.description
                if self._is_duplicate(existing, record.posted, amount, description):
                    skipped += 1
                    continue

                transaction = self.transaction_service.create_transaction(
                    user_id,
                    TransactionRequest(
                        description=description,
                        amount=amount,
                        type=record.type,
                        category_id=category.id,
                        account_id=account_id,
                        due_date=record.posted,
                        competence_date=record.posted,
                        is_paid=True,
                        observation=f"Importado via OFX - {record.fitid}",
                    ),
                )
                existing.append(transaction)
                imported += 1
            except ValueError as e:
                errors.append(f"Transaction {label}: {e}")
                skipped += 1

        logger.info("OFX import into %s: %d imported, %d skipped", account_id, imported, skipped)
        return {
            "imported": imported,
            "skipped": skipped,
            "errors": errors,
        }

    @staticmethod
    def _is_duplicate(existing: list[Transaction], posted: date, amount: int, description: str) -> bool:
        """Same day (one day either way), amount within a cent, overlapping description."""
        needle = description.lower()
        for txn in existing:
            if abs((txn.due_date - posted).days) > 1:
                continue
            if abs(txn.amount - amount) > 1:
                continue
            other = txn.description.lower()
            if needle in other or other in needle:
                return True
        return False

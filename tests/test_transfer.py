"""Tests for the transfer workflow."""

from dataclasses import replace
from datetime import date

import pytest

from myfinance.domain.entities import TransferResult
from myfinance.domain.errors import (
    ConversionUnavailableError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from myfinance.domain.exchange import CurrencyConverter, FixedRateSource
from myfinance.domain.requests import TransferRequest
from myfinance.domain.transaction import TransactionService


def _transfer(source, destination, amount=10000, **overrides):
    fields = dict(
        source_account_id=source.id,
        destination_account_id=destination.id,
        amount=amount,
        description="Transferência",
        due_date=date(2024, 3, 1),
        competence_date=date(2024, 3, 1),
        is_paid=True,
    )
    fields.update(overrides)
    return TransferRequest(**fields)


class TestSameCurrencyTransfer:
    def test_pair_is_linked(self, temp_db, transaction_service, seeded_user, brl_account, brl_savings):
        """Both sides share the amount, transfer ID and system category."""
        result = transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_savings, 12345))
        transfer_category = temp_db.get_transfer_category()

        assert isinstance(result, TransferResult)
        assert result.debit.amount == result.credit.amount == 12345
        assert result.debit.type == "expense"
        assert result.credit.type == "income"
        assert result.debit.account_id == brl_account.id
        assert result.credit.account_id == brl_savings.id
        assert result.debit.transfer_id == result.credit.transfer_id == result.transfer_id
        assert result.transfer_id is not None
        assert result.debit.category_id == result.credit.category_id == transfer_category.id
        assert result.exchange_info is None
        assert "Câmbio" not in result.debit.observation

    def test_narrative_fields_copied(self, transaction_service, seeded_user, brl_account, brl_savings):
        result = transaction_service.create_transfer(
            seeded_user, _transfer(brl_account, brl_savings, observation="Reserva", installments=2)
        )

        for side in (result.debit, result.credit):
            assert side.description == "Transferência"
            assert side.observation == "Reserva"
            assert side.is_paid is True
            assert side.installments == 2
            assert side.due_date == date(2024, 3, 1)

    def test_same_account_rejected(self, transaction_service, seeded_user, brl_account):
        with pytest.raises(ValidationError, match="differ"):
            transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_account))

    def test_missing_destination(self, temp_db, transaction_service, seeded_user, brl_account):
        missing = replace(brl_account, id="missing")
        with pytest.raises(NotFoundError):
            transaction_service.create_transfer(seeded_user, _transfer(brl_account, missing))
        assert temp_db.list_transactions(seeded_user, account_id=brl_account.id)[0].description == "Saldo Inicial"
        assert len(temp_db.list_transactions(seeded_user)) == 1

    def test_negative_amount_rejected(self, transaction_service, seeded_user, brl_account, brl_savings):
        with pytest.raises(ValidationError):
            transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_savings, -100))


class TestCrossCurrencyTransfer:
    def test_manual_rate_scenario(self, transaction_service, seeded_user, brl_account, usd_account):
        """100.00 BRL at 0.20 becomes 20.00 USD."""
        result = transaction_service.create_transfer(
            seeded_user,
            _transfer(brl_account, usd_account, 10000, use_manual_rate=True, manual_rate=0.20),
        )

        assert result.debit.amount == 10000
        assert result.debit.type == "expense"
        assert result.debit.account_id == brl_account.id
        assert result.credit.amount == 2000
        assert result.credit.type == "income"
        assert result.credit.account_id == usd_account.id
        assert "Câmbio: 0.2000 BRL/USD" in result.debit.observation
        assert "Câmbio: 0.2000 BRL/USD" in result.credit.observation
        assert result.exchange_info.from_currency == "BRL"
        assert result.exchange_info.to_currency == "USD"
        assert result.exchange_info.exchange_rate == 0.20
        assert result.exchange_info.original_amount == 10000
        assert result.exchange_info.converted_amount == 2000

    @pytest.mark.parametrize(
        "amount,rate,expected",
        [
            (10000, 5.0, 50000),
            (333, 0.2, 67),
            (12345, 1.18, 14567),
            (1, 0.5, 1),
        ],
    )
    def test_credit_is_rounded_half_up(
        self, transaction_service, seeded_user, usd_account, brl_account, amount, rate, expected
    ):
        result = transaction_service.create_transfer(
            seeded_user,
            _transfer(usd_account, brl_account, amount, use_manual_rate=True, manual_rate=rate),
        )
        assert result.credit.amount == expected

    def test_rate_source_used_without_manual_rate(self, transaction_service, seeded_user, usd_account, brl_account):
        result = transaction_service.create_transfer(seeded_user, _transfer(usd_account, brl_account, 1000))

        assert result.credit.amount == 5000
        assert result.debit.observation == "Câmbio: 5.0000 USD/BRL"

    def test_manual_rate_ignored_when_flag_off(self, transaction_service, seeded_user, usd_account, brl_account):
        result = transaction_service.create_transfer(
            seeded_user, _transfer(usd_account, brl_account, 1000, manual_rate=9.0)
        )
        assert result.credit.amount == 5000

    def test_annotation_appended_to_observation(self, transaction_service, seeded_user, brl_account, usd_account):
        result = transaction_service.create_transfer(
            seeded_user,
            _transfer(brl_account, usd_account, observation="Viagem", use_manual_rate=True, manual_rate=0.2),
        )
        assert result.credit.observation == "Viagem | Câmbio: 0.2000 BRL/USD"

    def test_unavailable_rate_writes_nothing(self, temp_db, seeded_user, brl_account, usd_account):
        service = TransactionService(temp_db, CurrencyConverter(FixedRateSource(rates={})))
        before = len(temp_db.list_transactions(seeded_user))

        with pytest.raises(ConversionUnavailableError):
            service.create_transfer(seeded_user, _transfer(brl_account, usd_account))
        assert len(temp_db.list_transactions(seeded_user)) == before


class TestTransferAtomicity:
    def test_credit_failure_rolls_back_debit(
        self, temp_db, transaction_service, seeded_user, brl_account, brl_savings, monkeypatch
    ):
        """If the credit write fails, the debit is not kept either."""
        original = temp_db.create_transaction

        def fail_on_income(*args, **kwargs):
            if kwargs.get("transaction_type") == "income":
                raise PersistenceError("Failed to create transaction: IntegrityError")
            return original(*args, **kwargs)

        before = len(temp_db.list_transactions(seeded_user))
        monkeypatch.setattr(temp_db, "create_transaction", fail_on_income)

        with pytest.raises(PersistenceError):
            transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_savings))
        monkeypatch.undo()

        transactions = temp_db.list_transactions(seeded_user)
        assert len(transactions) == before
        assert all(t.transfer_id is None for t in transactions)


class TestTransferDeletion:
    def test_deleting_one_side_deletes_both(
        self, temp_db, transaction_service, seeded_user, brl_account, brl_savings
    ):
        result = transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_savings))

        count = transaction_service.delete_transaction(result.credit.id, seeded_user)

        assert count == 2
        assert temp_db.get_transaction(result.debit.id, seeded_user) is None
        assert temp_db.get_transaction(result.credit.id, seeded_user) is None
        assert temp_db.list_transactions_by_transfer_id(result.transfer_id, seeded_user) == []

    def test_get_transfer_returns_debit_first(self, transaction_service, seeded_user, brl_account, brl_savings):
        result = transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_savings))

        pair = transaction_service.get_transfer(result.transfer_id, seeded_user)

        assert [t.id for t in pair] == [result.debit.id, result.credit.id]

    def test_get_deleted_transfer_not_found(self, transaction_service, seeded_user, brl_account, brl_savings):
        result = transaction_service.create_transfer(seeded_user, _transfer(brl_account, brl_savings))
        transaction_service.delete_transaction(result.debit.id, seeded_user)

        with pytest.raises(NotFoundError):
            transaction_service.get_transfer(result.transfer_id, seeded_user)


class TestSubmitTransfer:
    def test_legacy_category_id_as_destination(self, transaction_service, seeded_user, brl_account, usd_account):
        """A transfer payload may still carry the destination in category_id."""
        result = transaction_service.submit_transaction(
            seeded_user,
            {
                "type": "transfer",
                "amount": 10000,
                "account_id": brl_account.id,
                "category_id": usd_account.id,
                "description": "Câmbio",
                "due_date": "2024-03-01",
                "competence_date": "2024-03-01",
                "use_manual_rate": True,
                "manual_rate": 0.2,
            },
        )

        assert isinstance(result, TransferResult)
        assert result.credit.account_id == usd_account.id
        assert result.credit.amount == 2000

"""Tests for CategoryService."""

from datetime import date

import pytest

from myfinance.domain.errors import (
    DependencyError,
    InvalidParentError,
    NotFoundError,
    ValidationError,
)
from myfinance.domain.requests import (
    CreateCategoryRequest,
    TransactionRequest,
    UpdateCategoryRequest,
)


@pytest.fixture
def food(category_service, sample_user):
    return category_service.create_category(
        sample_user, CreateCategoryRequest(name="Food", type="expense", color="#FF0000")
    )


@pytest.fixture
def snacks(category_service, sample_user, food):
    return category_service.create_category(
        sample_user, CreateCategoryRequest(name="Snacks", type="expense", parent_id=food.id)
    )


def _tag_transaction(transaction_service, user_id, account, category):
    return transaction_service.create_transaction(
        user_id,
        TransactionRequest(
            description="Chips",
            amount=850,
            type=category.type,
            category_id=category.id,
            account_id=account.id,
            due_date=date(2024, 2, 1),
            competence_date=date(2024, 2, 1),
        ),
    )


class TestCreateCategory:
    """Tests for category creation."""

    def test_create_root_category(self, category_service, sample_user, food):
        assert food.name == "Food"
        assert food.user_id == sample_user
        assert food.is_root
        assert food.is_active
        assert food.visible

    def test_child_inherits_parent_color(self, snacks, food):
        assert snacks.parent_id == food.id
        assert snacks.color == "#FF0000"

    def test_child_keeps_explicit_color(self, category_service, sample_user, food):
        child = category_service.create_category(
            sample_user,
            CreateCategoryRequest(name="Drinks", type="expense", color="#00FF00", parent_id=food.id),
        )
        assert child.color == "#00FF00"

    def test_type_mismatch_with_parent_fails(self, temp_db, category_service, sample_user, food):
        """A child of a different type is rejected and nothing is stored."""
        with pytest.raises(InvalidParentError, match="does not match"):
            category_service.create_category(
                sample_user, CreateCategoryRequest(name="Refund", type="income", parent_id=food.id)
            )
        assert [c.name for c in temp_db.list_categories(sample_user)] == ["Food"]

    def test_missing_parent_fails(self, category_service, sample_user):
        with pytest.raises(InvalidParentError, match="not found"):
            category_service.create_category(
                sample_user, CreateCategoryRequest(name="Orphan", type="expense", parent_id="missing")
            )

    def test_inactive_parent_fails(self, category_service, sample_user, food):
        category_service.update_category(food.id, sample_user, UpdateCategoryRequest(is_active=False))
        with pytest.raises(InvalidParentError, match="inactive"):
            category_service.create_category(
                sample_user, CreateCategoryRequest(name="Snacks", type="expense", parent_id=food.id)
            )

    def test_grandchild_rejected(self, category_service, sample_user, snacks):
        with pytest.raises(InvalidParentError, match="already a subcategory"):
            category_service.create_category(
                sample_user, CreateCategoryRequest(name="Chips", type="expense", parent_id=snacks.id)
            )

    def test_other_users_parent_rejected(self, category_service, other_user, food):
        with pytest.raises(InvalidParentError):
            category_service.create_category(
                other_user, CreateCategoryRequest(name="Snacks", type="expense", parent_id=food.id)
            )

    def test_invalid_type_rejected(self, category_service, sample_user):
        with pytest.raises(ValidationError, match="Invalid category type"):
            category_service.create_category(sample_user, CreateCategoryRequest(name="X", type="bogus"))

    def test_blank_name_rejected(self, category_service, sample_user):
        with pytest.raises(ValidationError):
            category_service.create_category(sample_user, CreateCategoryRequest(name="  ", type="expense"))


class TestQueries:
    """Tests for category lookups and listings."""

    def test_get_category_of_other_user_not_found(self, category_service, other_user, food):
        with pytest.raises(NotFoundError):
            category_service.get_category(food.id, other_user)

    def test_list_by_type(self, category_service, sample_user, food):
        category_service.create_category(sample_user, CreateCategoryRequest(name="Salary", type="income"))

        assert [c.name for c in category_service.list_categories(sample_user, "income")] == ["Salary"]
        assert [c.name for c in category_service.list_categories(sample_user, "expense")] == ["Food"]

    def test_list_with_subcategories(self, category_service, sample_user, food, snacks):
        groups = category_service.list_categories_with_subcategories(sample_user)

        assert len(groups) == 1
        assert groups[0].category.id == food.id
        assert [c.id for c in groups[0].subcategories] == [snacks.id]


class TestUpdateCategory:
    """Tests for category updates and color propagation."""

    def test_root_color_propagates_to_children(self, temp_db, category_service, sample_user, food, snacks):
        category_service.update_category(food.id, sample_user, UpdateCategoryRequest(color="#123456"))

        for child in temp_db.list_subcategories(food.id, sample_user):
            assert child.color == "#123456"
        assert category_service.get_category(food.id, sample_user).color == "#123456"

    def test_update_category_color(self, category_service, sample_user, food, snacks):
        updated = category_service.update_category_color(food.id, sample_user, "#ABCDEF")

        assert updated.color == "#ABCDEF"
        assert category_service.get_category(snacks.id, sample_user).color == "#ABCDEF"

    def test_child_color_change_does_not_touch_parent(self, category_service, sample_user, food, snacks):
        category_service.update_category(snacks.id, sample_user, UpdateCategoryRequest(color="#000000"))
        assert category_service.get_category(food.id, sample_user).color == "#FF0000"

    def test_empty_color_keeps_current(self, category_service, sample_user, food):
        updated = category_service.update_category(
            food.id, sample_user, UpdateCategoryRequest(name="Comida", color="")
        )
        assert updated.name == "Comida"
        assert updated.color == "#FF0000"

    def test_propagation_failure_rolls_back(self, temp_db, category_service, sample_user, food, snacks, monkeypatch):
        """If a child cannot be updated, the parent's new color is not kept."""
        original = temp_db.update_category

        def fail_on_child(category_id, **fields):
            if category_id == snacks.id:
                raise RuntimeError("boom")
            return original(category_id, **fields)

        monkeypatch.setattr(temp_db, "update_category", fail_on_child)
        with pytest.raises(RuntimeError):
            category_service.update_category(food.id, sample_user, UpdateCategoryRequest(color="#999999"))
        monkeypatch.undo()

        assert temp_db.get_category(food.id).color == "#FF0000"


class TestDeleteCategory:
    """Tests for the category deletion workflow."""

    def test_delete_cascades_to_children(self, temp_db, category_service, sample_user, food, snacks):
        category_service.delete_category(food.id, sample_user)

        assert temp_db.get_category(food.id) is None
        assert temp_db.get_category(snacks.id) is None
        assert temp_db.list_categories(sample_user) == []

    def test_child_transaction_blocks_parent_delete(
        self, temp_db, category_service, transaction_service, sample_user, account_service, food, snacks
    ):
        """Deleting Food fails naming Snacks when Snacks has a transaction."""
        account_id = temp_db.create_account(sample_user, "Cash", "BRL", "expense")
        account = temp_db.get_account(account_id, sample_user)
        _tag_transaction(transaction_service, sample_user, account, snacks)

        with pytest.raises(DependencyError) as exc_info:
            category_service.delete_category(food.id, sample_user)

        assert "Snacks" in str(exc_info.value)
        assert "Food" in str(exc_info.value)
        assert temp_db.get_category(food.id) is not None
        assert temp_db.get_category(snacks.id) is not None

    def test_own_transaction_blocks_delete(self, temp_db, category_service, transaction_service, sample_user, food):
        account_id = temp_db.create_account(sample_user, "Cash", "BRL", "expense")
        account = temp_db.get_account(account_id, sample_user)
        _tag_transaction(transaction_service, sample_user, account, food)

        with pytest.raises(DependencyError, match="'Food': it has associated transactions"):
            category_service.delete_category(food.id, sample_user)

    def test_hard_delete_removes_deleted_children(self, temp_db, category_service, sample_user, food, snacks):
        temp_db.soft_delete_category(snacks.id)

        category_service.hard_delete_category(food.id, sample_user)

        assert temp_db.list_subcategories_including_deleted(food.id) == []
        assert temp_db.get_category(food.id) is None


class TestSystemAndDefaults:
    """Tests for the transfer category and default seeding."""

    def test_transfer_category_created_once(self, category_service):
        first = category_service.get_or_create_transfer_category()
        second = category_service.get_or_create_transfer_category()

        assert first.id == second.id
        assert first.name == "Transferência"
        assert first.type == "transfer"
        assert first.color == "#6B7280"
        assert first.icon == "transfer"
        assert first.visible is False
        assert first.is_system

    def test_seed_defaults_is_idempotent(self, temp_db, category_service, sample_user):
        created = category_service.seed_default_categories(sample_user)
        assert created > 0
        assert category_service.seed_default_categories(sample_user) == 0

        assert temp_db.get_category_by_name("Outras Receitas", "income", sample_user) is not None
        assert temp_db.get_category_by_name("Outros", "expense", sample_user) is not None

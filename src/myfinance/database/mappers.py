"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, so the domain stays stable when
the database schema changes.
"""

from myfinance.domain import entities as domain
from myfinance.database.models import (
    User as ORMUser,
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        email=orm_user.email,
        password_hash=orm_user.password_hash,
        created_at=orm_user.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        currency=orm_account.currency,
        name=orm_account.name,
        color=orm_account.color or "",
        type=orm_account.type,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
        deleted_at=orm_account.deleted_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        description=orm_category.description or "",
        type=orm_category.type,
        color=orm_category.color or "",
        icon=orm_category.icon or "",
        parent_id=orm_category.parent_id,
        is_active=orm_category.is_active,
        visible=orm_category.visible,
        created_at=orm_category.created_at,
        updated_at=orm_category.updated_at,
        deleted_at=orm_category.deleted_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        description=orm_transaction.description or "",
        amount=orm_transaction.amount,
        type=orm_transaction.type,
        category_id=orm_transaction.category_id,
        account_id=orm_transaction.account_id,
        due_date=orm_transaction.due_date,
        competence_date=orm_transaction.competence_date,
        is_paid=orm_transaction.is_paid,
        observation=orm_transaction.observation or "",
        is_recurring=orm_transaction.is_recurring,
        recurring_type=orm_transaction.recurring_type,
        installments=orm_transaction.installments,
        current_installment=orm_transaction.current_installment,
        parent_transaction_id=orm_transaction.parent_transaction_id,
        transfer_id=orm_transaction.transfer_id,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        deleted_at=orm_transaction.deleted_at,
    )

"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidParentError(ValidationError):
    """Category hierarchy violation (missing, inactive or mismatched parent)."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist or is not owned by the caller."""


class DefaultCategoryMissingError(NotFoundError):
    """A category expected by naming convention has not been seeded."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ConversionUnavailableError(DomainError):
    """Exchange rate could not be resolved for a currency pair."""


class PersistenceError(DomainError):
    """Underlying store failure, wrapped with the operation that failed."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def default_category_missing(name: str, category_type: str) -> str:
    """Return message when a convention category has not been seeded."""
    return (
        f"Category '{name}' ({category_type}) not found for user. "
        "Default categories are created on first login; seed them and retry."
    )


def account_delete_blocked(account_name: str) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account '{account_name}': it has associated transactions. "
        "Remove or reassign them first."
    )


def category_delete_blocked(category_name: str, subcategory_name: str | None = None) -> str:
    """Return message when a category or one of its children has transactions."""
    if subcategory_name is None:
        return (
            f"Cannot delete category '{category_name}': it has associated transactions. "
            "Remove or reassign them first."
        )
    return (
        f"Cannot delete category '{category_name}': subcategory '{subcategory_name}' "
        "has associated transactions. Remove or reassign them first."
    )

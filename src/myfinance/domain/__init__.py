"""Domain layer for myfinance application."""

__all__ = [
    "AccountService",
    "CategoryService",
    "TransactionService",
    "UserService",
    "OFXImportService",
]

_SERVICES = {
    "AccountService": "myfinance.domain.account",
    "CategoryService": "myfinance.domain.category",
    "TransactionService": "myfinance.domain.transaction",
    "UserService": "myfinance.domain.user",
    "OFXImportService": "myfinance.domain.ofx_import",
}


# Services import the database layer, which imports entities from here
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

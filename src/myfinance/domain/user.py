"""User domain service."""

import logging
from typing import Optional

import bcrypt

from myfinance.database.base import Database
from myfinance.domain.category import CategoryService
from myfinance.domain.entities import User
from myfinance.domain.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class UserService:
    """Service for registering and authenticating users."""

    def __init__(self, db: Database, rounds: int = 12):
        """Initialize user service.

        Args:
            db: Database instance
            rounds: bcrypt cost factor
        """
        self.db = db
        self.rounds = rounds

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def register(self, name: str, email: str, password: str) -> User:
        """Register a user and seed their default categories.

        Raises:
            ValidationError: If a field is missing or the password is too short
            ConflictError: If the email is already registered
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name:
            raise ValidationError("Name is required")
        if not email or "@" not in email:
            raise ValidationError("A valid email is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        if self.db.get_user_by_email(email) is not None:
            raise ConflictError(f"Email '{email}' is already registered")

        user_id = self.db.create_user(name=name, email=email, password_hash=self._hash_password(password))
        CategoryService(self.db).seed_default_categories(user_id)
        logger.info("Registered user %s", user_id)

        return self.get_user(user_id)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, else None."""
        user = self.db.get_user_by_email((email or "").strip().lower())
        if user is None:
            return None
        try:
            matches = bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8"))
        except ValueError:
            matches = False
        return user if matches else None

    def get_user(self, user_id: str) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

"""Category domain service."""

import logging
from typing import Optional

from myfinance.database.base import Database
from myfinance.domain.entities import (
    Category,
    CategoryWithSubcategories,
    CATEGORY_TYPES,
    EXPENSE,
    INCOME,
)
from myfinance.domain.errors import (
    DependencyError,
    InvalidParentError,
    NotFoundError,
    ValidationError,
    category_delete_blocked,
    category_not_found,
)
from myfinance.domain.requests import CreateCategoryRequest, UpdateCategoryRequest

logger = logging.getLogger(__name__)

# (name, type, color, icon, children)
DEFAULT_CATEGORIES = [
    ("Salário", INCOME, "#10B981", "briefcase", []),
    ("Investimentos", INCOME, "#0EA5E9", "trending-up", ["Dividendos", "Juros"]),
    ("Outras Receitas", INCOME, "#22C55E", "plus-circle", []),
    ("Alimentação", EXPENSE, "#F97316", "utensils", ["Mercado", "Restaurantes"]),
    ("Moradia", EXPENSE, "#8B5CF6", "home", ["Aluguel", "Contas"]),
    ("Transporte", EXPENSE, "#3B82F6", "car", ["Combustível", "Transporte Público"]),
    ("Saúde", EXPENSE, "#EF4444", "heart", []),
    ("Lazer", EXPENSE, "#EC4899", "smile", []),
    ("Outros", EXPENSE, "#6B7280", "more-horizontal", []),
]


class CategoryService:
    """Service for managing the two-level category hierarchy."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _get_owned(self, category_id: str, user_id: str) -> Category:
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(category_not_found(category_id))
        return category

    def create_category(self, user_id: str, request: CreateCategoryRequest) -> Category:
        """Create a category, optionally as a child of an existing root.

        Args:
            user_id: Owner of the category
            request: Category fields

        Returns:
            The created category

        Raises:
            ValidationError: If the name or type is invalid
            InvalidParentError: If the parent is missing, inactive, a child
                itself, or of a different type
        """
        name = (request.name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if request.type not in CATEGORY_TYPES:
            raise ValidationError(f"Invalid category type '{request.type}'")

        color = request.color
        if request.parent_id is not None:
            parent = self.db.get_category(request.parent_id)
            if parent is None or parent.user_id != user_id:
                raise InvalidParentError(f"Parent category {request.parent_id} not found")
            if not parent.is_active:
                raise InvalidParentError(f"Parent category '{parent.name}' is inactive")
            if not parent.is_root:
                raise InvalidParentError(
                    f"Parent category '{parent.name}' is already a subcategory"
                )
            if parent.type != request.type:
                raise InvalidParentError(
                    f"Subcategory type '{request.type}' does not match parent type '{parent.type}'"
                )
            if not color:
                color = parent.color

        category_id = self.db.create_category(
            name=name,
            category_type=request.type,
            user_id=user_id,
            description=request.description,
            color=color,
            icon=request.icon,
            parent_id=request.parent_id,
            visible=request.visible,
        )
        return self._get_owned(category_id, user_id)

    def get_category(self, category_id: str, user_id: str) -> Category:
        """Get a category owned by the user.

        Raises:
            NotFoundError: If it does not exist or belongs to someone else
        """
        return self._get_owned(category_id, user_id)

    def get_category_by_name(self, name: str, category_type: str, user_id: str) -> Optional[Category]:
        return self.db.get_category_by_name(name, category_type, user_id)

    def list_categories(self, user_id: str, category_type: Optional[str] = None) -> list[Category]:
        """List the user's live categories, optionally of one type."""
        if category_type is None:
            return self.db.list_categories(user_id)
        return self.db.list_categories_by_type(user_id, category_type)

    def list_subcategories(self, parent_id: str, user_id: str) -> list[Category]:
        return self.db.list_subcategories(parent_id, user_id)

    def list_categories_with_subcategories(
        self, user_id: str, category_type: Optional[str] = None
    ) -> list[CategoryWithSubcategories]:
        """Group the user's root categories with their live children.

        Args:
            user_id: Owner of the categories
            category_type: Optional type filter

        Returns:
            Roots ordered by name, each with its children ordered by name
        """
        categories = self.list_categories(user_id, category_type)
        children: dict[str, list[Category]] = {}
        for cat in categories:
            if cat.parent_id is not None:
                children.setdefault(cat.parent_id, []).append(cat)

        return [
            CategoryWithSubcategories(category=cat, subcategories=children.get(cat.id, []))
            for cat in categories
            if cat.is_root
        ]

    def update_category(self, category_id: str, user_id: str, request: UpdateCategoryRequest) -> Category:
        """Update a category; a root's new color is pushed to its children.

        An empty color leaves the current color unchanged.

        Raises:
            NotFoundError: If the category does not exist for the user
            ValidationError: If the new name is blank
        """
        category = self._get_owned(category_id, user_id)

        fields = {}
        if request.name is not None:
            name = request.name.strip()
            if not name:
                raise ValidationError("Category name is required")
            fields["name"] = name
        if request.description is not None:
            fields["description"] = request.description
        if request.color:
            fields["color"] = request.color
        if request.icon is not None:
            fields["icon"] = request.icon
        if request.is_active is not None:
            fields["is_active"] = request.is_active
        if request.visible is not None:
            fields["visible"] = request.visible

        if not fields:
            return category

        propagate = category.is_root and "color" in fields and fields["color"] != category.color
        with self.db.unit_of_work():
            self.db.update_category(category_id, **fields)
            if propagate:
                for child in self.db.list_subcategories(category_id, user_id):
                    self.db.update_category(child.id, color=fields["color"])

        if propagate:
            logger.info("Propagated color %s to subcategories of %s", fields["color"], category_id)
        return self._get_owned(category_id, user_id)

    def update_category_color(self, category_id: str, user_id: str, color: str) -> Category:
        """Change only the color of a category (propagates from roots)."""
        if not color:
            raise ValidationError("Color is required")
        return self.update_category(category_id, user_id, UpdateCategoryRequest(color=color))

    def delete_category(self, category_id: str, user_id: str) -> None:
        """Soft delete a category and its live children.

        Nothing is written unless neither the category nor any of its live
        children has live transactions.

        Raises:
            NotFoundError: If the category does not exist for the user
            DependencyError: Naming the category and any blocking subcategory
        """
        category = self._get_owned(category_id, user_id)
        children = self.db.list_subcategories(category_id, user_id)

        if self.db.has_transactions_by_category(category_id, user_id):
            raise DependencyError(category_delete_blocked(category.name))
        for child in children:
            if self.db.has_transactions_by_category(child.id, user_id):
                raise DependencyError(category_delete_blocked(category.name, child.name))

        with self.db.unit_of_work():
            for child in children:
                self.db.soft_delete_category(child.id)
            self.db.soft_delete_category(category_id)

    def hard_delete_category(self, category_id: str, user_id: str) -> None:
        """Permanently remove a category and all of its children.

        Soft-deleted children are removed too. No dependency check is made.
        """
        self._get_owned(category_id, user_id)
        with self.db.unit_of_work():
            for child in self.db.list_subcategories_including_deleted(category_id):
                self.db.hard_delete_category(child.id)
            self.db.hard_delete_category(category_id)

    def get_or_create_transfer_category(self) -> Category:
        """Get the shared transfer category, creating it on first use."""
        return self.db.ensure_transfer_category()

    def seed_default_categories(self, user_id: str) -> int:
        """Create the default category tree for a user.

        Categories that already exist (same name and type) are left alone.

        Returns:
            Number of categories created
        """
        created = 0
        with self.db.unit_of_work():
            for name, category_type, color, icon, child_names in DEFAULT_CATEGORIES:
                root = self.db.get_category_by_name(name, category_type, user_id)
                if root is None:
                    root_id = self.db.create_category(
                        name=name,
                        category_type=category_type,
                        user_id=user_id,
                        color=color,
                        icon=icon,
                    )
                    created += 1
                else:
                    root_id = root.id

                for child_name in child_names:
                    if self.db.get_category_by_name(child_name, category_type, user_id) is not None:
                        continue
                    self.db.create_category(
                        name=child_name,
                        category_type=category_type,
                        user_id=user_id,
                        color=color,
                        parent_id=root_id,
                    )
                    created += 1

        if created:
            logger.info("Seeded %d default categories for user %s", created, user_id)
        return created

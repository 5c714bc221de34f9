"""Service for managing task categories."""

from typing import TYPE_CHECKING
import logging

from sqlalchemy.orm import Session

from familytodo.models.category import Category
from familytodo.services.time_manager import get_current_time

if TYPE_CHECKING:
    from familytodo.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger("familytodo.database")

DEFAULT_CATEGORIES = (
    {"name": "Shopping", "icon": "🛒", "color": "#10B981", "sort_order": 1},
    {"name": "Home", "icon": "🏠", "color": "#3B82F6", "sort_order": 2},
    {"name": "Homework", "icon": "📚", "color": "#8B5CF6", "sort_order": 3},
    {"name": "Activities", "icon": "🏃", "color": "#F59E0B", "sort_order": 4},
    {"name": "Health", "icon": "💊", "color": "#EF4444", "sort_order": 5},
    {"name": "Fun", "icon": "🎮", "color": "#EC4899", "sort_order": 6},
)
DEFAULT_CATEGORY_NAMES = frozenset(payload["name"] for payload in DEFAULT_CATEGORIES)


class CategoryService:
    """Business logic for categories."""

    @staticmethod
    def seed_defaults(db: Session) -> int:
        """Insert the default categories into an empty table. Returns rows added."""
        if db.query(Category).count() > 0:
            return 0
        for payload in DEFAULT_CATEGORIES:
            db.add(Category(**payload))
        db.commit()
        logger.info("Default categories inserted: %d", len(DEFAULT_CATEGORIES))
        return len(DEFAULT_CATEGORIES)

    @staticmethod
    def create_category(db: Session, category_data: "CategoryCreate") -> Category:
        category = Category(**category_data.model_dump())
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def get_category(db: Session, category_id: int) -> Category | None:
        return (
            db.query(Category)
            .filter(Category.id == category_id, Category.deleted.is_(False))
            .first()
        )

    @staticmethod
    def get_all_categories(db: Session) -> list[Category]:
        return (
            db.query(Category)
            .filter(Category.deleted.is_(False))
            .order_by(Category.sort_order, Category.name)
            .all()
        )

    @staticmethod
    def update_category(db: Session, category_id: int, category_data: "CategoryUpdate") -> Category | None:
        category = CategoryService.get_category(db, category_id)
        if not category:
            return None
        for key, value in category_data.model_dump(exclude_unset=True).items():
            setattr(category, key, value)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def delete_category(db: Session, category_id: int) -> bool:
        """Soft delete a category; its tasks keep the reference.

        Raises ValueError for one of the default categories.
        """
        category = CategoryService.get_category(db, category_id)
        if not category:
            return False
        if category.name in DEFAULT_CATEGORY_NAMES:
            raise ValueError(f"Cannot delete default category: {category.name}")
        category.deleted = True
        category.deleted_at = get_current_time()
        db.commit()
        return True

"""
Category service: CRUD for the Category aggregate.

Writes are admin-only.  Deleting a category first removes every
``news_categories`` row that references it, so articles survive with the
category dropped from their set.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.errors import ForbiddenError, NotFoundError, StorageError, ValidationError
from newsdesk.models import Category, news_categories, utcnow
from newsdesk.security import TokenClaims
from newsdesk.validation import check_category_description, check_category_name

logger = logging.getLogger(__name__)


def _category_to_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def _require_admin(requester: TokenClaims) -> None:
    if not requester.is_admin:
        raise ForbiddenError("Admin access required")


async def _get_category_or_404(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def _flush(db: AsyncSession, action: str) -> None:
    """Flush, turning a duplicate name into ValidationError."""
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ValidationError("A category with this name already exists") from exc
    except SQLAlchemyError as exc:
        raise StorageError(f"Failed to {action}") from exc


async def list_categories(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(Category).order_by(Category.id))
    return [_category_to_dict(c) for c in result.scalars().all()]


async def get_category(db: AsyncSession, category_id: int) -> dict:
    return _category_to_dict(await _get_category_or_404(db, category_id))


async def create_category(db: AsyncSession, name: str, description: str) -> dict:
    """Create a category; ``created_at`` and ``updated_at`` start equal."""
    name = check_category_name(name)
    description = check_category_description(description)

    now = utcnow()
    category = Category(name=name, description=description, created_at=now, updated_at=now)
    db.add(category)
    await _flush(db, "create category")

    logger.info("Category %s (%r) created", category.id, category.name)
    return _category_to_dict(category)


async def update_category(
    db: AsyncSession,
    requester: TokenClaims,
    category_id: int,
    name: str | None = None,
    description: str | None = None,
) -> dict:
    """Apply the fields that are not None and refresh ``updated_at``."""
    _require_admin(requester)
    category = await _get_category_or_404(db, category_id)

    if name is not None:
        name = check_category_name(name)
    if description is not None:
        description = check_category_description(description)

    if name is not None:
        category.name = name
    if description is not None:
        category.description = description
    category.updated_at = utcnow()
    await _flush(db, "update category")

    logger.info("Category %s updated by user %s", category_id, requester.user_id)
    return _category_to_dict(category)


async def delete_category(db: AsyncSession, requester: TokenClaims, category_id: int) -> None:
    """Remove a category and every association row that references it."""
    _require_admin(requester)
    category = await _get_category_or_404(db, category_id)

    try:
        result = await db.execute(
            delete(news_categories).where(news_categories.c.category_id == category_id)
        )
        await db.delete(category)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to delete category") from exc

    logger.info(
        "Category %s deleted by user %s (%d news association(s) removed)",
        category_id, requester.user_id, result.rowcount,
    )

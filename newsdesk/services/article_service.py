"""
Article service: business logic for the Article aggregate.

Design notes
------------
- An article and its ``news_categories`` rows are always written in the
  caller's transaction.  Service functions flush but do not commit; the
  transaction boundary is owned by the ``get_db`` dependency, which rolls
  back on any exception, so a failure part-way through leaves nothing
  behind.
- Category ids are checked before anything is written.  Unknown ids are
  rejected with ``ValidationError`` rather than silently dropped.
- Association rows are replaced wholesale (delete then insert) and removed
  explicitly before the article row is deleted.
- Mutation is allowed for the article's author or any admin.
"""
import logging

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.errors import ForbiddenError, NotFoundError, StorageError, ValidationError
from newsdesk.models import Article, Category, User, news_categories, utcnow
from newsdesk.security import TokenClaims
from newsdesk.validation import check_content, check_title

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _article_to_dict(article: Article, categories: list[dict]) -> dict:
    """Serialise an Article ORM instance plus its categories (detail view)."""
    return {
        "id": article.id,
        "title": article.title,
        "content": article.content,
        "author_id": article.author_id,
        "created_at": article.created_at,
        "updated_at": article.updated_at,
        "categories": categories,
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _dedupe(ids: list[int]) -> list[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


async def _flush(db: AsyncSession, action: str) -> None:
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"Failed to {action}") from exc


async def _get_article_or_404(db: AsyncSession, article_id: int) -> Article:
    result = await db.execute(select(Article).where(Article.id == article_id))
    article = result.scalar_one_or_none()
    if article is None:
        raise NotFoundError("News not found")
    return article


def _check_can_modify(requester: TokenClaims, article: Article) -> None:
    if not requester.is_admin and requester.user_id != article.author_id:
        logger.warning(
            "User %s denied modification of article %s owned by %s",
            requester.user_id, article.id, article.author_id,
        )
        raise ForbiddenError("Only the author or an admin can modify this news")


async def _check_categories_exist(db: AsyncSession, category_ids: list[int]) -> None:
    if not category_ids:
        return
    result = await db.execute(select(Category.id).where(Category.id.in_(category_ids)))
    found = set(result.scalars().all())
    missing = [cid for cid in category_ids if cid not in found]
    if missing:
        raise ValidationError(
            "Unknown category id(s): " + ", ".join(str(cid) for cid in missing)
        )


async def _insert_associations(db: AsyncSession, article_id: int, category_ids: list[int]) -> None:
    if not category_ids:
        return
    await db.execute(
        insert(news_categories),
        [{"news_id": article_id, "category_id": cid} for cid in category_ids],
    )


async def _load_categories(db: AsyncSession, article_id: int) -> list[dict]:
    """Return ``[{id, name}]`` for every category attached to *article_id*."""
    q = (
        select(Category.id, Category.name)
        .join(news_categories, news_categories.c.category_id == Category.id)
        .where(news_categories.c.news_id == article_id)
        .order_by(Category.id)
    )
    result = await db.execute(q)
    return [{"id": row.id, "name": row.name} for row in result.all()]


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_articles(db: AsyncSession) -> list[dict]:
    """Return every article's id, title and creation time, oldest id first."""
    q = select(Article.id, Article.title, Article.created_at).order_by(Article.id)
    result = await db.execute(q)
    return [
        {"id": row.id, "title": row.title, "created_at": row.created_at}
        for row in result.all()
    ]


async def get_article_detail(db: AsyncSession, article_id: int) -> dict:
    """
    Return the article with its categories.

    Raises NotFoundError when the article does not exist.
    """
    article = await _get_article_or_404(db, article_id)
    return _article_to_dict(article, await _load_categories(db, article_id))


async def create_article(
    db: AsyncSession,
    author: TokenClaims,
    title: str,
    content: str,
    category_ids: list[int] | None = None,
    author_id: int | None = None,
) -> dict:
    """
    Create an article and its category associations in one transaction.

    *author_id* defaults to the requester; an explicit value must name an
    existing user.
    """
    title = check_title(title)
    content = check_content(content)
    category_ids = _dedupe(category_ids or [])

    if author_id is None:
        author_id = author.user_id
    elif await db.get(User, author_id) is None:
        raise ValidationError(f"Unknown author id: {author_id}")

    await _check_categories_exist(db, category_ids)

    now = utcnow()
    article = Article(
        title=title,
        content=content,
        author_id=author_id,
        created_at=now,
        updated_at=now,
    )
    db.add(article)
    await _flush(db, "create news")
    try:
        await _insert_associations(db, article.id, category_ids)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to attach categories to news") from exc

    logger.info(
        "Article %s created by user %s with %d categories",
        article.id, author.user_id, len(category_ids),
    )
    return _article_to_dict(article, await _load_categories(db, article.id))


async def update_article(
    db: AsyncSession,
    requester: TokenClaims,
    article_id: int,
    title: str | None = None,
    content: str | None = None,
    category_ids: list[int] | None = None,
) -> dict:
    """
    Partially update an article.

    Only the arguments that are not None are applied.  Passing
    ``category_ids`` (even an empty list) replaces the whole category set.
    """
    article = await _get_article_or_404(db, article_id)
    _check_can_modify(requester, article)

    if title is not None:
        title = check_title(title)
    if content is not None:
        content = check_content(content)
    if category_ids is not None:
        category_ids = _dedupe(category_ids)
        await _check_categories_exist(db, category_ids)

    if title is not None:
        article.title = title
    if content is not None:
        article.content = content
    article.updated_at = utcnow()

    try:
        if category_ids is not None:
            await db.execute(
                delete(news_categories).where(news_categories.c.news_id == article_id)
            )
            await _insert_associations(db, article_id, category_ids)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to update news") from exc

    logger.info("Article %s updated by user %s", article_id, requester.user_id)
    return _article_to_dict(article, await _load_categories(db, article_id))


async def delete_article(db: AsyncSession, requester: TokenClaims, article_id: int) -> None:
    """Delete an article after removing its category associations."""
    article = await _get_article_or_404(db, article_id)
    _check_can_modify(requester, article)

    try:
        await db.execute(
            delete(news_categories).where(news_categories.c.news_id == article_id)
        )
        await db.delete(article)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to delete news") from exc

    logger.info("Article %s deleted by user %s", article_id, requester.user_id)

"""
Authenticated write routes.

Every route runs the authenticator first (router-level dependency).  News
and category creation plus all category writes also pass the admin gate;
news update/delete only need the author or an admin, which the article
service decides once it has loaded the article.  Each route commits before
returning its response.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from newsdesk.database import commit, get_db
from newsdesk.dependencies import get_current_identity, require_admin
from newsdesk.schemas import (
    ArticleCreate,
    ArticleDetail,
    ArticleUpdate,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MessageResponse,
    PathId,
)
from newsdesk.security import TokenClaims
from newsdesk.services import article_service, category_service

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_identity)],
)

# --- News ---

@router.post("/news", status_code=201, response_model=ArticleDetail)
async def create_news(
    data: ArticleCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.create_article(
        db,
        admin,
        data.title,
        data.content,
        data.category_ids,
        author_id=data.author_id,
    )
    await commit(db)
    return article

@router.put("/news/{article_id}", response_model=ArticleDetail)
async def update_news(
    article_id: PathId,
    data: ArticleUpdate,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.update_article(
        db,
        identity,
        article_id,
        title=data.title,
        content=data.content,
        category_ids=data.category_ids,
    )
    await commit(db)
    return article

@router.delete("/news/{article_id}", response_model=MessageResponse)
async def delete_news(
    article_id: PathId,
    identity: TokenClaims = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, identity, article_id)
    await commit(db)
    return {"message": "News deleted successfully"}

# --- Categories ---

@router.post("/categories", status_code=201, response_model=CategoryResponse)
async def create_category(
    data: CategoryCreate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.create_category(db, data.name, data.description)
    await commit(db)
    return category

@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: PathId,
    data: CategoryUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.update_category(
        db, admin, category_id, name=data.name, description=data.description
    )
    await commit(db)
    return category

@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: PathId,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await category_service.delete_category(db, admin, category_id)
    await commit(db)
    return {"message": "Category deleted successfully"}

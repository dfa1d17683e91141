from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from newsdesk.database import get_db
from newsdesk.schemas import ArticleDetail, ArticleSummary, PathId
from newsdesk.services import article_service

router = APIRouter(prefix="/news", tags=["news"])

@router.get("", response_model=list[ArticleSummary])
async def list_news(db: AsyncSession = Depends(get_db)):
    return await article_service.list_articles(db)

@router.get("/{article_id}", response_model=ArticleDetail)
async def get_news_detail(article_id: PathId, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article_detail(db, article_id)

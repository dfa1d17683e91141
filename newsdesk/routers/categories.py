from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from newsdesk.database import get_db
from newsdesk.schemas import CategoryResponse, PathId
from newsdesk.services import category_service

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await category_service.list_categories(db)

@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: PathId, db: AsyncSession = Depends(get_db)):
    return await category_service.get_category(db, category_id)

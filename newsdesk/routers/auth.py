from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from newsdesk.database import commit, get_db
from newsdesk.schemas import Credentials, LoginRequest, TokenResponse, UserResponse
from newsdesk.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=201, response_model=UserResponse)
async def register(data: Credentials, db: AsyncSession = Depends(get_db)):
    user = await auth_service.register(db, data.username, data.password)
    await commit(db)
    return user

@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange credentials for a bearer token valid for 24 hours by default."""
    return await auth_service.login(db, data.username, data.password)

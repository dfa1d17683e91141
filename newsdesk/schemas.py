from datetime import datetime
from typing import Annotated

from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field

from newsdesk.validation import ID_MAX, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

# Row ids are 32-bit integer columns.
EntityId = Annotated[int, Field(ge=1, le=ID_MAX)]
PathId = Annotated[int, Path(ge=1, le=ID_MAX)]


# --- Auth ---
# Text fields that the services strip before checking (title, content,
# category name and description, username) carry no bounds here; the
# newsdesk.validation checks decide, so HTTP and direct calls agree.

class Credentials(BaseModel):
    username: str
    password: str = Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class LoginRequest(BaseModel):
    # No bounds here: a bad login must look like any other failed login.
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str
    is_admin: bool


class UserResponse(BaseModel):
    id: int
    username: str
    is_admin: bool
    model_config = ConfigDict(from_attributes=True)


# --- Category ---

class CategoryCreate(BaseModel):
    name: str
    description: str


class CategoryUpdate(BaseModel):
    name: str | None = None
    description: str | None = None


class CategorySummary(BaseModel):
    id: int
    name: str


class CategoryResponse(CategorySummary):
    description: str | None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Article ---

class ArticleCreate(BaseModel):
    title: str
    content: str
    author_id: EntityId | None = None  # defaults to the requester
    category_ids: list[EntityId] = []


class ArticleUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    category_ids: list[EntityId] | None = None


class ArticleSummary(BaseModel):
    id: int
    title: str
    created_at: datetime


class ArticleDetail(BaseModel):
    id: int
    title: str
    content: str
    author_id: int
    created_at: datetime
    updated_at: datetime
    categories: list[CategorySummary] = []


# --- Misc ---

class MessageResponse(BaseModel):
    message: str

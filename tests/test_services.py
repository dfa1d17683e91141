"""
Direct service-layer tests: business logic without HTTP, including checks
on the raw ``news_categories`` rows that the endpoint tests cannot see.
"""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpers import make_identity
from newsdesk.errors import (
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    UsernameTakenError,
    ValidationError,
)
from newsdesk.models import Article, User, news_categories
from newsdesk.security import decode_access_token
from newsdesk.services import article_service, auth_service, category_service


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_user(db: AsyncSession, username: str = "svcuser", is_admin: bool = False) -> User:
    user = User(username=username, password_hash="x", is_admin=is_admin)
    db.add(user)
    await db.flush()
    return user


async def _association_ids(db: AsyncSession, article_id: int) -> set[int]:
    result = await db.execute(
        select(news_categories.c.category_id).where(news_categories.c.news_id == article_id)
    )
    return set(result.scalars().all())


async def _categories(db: AsyncSession, *names: str) -> list[dict]:
    return [
        await category_service.create_category(db, name, f"About {name}") for name in names
    ]


# ---------------------------------------------------------------------------
# article_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_articles_empty(db_session: AsyncSession):
    assert await article_service.list_articles(db_session) == []


@pytest.mark.asyncio
async def test_create_then_detail_has_exact_category_set(db_session: AsyncSession):
    author = await _create_user(db_session)
    cats = await _categories(db_session, "Tech", "Science", "Health")
    wanted = [cats[2]["id"], cats[0]["id"]]

    created = await article_service.create_article(
        db_session, make_identity(author.id), "Title", "Body", wanted
    )
    detail = await article_service.get_article_detail(db_session, created["id"])

    assert {c["id"] for c in detail["categories"]} == set(wanted)
    assert await _association_ids(db_session, created["id"]) == set(wanted)


@pytest.mark.asyncio
async def test_create_deduplicates_category_ids(db_session: AsyncSession):
    author = await _create_user(db_session)
    (tech,) = await _categories(db_session, "Tech")

    created = await article_service.create_article(
        db_session, make_identity(author.id), "Title", "Body", [tech["id"], tech["id"]]
    )
    assert created["categories"] == [{"id": tech["id"], "name": "Tech"}]


@pytest.mark.asyncio
async def test_create_sets_equal_timestamps(db_session: AsyncSession):
    author = await _create_user(db_session)
    created = await article_service.create_article(
        db_session, make_identity(author.id), "Title", "Body", []
    )
    assert created["created_at"] == created["updated_at"]
    assert created["author_id"] == author.id


@pytest.mark.asyncio
async def test_create_with_unknown_category_writes_nothing(db_session: AsyncSession):
    author = await _create_user(db_session)
    with pytest.raises(ValidationError):
        await article_service.create_article(
            db_session, make_identity(author.id), "Title", "Body", [12345]
        )
    count = (await db_session.execute(select(func.count()).select_from(Article))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "title, content",
    [("", "Body"), ("   ", "Body"), ("x" * 101, "Body"), ("Title", ""), ("Title", "  ")],
)
async def test_create_validates_title_and_content(db_session: AsyncSession, title, content):
    author = await _create_user(db_session)
    with pytest.raises(ValidationError):
        await article_service.create_article(
            db_session, make_identity(author.id), title, content, []
        )


@pytest.mark.asyncio
async def test_list_articles_ascending_id(db_session: AsyncSession):
    author = await _create_user(db_session)
    identity = make_identity(author.id)
    for title in ("One", "Two", "Three"):
        await article_service.create_article(db_session, identity, title, "Body", [])

    items = await article_service.list_articles(db_session)
    assert [i["title"] for i in items] == ["One", "Two", "Three"]
    assert [i["id"] for i in items] == sorted(i["id"] for i in items)


@pytest.mark.asyncio
async def test_get_article_detail_not_found(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await article_service.get_article_detail(db_session, 99999)


@pytest.mark.asyncio
async def test_update_title_only(db_session: AsyncSession):
    author = await _create_user(db_session)
    identity = make_identity(author.id)
    (tech,) = await _categories(db_session, "Tech")
    created = await article_service.create_article(
        db_session, identity, "Old", "Body", [tech["id"]]
    )

    updated = await article_service.update_article(
        db_session, identity, created["id"], title="New"
    )
    assert updated["title"] == "New"
    assert updated["content"] == "Body"
    assert await _association_ids(db_session, created["id"]) == {tech["id"]}
    assert updated["updated_at"] >= created["created_at"]


@pytest.mark.asyncio
async def test_update_replaces_category_set(db_session: AsyncSession):
    author = await _create_user(db_session)
    identity = make_identity(author.id)
    tech, science, health = await _categories(db_session, "Tech", "Science", "Health")
    created = await article_service.create_article(
        db_session, identity, "Title", "Body", [tech["id"], science["id"]]
    )

    await article_service.update_article(
        db_session, identity, created["id"], category_ids=[health["id"]]
    )
    assert await _association_ids(db_session, created["id"]) == {health["id"]}

    await article_service.update_article(db_session, identity, created["id"], category_ids=[])
    assert await _association_ids(db_session, created["id"]) == set()


@pytest.mark.asyncio
async def test_update_by_stranger_is_forbidden_and_mutates_nothing(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    stranger = await _create_user(db_session, "stranger")
    (tech,) = await _categories(db_session, "Tech")
    created = await article_service.create_article(
        db_session, make_identity(author.id), "Mine", "Body", [tech["id"]]
    )

    with pytest.raises(ForbiddenError):
        await article_service.update_article(
            db_session, make_identity(stranger.id), created["id"], title="Theirs", category_ids=[]
        )

    detail = await article_service.get_article_detail(db_session, created["id"])
    assert detail["title"] == "Mine"
    assert await _association_ids(db_session, created["id"]) == {tech["id"]}


@pytest.mark.asyncio
async def test_admin_can_update_any_article(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    admin = await _create_user(db_session, "boss", is_admin=True)
    created = await article_service.create_article(
        db_session, make_identity(author.id), "Title", "Body", []
    )

    updated = await article_service.update_article(
        db_session, make_identity(admin.id, is_admin=True), created["id"], content="Edited"
    )
    assert updated["content"] == "Edited"
    assert updated["author_id"] == author.id


@pytest.mark.asyncio
async def test_update_missing_article(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await article_service.update_article(
            db_session, make_identity(1, is_admin=True), 99999, title="Ghost"
        )


@pytest.mark.asyncio
async def test_delete_removes_associations(db_session: AsyncSession):
    author = await _create_user(db_session)
    identity = make_identity(author.id)
    tech, science = await _categories(db_session, "Tech", "Science")
    created = await article_service.create_article(
        db_session, identity, "Title", "Body", [tech["id"], science["id"]]
    )

    await article_service.delete_article(db_session, identity, created["id"])

    assert await _association_ids(db_session, created["id"]) == set()
    with pytest.raises(NotFoundError):
        await article_service.get_article_detail(db_session, created["id"])


@pytest.mark.asyncio
async def test_delete_twice_reports_not_found(db_session: AsyncSession):
    author = await _create_user(db_session)
    identity = make_identity(author.id)
    created = await article_service.create_article(db_session, identity, "T", "B", [])

    await article_service.delete_article(db_session, identity, created["id"])
    with pytest.raises(NotFoundError):
        await article_service.delete_article(db_session, identity, created["id"])


@pytest.mark.asyncio
async def test_delete_by_stranger_is_forbidden(db_session: AsyncSession):
    author = await _create_user(db_session, "author")
    stranger = await _create_user(db_session, "stranger")
    created = await article_service.create_article(
        db_session, make_identity(author.id), "T", "B", []
    )

    with pytest.raises(ForbiddenError):
        await article_service.delete_article(db_session, make_identity(stranger.id), created["id"])
    assert (await article_service.get_article_detail(db_session, created["id"]))["title"] == "T"


# ---------------------------------------------------------------------------
# category_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_category_detaches_articles(db_session: AsyncSession):
    author = await _create_user(db_session)
    admin = make_identity(1, is_admin=True)
    tech, science = await _categories(db_session, "Tech", "Science")
    created = await article_service.create_article(
        db_session, make_identity(author.id), "T", "B", [tech["id"], science["id"]]
    )

    await category_service.delete_category(db_session, admin, tech["id"])

    detail = await article_service.get_article_detail(db_session, created["id"])
    assert detail["categories"] == [{"id": science["id"], "name": "Science"}]
    remaining = await db_session.execute(
        select(func.count()).select_from(news_categories)
        .where(news_categories.c.category_id == tech["id"])
    )
    assert remaining.scalar_one() == 0


@pytest.mark.asyncio
async def test_delete_category_requires_admin(db_session: AsyncSession):
    (tech,) = await _categories(db_session, "Tech")
    with pytest.raises(ForbiddenError):
        await category_service.delete_category(db_session, make_identity(5), tech["id"])


@pytest.mark.asyncio
async def test_delete_missing_category(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await category_service.delete_category(db_session, make_identity(1, is_admin=True), 99999)


@pytest.mark.asyncio
async def test_update_category_refreshes_updated_at(db_session: AsyncSession):
    (tech,) = await _categories(db_session, "Tech")
    updated = await category_service.update_category(
        db_session, make_identity(1, is_admin=True), tech["id"], description="Gadgets and code"
    )
    assert updated["name"] == "Tech"
    assert updated["description"] == "Gadgets and code"
    assert updated["updated_at"] >= tech["updated_at"]


@pytest.mark.asyncio
async def test_create_category_validates_bounds(db_session: AsyncSession):
    with pytest.raises(ValidationError):
        await category_service.create_category(db_session, "ab", "Long enough")
    with pytest.raises(ValidationError):
        await category_service.create_category(db_session, "Valid", "x" * 256)


# ---------------------------------------------------------------------------
# auth_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_hashes_password(db_session: AsyncSession):
    created = await auth_service.register(db_session, "alice", "alice-password")
    user = await db_session.get(User, created["id"])
    assert user.password_hash != "alice-password"
    assert user.is_admin is False


@pytest.mark.asyncio
async def test_register_duplicate_raises_username_taken(db_session: AsyncSession):
    await auth_service.register(db_session, "alice", "alice-password")
    with pytest.raises(UsernameTakenError):
        await auth_service.register(db_session, "alice", "another-password")
    await db_session.rollback()


@pytest.mark.asyncio
async def test_login_issues_token_with_identity(db_session: AsyncSession):
    created = await auth_service.create_user(db_session, "root", "root-password", is_admin=True)
    result = await auth_service.login(db_session, "root", "root-password")
    assert result["is_admin"] is True
    claims = decode_access_token(result["token"])
    assert claims.user_id == created["id"]
    assert claims.username == "root"


@pytest.mark.asyncio
async def test_login_failures_share_error(db_session: AsyncSession):
    await auth_service.register(db_session, "alice", "alice-password")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await auth_service.login(db_session, "alice", "wrong-password")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        await auth_service.login(db_session, "bob", "alice-password")

    assert wrong_password.value.message == unknown_user.value.message

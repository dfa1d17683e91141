"""Small helpers shared by the test modules."""
from datetime import datetime, timedelta, timezone

from newsdesk.security import TokenClaims


def make_identity(user_id: int, username: str = "someone", is_admin: bool = False) -> TokenClaims:
    """Build verified-token claims for direct service calls."""
    return TokenClaims(
        sub=user_id,
        username=username,
        is_admin=is_admin,
        exp=datetime.now(timezone.utc) + timedelta(hours=1),
    )


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

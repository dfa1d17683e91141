"""
Input bounds shared by the request schemas and the service layer.

Both layers read the same constants so an endpoint and a direct service
call reject the same inputs with the same message.
"""
from newsdesk.errors import ValidationError

ID_MAX = 2**31 - 1

TITLE_MIN_LEN = 1
TITLE_MAX_LEN = 100

CATEGORY_NAME_MIN_LEN = 3
CATEGORY_NAME_MAX_LEN = 100
CATEGORY_DESCRIPTION_MIN_LEN = 3
CATEGORY_DESCRIPTION_MAX_LEN = 255

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def check_length(label: str, value: str, min_len: int, max_len: int) -> str:
    """Return *value* stripped, or raise ValidationError when out of bounds."""
    stripped = value.strip() if value is not None else ""
    if not (min_len <= len(stripped) <= max_len):
        raise ValidationError(
            f"{label} must be between {min_len} and {max_len} characters"
        )
    return stripped


def check_title(title: str) -> str:
    return check_length("Title", title, TITLE_MIN_LEN, TITLE_MAX_LEN)


def check_content(content: str) -> str:
    if content is None or not content.strip():
        raise ValidationError("Content is required")
    return content


def check_category_name(name: str) -> str:
    return check_length("Category name", name, CATEGORY_NAME_MIN_LEN, CATEGORY_NAME_MAX_LEN)


def check_category_description(description: str) -> str:
    return check_length(
        "Category description",
        description,
        CATEGORY_DESCRIPTION_MIN_LEN,
        CATEGORY_DESCRIPTION_MAX_LEN,
    )


def check_username(username: str) -> str:
    return check_length("Username", username, USERNAME_MIN_LEN, USERNAME_MAX_LEN)


def check_password(password: str) -> str:
    # Passwords are not stripped; whitespace is significant.
    if password is None or not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise ValidationError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
        )
    return password

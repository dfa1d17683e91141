from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Required: a missing value aborts startup.
    DATABASE_URL: str
    JWT_SECRET: SecretStr

    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Tokens
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    # bcrypt cost; 12 is a good default for security vs speed
    BCRYPT_ROUNDS: int = 12

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: float = 10.0

    # Per-request deadline enforced by RequestMiddleware
    REQUEST_TIMEOUT_SECONDS: float = 15.0

    CORS_ORIGINS: list[str] = ["*"]

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        return v.strip()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_EXPIRE_HOURS")
    @classmethod
    def validate_jwt_expire_hours(cls, v: int) -> int:
        if v < 1 or v > 24 * 30:
            raise ValueError("JWT_EXPIRE_HOURS must be between 1 and 720")
        return v


settings = Settings()

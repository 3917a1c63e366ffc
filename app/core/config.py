
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Marketplace API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL via asyncpg or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./marketplace_dev.db",
        alias="DATABASE_URL",
    )

    # Vendor accounts
    password_hash_rounds: int = Field(default=10, alias="PASSWORD_HASH_ROUNDS")
    default_avatar_url: str = Field(
        default="https://ui-avatars.com/api/", alias="DEFAULT_AVATAR_URL",
    )

    # Audit trail of write requests
    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()

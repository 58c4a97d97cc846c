"""Session configuration via environment variables."""

from pydantic_settings import BaseSettings

from .codec import KeyPair
from .sessions import Options


class Settings(BaseSettings):
    session_secret: str = "change-me-in-production"
    session_encryption_key: str = ""  # Fernet key; empty = sign only
    session_previous_secret: str = ""  # Kept for verifying during rotation
    session_previous_encryption_key: str = ""
    session_max_age: int = 30 * 24 * 3600
    session_path: str = "/"
    session_domain: str = ""
    session_https_only: bool = False
    session_same_site: str = "lax"
    session_backend: str = "memory"  # "memory", "mongodb" or "dynamodb"
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "sessions"
    mongodb_collection: str = "sessions"
    mongodb_timeout: float | None = None
    dynamodb_table: str = "sessions"
    dynamodb_endpoint: str = ""  # For local DynamoDB
    dynamodb_region: str = "us-west-2"

    @property
    def key_pairs(self) -> list[KeyPair]:
        pairs: list[KeyPair] = [
            (self.session_secret, self.session_encryption_key or None)
        ]
        if self.session_previous_secret:
            pairs.append(
                (
                    self.session_previous_secret,
                    self.session_previous_encryption_key or None,
                )
            )
        return pairs

    @property
    def options(self) -> Options:
        return Options(
            path=self.session_path,
            domain=self.session_domain or None,
            max_age=self.session_max_age,
            secure=self.session_https_only,
            same_site=self.session_same_site,
        )

    model_config = {"env_prefix": "", "case_sensitive": False}


settings: Settings | None = None


def get_settings() -> Settings:
    global settings
    if settings is None:
        settings = Settings()
    return settings


def override_settings(s: Settings | None) -> None:
    """For testing: inject a Settings instance (None resets)."""
    global settings
    settings = s

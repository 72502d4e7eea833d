"""
Settings for the API and the upload tooling.

Values come from the environment or a .env file.
Variable names match the ones the web frontend already uses
(IMAGEKIT_PRIVATE_KEY, IMAGEKIT_PUBLIC_KEY, MONGO_URI), so one .env file
serves both.

Mock modes enable local development without an ImageKit account or a
running MongoDB.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Every field maps to an upper-case env var of the same name.

    List-valued settings (api_keys, cors_origins) are comma-separated strings.
    """

    # API Configuration
    api_title: str = "ReelHub API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys accepted for publishing videos."
    )

    # ImageKit Configuration
    imagekit_private_key: str = Field(
        default="",
        description="ImageKit private key. Signs upload credentials, never leaves the server."
    )
    imagekit_public_key: str = Field(
        default="",
        description="ImageKit public key. Sent to uploaders alongside the signature."
    )
    imagekit_url_endpoint: str = Field(
        default="https://ik.imagekit.io/demo",
        description="ImageKit URL endpoint that serves uploaded files"
    )
    imagekit_upload_url: str = Field(
        default="https://upload.imagekit.io/api/v1/files/upload",
        description="ImageKit direct upload API"
    )
    imagekit_mock_mode: bool = Field(
        default=False,
        description="Sign and upload against an in-memory fake instead of ImageKit."
    )
    upload_token_ttl_seconds: int = Field(
        default=1800,
        description="Lifetime of a signed upload credential. ImageKit rejects anything over an hour."
    )

    # MongoDB Configuration
    mongo_uri: Optional[str] = Field(
        default=None,
        description="MongoDB connection string"
    )
    mongo_database: str = Field(
        default="reelhub",
        description="Database holding the videos collection"
    )
    mongo_collection: str = Field(
        default="videos",
        description="Collection holding video records"
    )
    mongo_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long to wait for a reachable MongoDB server before failing a request"
    )
    mongo_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory collection instead of MongoDB. Enables local dev without a DB."
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=100,
        description="Maximum video file size in MB accepted by the upload flow."
    )
    feed_limit: int = Field(
        default=50,
        description="Maximum number of videos returned by the feed endpoint."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Names of env vars that must be set but aren't.

        Keys for a service in mock mode are never required.
        """
        missing = []

        # ImageKit keys only required if not in mock mode
        if not self.imagekit_mock_mode:
            if not self.imagekit_private_key:
                missing.append("IMAGEKIT_PRIVATE_KEY")
            if not self.imagekit_public_key:
                missing.append("IMAGEKIT_PUBLIC_KEY")

        # MongoDB only required if not in mock mode
        if not self.mongo_mock_mode and not self.mongo_uri:
            missing.append("MONGO_URI")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Settings for this process, read once.

    Tests override this dependency instead of touching the environment.
    """
    return Settings()

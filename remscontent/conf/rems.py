"""REMS connection configuration."""

from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class RemsConfig(BaseSettings):
    """REMS connection configuration."""

    model_config = {"extra": "allow"}  # Allow creation using the constructor.

    REMS_ENDPOINT: str = Field(description="REMS instance endpoint (DNS name only, not URI)")
    REMS_API_USER: str = Field(description="REMS API user")
    REMS_API_KEY: SecretStr = Field(description="REMS API key")
    REMS_SCHEME: str = Field(default="https", description="REMS URL scheme")
    REMS_TIMEOUT: int = Field(default=10, description="REMS request timeout in seconds")


def rems_config(**overrides: Any) -> RemsConfig:
    """Get REMS configuration.

    Explicit values take precedence over the environment. Values that are None are ignored.
    """

    # Avoid loading environment variables when module is imported.
    return RemsConfig(**{key: value for key, value in overrides.items() if value is not None})

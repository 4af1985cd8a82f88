"""Client settings loaded from environment variables via Pydantic."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Connection and behaviour settings for :class:`xsoar_client.Client`."""

    model_config = {"env_prefix": "XSOAR_", "case_sensitive": False}

    # API endpoint
    base_url: str = ""

    # Advanced API key
    api_key_id: str = ""
    api_key: str = ""

    # HTTP
    timeout_seconds: float = 30.0
    user_agent: str = "xsoar-client/1.0"
    max_response_bytes: int = 10 * 1024 * 1024

    # Pagination
    default_page_size: int = 100


def get_settings() -> ClientSettings:
    """Return settings read from the current environment."""
    return ClientSettings()

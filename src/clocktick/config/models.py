"""Configuration models using Pydantic."""

from pydantic import BaseModel, Field, SecretStr

from clocktick.auth import MAX_REQUEST_AGE_SECONDS
from clocktick.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS


class ConfigError(Exception):
    """Configuration error."""

    pass


class ServerConfig(BaseModel):
    """Configuration for the webhook HTTP server."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    webhook_path: str = "/webhook"


class ClocktickConfig(BaseModel):
    """Root configuration model.

    Secrets are usually supplied through the environment rather than the
    config file; see :func:`clocktick.config.loader.load_config`.
    """

    api_key: SecretStr | None = None
    encryption_key: SecretStr | None = None
    # Hex-encoded Ed25519 public key of the scheduling service
    public_key: str | None = None
    default_endpoint_id: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_age: int = Field(default=MAX_REQUEST_AGE_SECONDS, gt=0)
    server: ServerConfig = Field(default_factory=ServerConfig)

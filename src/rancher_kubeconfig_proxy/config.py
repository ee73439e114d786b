"""Configuration for rancher-kubeconfig-proxy."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rancher_kubeconfig_proxy.utils.errors import ConfigurationError

TOKEN_SEPARATOR = ":"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ProxyConfig(BaseSettings):
    """Configuration for talking to Rancher and writing the kubeconfig.

    Loaded from environment variables with RANCHER_ prefix or from a .env
    file. Values passed to the constructor take precedence over both.
    """

    model_config = SettingsConfigDict(
        env_prefix="RANCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Rancher connection
    url: str | None = Field(
        default=None,
        description="Rancher server URL (e.g. https://rancher.example.com)",
    )
    token: str | None = Field(
        default=None,
        description="Combined API token in 'access_key:secret_key' form",
    )
    access_key: str | None = Field(
        default=None,
        description="Rancher API access key (username part of the token)",
    )
    secret_key: str | None = Field(
        default=None,
        description="Rancher API secret key (password part of the token)",
    )

    # TLS
    insecure_skip_tls_verify: bool = Field(
        default=False,
        description="Skip TLS certificate verification",
    )
    ca_cert: Path | None = Field(
        default=None,
        description="Path to a CA certificate bundle for TLS verification",
    )

    # Output
    cluster_prefix: str = Field(
        default="",
        description="Prefix added to cluster, user and context names",
    )
    kubeconfig_output: Path | None = Field(
        default=None,
        description="Where to write the kubeconfig (stdout when unset)",
    )

    # Fetching
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for each Rancher API request",
    )
    fetch_concurrency: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum number of kubeconfigs fetched at the same time",
    )

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    def validate_auth_config(self) -> list[str]:
        """Validate connection and authentication settings.

        Normalizes the URL and splits a combined token into access and
        secret keys.

        Returns:
            Non-fatal warnings about the configuration.

        Raises:
            ConfigurationError: If the URL or credentials are missing,
                contradictory or malformed.
        """
        warnings: list[str] = []

        if not self.url:
            raise ConfigurationError("Rancher URL is required (--url or RANCHER_URL)")
        self.url = self.url.rstrip("/")

        if self.token:
            parts = self.token.split(TOKEN_SEPARATOR)
            if len(parts) != 2 or not all(parts):
                raise ConfigurationError(
                    "Invalid token format, expected 'access_key:secret_key'"
                )
            access_key, secret_key = parts
            if (self.access_key and self.access_key != access_key) or (
                self.secret_key and self.secret_key != secret_key
            ):
                raise ConfigurationError(
                    "Token and access_key/secret_key were both given and do not match"
                )
            self.access_key = access_key
            self.secret_key = secret_key
        elif not (self.access_key and self.secret_key):
            raise ConfigurationError(
                "Either token or access_key/secret_key pair is required"
            )

        if self.ca_cert is not None and not self.ca_cert.is_file():
            raise ConfigurationError(f"CA certificate file not found: {self.ca_cert}")

        if self.insecure_skip_tls_verify:
            if self.ca_cert is not None:
                warnings.append("TLS verification is disabled, ca_cert will be ignored")
            else:
                warnings.append("TLS verification is disabled")

        if not self.url.startswith("https://"):
            warnings.append(f"Rancher URL {self.url} does not use HTTPS")

        return warnings

    def get_basic_auth(self) -> tuple[str, str]:
        """Get the basic auth credentials for the Rancher API."""
        if not (self.access_key and self.secret_key):
            raise ConfigurationError("Credentials not configured, call validate_auth_config()")
        return self.access_key, self.secret_key

"""Centralized operator settings using pydantic-settings.

This module provides a single source of truth for all operator configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from postgres_operator.constants import DEFAULT_POSTGRES_IMAGE


class Settings(BaseSettings):
    """Operator configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )
    log_health_probes: bool = Field(
        default=False,
        validation_alias="LOG_HEALTH_PROBES",
        description="Log health probe and metrics scrape requests",
    )
    webhook_log_level: str = Field(
        default="INFO",
        validation_alias="WEBHOOK_LOG_LEVEL",
        description="Log level for the admission webhook handlers",
    )

    # Namespace watching
    namespaces: str = Field(
        default="",
        validation_alias="NAMESPACES",
        description="Comma-separated list of namespaces to watch (empty = all namespaces)",
    )

    # Defaulting
    postgres_image_name: str = Field(
        default=DEFAULT_POSTGRES_IMAGE,
        validation_alias="POSTGRES_IMAGE_NAME",
        description="PostgreSQL image used when a Cluster does not set imageName",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=8081,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    # Admission webhooks
    enable_webhooks: bool = Field(
        default=True,
        validation_alias="ENABLE_WEBHOOKS",
        description="Enable admission webhooks for defaulting and validation",
    )
    webhook_port: int = Field(
        default=9443,
        validation_alias="WEBHOOK_PORT",
        description="Port for admission webhook server",
    )
    webhook_cert_dir: str = Field(
        default="/tmp/k8s-webhook-server/serving-certs",
        validation_alias="WEBHOOK_CERT_DIR",
        description="Directory holding tls.crt and tls.key for the webhook server",
    )

    @property
    def watched_namespaces(self) -> list[str] | None:
        """Parse watched namespaces from comma-separated string.

        Returns:
            List of namespace names, or None to watch all namespaces
        """
        if self.namespaces:
            return [ns.strip() for ns in self.namespaces.split(",") if ns.strip()]
        return None


# Global settings instance - initialized once at module import
settings = Settings()

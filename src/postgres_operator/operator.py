#!/usr/bin/env python3
"""
PostgreSQL Operator - Main entry point for the Kopf-based admission layer.

The operator serves the admission webhooks of the Cluster resource:
- Defaulting of new Clusters (bootstrap, image, update strategy, parameters)
- Validation of creations and updates, reporting every field error at once

Usage:
    python -m postgres_operator.operator run
    python -m postgres_operator.operator bootstrap /controller/manager

Environment Variables:
    NAMESPACES: Comma-separated list of namespaces to watch
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    POSTGRES_IMAGE_NAME: Image used when a Cluster does not set imageName
"""

import argparse
import logging
import sys
from pathlib import Path

import kopf

from postgres_operator.errors import BootstrapError, ConfigurationError
from postgres_operator.observability.logging import setup_structured_logging
from postgres_operator.observability.metrics import MetricsServer
from postgres_operator.settings import settings as operator_settings
from postgres_operator.utils.bootstrap import bootstrap_into
from postgres_operator.utils.images import ImageVersionError, get_image_version

# Kopf refuses to start when admission handlers are registered without an
# admission server, so the webhook module is only imported when enabled.
if operator_settings.enable_webhooks:
    from postgres_operator.webhooks import cluster as cluster_webhook  # noqa: F401

# Global reference to metrics server for cleanup
_global_metrics_server: MetricsServer | None = None


def configure_logging() -> None:
    """Configure structured logging for the operator based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level.upper(),
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
        log_health_probes=operator_settings.log_health_probes,
        webhook_log_level=operator_settings.webhook_log_level,
    )


def check_default_image(image_name: str) -> None:
    """
    Ensure the configured default image carries a usable version tag.

    Raises:
        ConfigurationError: If no PostgreSQL version can be read from the tag
    """
    try:
        version = get_image_version(image_name)
    except ImageVersionError as e:
        raise ConfigurationError(
            f"Default PostgreSQL image {image_name!r} is unusable: {e}",
            user_action="Set POSTGRES_IMAGE_NAME to an image tagged with a PostgreSQL version",
        ) from e

    logging.info(f"Default PostgreSQL image {image_name} (version {version})")


@kopf.on.startup()
async def startup_handler(settings: kopf.OperatorSettings, **_) -> None:
    """
    Operator startup configuration.

    Checks the default image and starts the metrics endpoint.
    """
    logging.info("Starting PostgreSQL Operator...")

    settings.watching.reconnect_backoff = 1.0

    check_default_image(operator_settings.postgres_image_name)

    watched_namespaces = operator_settings.watched_namespaces
    if watched_namespaces:
        logging.info(f"Watching namespaces: {', '.join(watched_namespaces)}")
    else:
        logging.info("Watching all namespaces (cluster-wide mode)")

    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port, host=operator_settings.metrics_host
        )
        await metrics_server.start()

        global _global_metrics_server
        _global_metrics_server = metrics_server
    except OSError as e:
        logging.error(f"Failed to start metrics server: {e}")
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(**_) -> None:
    """Stop the metrics server when the operator shuts down."""
    logging.info("Shutting down PostgreSQL Operator...")

    global _global_metrics_server
    if _global_metrics_server:
        await _global_metrics_server.stop()
        _global_metrics_server = None


def build_kopf_settings() -> kopf.OperatorSettings:
    """
    Build the kopf settings, including the admission webhook server.

    Webhook configurations are managed by the deployment manifests, so
    kopf's own management of them is disabled.
    """
    settings_obj = kopf.OperatorSettings()
    settings_obj.admission.managed = None

    if operator_settings.enable_webhooks:
        cert_dir = Path(operator_settings.webhook_cert_dir)
        settings_obj.admission.server = kopf.WebhookServer(
            port=operator_settings.webhook_port,
            host="0.0.0.0",
            certfile=str(cert_dir / "tls.crt"),
            pkeyfile=str(cert_dir / "tls.key"),
        )
        logging.info(
            f"Admission webhooks ENABLED on port {operator_settings.webhook_port} "
            f"using certificates from {cert_dir}"
        )
    else:
        settings_obj.admission.server = None
        logging.info("Admission webhooks DISABLED")

    return settings_obj


def run_operator() -> None:
    """Run the kopf operator until interrupted."""
    settings_obj = build_kopf_settings()
    watched_namespaces = operator_settings.watched_namespaces

    try:
        if watched_namespaces:
            kopf.run(namespaces=watched_namespaces, settings=settings_obj)
        else:
            kopf.run(clusterwide=True, settings=settings_obj)
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)


def run_bootstrap(target: str) -> None:
    """Copy the running executable into the target path, exiting 1 on failure."""
    executable = Path(sys.argv[0]).resolve()
    try:
        bootstrap_into(executable, target)
    except BootstrapError as e:
        logging.error(f"Bootstrap failed: {e}")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="postgres-operator",
        description="Admission webhooks for PostgreSQL Cluster resources",
    )
    subcommands = parser.add_subparsers(dest="command")

    subcommands.add_parser("run", help="Run the operator (default)")

    bootstrap = subcommands.add_parser(
        "bootstrap", help="Copy the operator executable into a shared volume"
    )
    bootstrap.add_argument("target", help="Destination file path")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the operator.

    Without a subcommand the operator runs, as with ``run``.
    """
    configure_logging()

    args = build_parser().parse_args(argv)

    if args.command == "bootstrap":
        run_bootstrap(args.target)
        return

    run_operator()


if __name__ == "__main__":
    main()

"""Structlog-based logging configuration for the species catalog.

This module provides structured logging configuration using structlog.
Modules keep using ``logging.getLogger(__name__)``; the root handler set up
here renders their records through the configured output.

Supports different deployment targets:
- Docker / production: JSON lines on stdout
- Development: human-readable console output (JSON on request)
"""

import logging
import os
import sys
from collections.abc import Callable
from importlib import metadata
from typing import Any

import structlog

from speciescatalog.config.models import SpeciesCatalogConfig


def is_docker_environment() -> bool:
    """Check if running in a Docker container."""
    return os.path.exists("/.dockerenv") or os.environ.get("DOCKER_CONTAINER") == "true"


def get_package_version() -> str:
    """Get the installed package version, or 'unknown' when not installed."""
    try:
        return metadata.version("speciescatalog")
    except metadata.PackageNotFoundError:
        return "unknown"


def get_deployment_environment() -> str:
    """Get deployment environment with 'production' fallback."""
    if is_docker_environment():
        return "docker"
    elif os.environ.get("SPECIESCATALOG_ENV") == "development":
        return "development"
    else:
        return "production"


def _add_static_context(extra_fields: dict[str, str]) -> Callable:
    """Processor to add static context fields to all log entries."""

    def processor(
        logger: structlog.BoundLogger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.update(extra_fields)
        return event_dict

    return processor


def _use_json_output(config: SpeciesCatalogConfig, environment: str) -> bool:
    """Decide between JSON and console rendering."""
    if environment == "development":
        return os.environ.get("SPECIESCATALOG_JSON_LOGS", "false").lower() == "true"
    if config.logging.json_logs is not None:
        return config.logging.json_logs
    return True


def _configure_processors(config: SpeciesCatalogConfig, environment: str) -> list:
    """Configure structlog processors based on environment."""
    extra_fields = {
        "service": "speciescatalog",
        "version": get_package_version(),
        "deployment": environment,
        **config.logging.extra_fields,
    }
    if config.site_name:
        extra_fields["site_name"] = config.site_name

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(extra_fields),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if config.logging.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if _use_json_output(config, environment):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    return processors


def _configure_handlers(config: SpeciesCatalogConfig) -> None:
    """Route the standard library root logger to stdout at the configured level."""
    root_logger = logging.getLogger()
    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)


def configure_structlog(config: SpeciesCatalogConfig) -> None:
    """Configure structlog-based logging system.

    Args:
        config: The SpeciesCatalogConfig instance containing logging settings.
    """
    environment = get_deployment_environment()

    structlog.configure(
        processors=_configure_processors(config, environment),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.logging.level.upper(), logging.INFO)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_handlers(config)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Structured logging configured",
        version=get_package_version(),
        log_level=config.logging.level,
        environment=environment,
        json_output=_use_json_output(config, environment),
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)

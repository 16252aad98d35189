"""Logging infrastructure for AI Observability Core.

@public

Key components:
    get_pipeline_logger: Factory function for creating Prefect-integrated loggers
    setup_logging: Initialize logging configuration from YAML or defaults
    LoggingConfig: Configuration class for logging settings

Example:
    >>> from ai_observability_core.logging import get_pipeline_logger
    >>>
    >>> logger = get_pipeline_logger(__name__)
    >>> logger.info("Storage ready")

Note:
    Use get_pipeline_logger() rather than logging.getLogger() so every
    module shares the same configuration.
"""

from .logging_config import LoggingConfig, get_pipeline_logger, setup_logging

__all__ = [
    "LoggingConfig",
    "setup_logging",
    "get_pipeline_logger",
]

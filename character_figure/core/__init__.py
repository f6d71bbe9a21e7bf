"""
Core utilities and configuration for the character figure backend.

This package provides core functionality including logging configuration,
monitoring, database setup, and shared domain models.
"""

from character_figure.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]

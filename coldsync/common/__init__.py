"""Common utilities for ColdSync."""

from .logger import setup_logger, setup_from_settings, get_logger

__all__ = ["get_logger", "setup_from_settings", "setup_logger"]

"""
Utility functions and helpers
"""
from homequote.utils.logging import get_logger, app_logger

__all__ = ["get_logger", "app_logger"]

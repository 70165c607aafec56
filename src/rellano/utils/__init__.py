"""Utility modules for rellano.

Provides:
- logger: get_logger for namespaced logging
"""

from rellano.utils.logger import get_logger

__all__ = ["get_logger"]

# src/common/__init__.py
"""
Общие константы и логгер.
"""

from src.common.logger import get_logger, log_info, log_error, log_warning, log_debug
from src.common.constants import StalenessStatus, TypeMsg

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "StalenessStatus",
    "TypeMsg",
]

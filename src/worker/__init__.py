# src/worker/__init__.py
"""
Фоновые периодические воркеры.
"""

from src.worker.base import PeriodicWorker
from src.worker.cleanup import StaleLocationCleanupWorker

__all__ = ["PeriodicWorker", "StaleLocationCleanupWorker"]

"""
Tasks package for autonomous background task selection.
Provides the background task contracts and the task catalog.
"""

__version__ = "1.0.0"

from .base import (
    BackgroundTask,
    RiskLevel,
    TaskCategory,
    TaskDescriptor,
    TaskMetadata,
    TaskPriority,
    TaskResult,
)
from .catalog import Candidate, TaskCatalog, describe_catalog

__all__ = [
    "BackgroundTask",
    "RiskLevel",
    "TaskCategory",
    "TaskDescriptor",
    "TaskMetadata",
    "TaskPriority",
    "TaskResult",
    "Candidate",
    "TaskCatalog",
    "describe_catalog",
]

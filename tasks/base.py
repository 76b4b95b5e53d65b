#!/usr/bin/env python3
"""
Background task contracts for autonomous task selection.

Concrete background tasks (market research, competitor analysis, ...) live
outside the engine. They subclass ``BackgroundTask`` and are registered in a
``TaskCatalog`` under a stable task type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class TaskCategory(Enum):
    """Categories of background tasks"""
    LEARNING_INTELLIGENCE = "learning-intelligence"
    COMPETITION_ANALYSIS = "competition-analysis"
    PERFORMANCE_OPTIMIZATION = "performance-optimization"
    MARKET_INTELLIGENCE = "market-intelligence"


class TaskPriority(Enum):
    """Task priority levels"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(Enum):
    """Risk level of running a task"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class TaskDescriptor:
    """Static catalog entry describing a candidate task."""
    task_type: str
    category: TaskCategory
    default_priority: TaskPriority = TaskPriority.MEDIUM
    estimated_duration: str = "10-15 minutes"
    risk_level: RiskLevel = RiskLevel.MEDIUM

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskDescriptor":
        """Build a descriptor from a config.yaml ``task_catalog`` entry."""
        return cls(
            task_type=data["type"],
            category=TaskCategory(data["category"]),
            default_priority=TaskPriority(data.get("default_priority", "medium")),
            estimated_duration=data.get("estimated_duration", "10-15 minutes"),
            risk_level=RiskLevel(data.get("risk_level", "medium")),
        )


@dataclass
class TaskMetadata:
    """Richer task description obtained at evaluation time."""
    task_id: str
    name: str
    task_type: str
    priority: TaskPriority
    estimated_duration: str
    value_score: float
    risk_level: RiskLevel
    category: TaskCategory

    @classmethod
    def default_for(cls, descriptor: TaskDescriptor) -> "TaskMetadata":
        """Deterministic stub derived purely from the descriptor."""
        return cls(
            task_id=descriptor.task_type,
            name=descriptor.task_type.replace("_", " ").upper(),
            task_type=descriptor.task_type,
            priority=descriptor.default_priority,
            estimated_duration=descriptor.estimated_duration,
            value_score=0.5,
            risk_level=descriptor.risk_level,
            category=descriptor.category,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], descriptor: TaskDescriptor) -> "TaskMetadata":
        """
        Merge a task's self-description over the descriptor defaults.

        Category and risk level always come from the descriptor.
        """
        default = cls.default_for(descriptor)
        priority = data.get("priority", default.priority)
        if not isinstance(priority, TaskPriority):
            priority = TaskPriority(str(priority).lower())
        value_score = data.get("value_score", data.get("valueScore", default.value_score))
        return cls(
            task_id=str(data.get("id", data.get("task_id", default.task_id))),
            name=str(data.get("name", default.name)),
            task_type=descriptor.task_type,
            priority=priority,
            estimated_duration=str(data.get("estimated_duration", default.estimated_duration)),
            value_score=float(value_score),
            risk_level=descriptor.risk_level,
            category=descriptor.category,
        )

    def with_descriptor(self, descriptor: TaskDescriptor) -> "TaskMetadata":
        """Return a copy whose category and risk level match the descriptor."""
        data = asdict(self)
        data.update(category=descriptor.category, risk_level=descriptor.risk_level,
                    task_type=descriptor.task_type)
        return TaskMetadata(**data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["priority"] = self.priority.value
        data["risk_level"] = self.risk_level.value
        data["category"] = self.category.value
        return data


@dataclass
class TaskResult:
    """Outcome of a background task run. A missing success flag counts as success."""
    success: Optional[bool]
    insights: List[Any] = field(default_factory=list)
    value: Optional[float] = None
    learning_metrics: Optional[Dict[str, Any]] = None

    @classmethod
    def coerce(cls, raw: Union["TaskResult", Dict[str, Any], None]) -> Optional["TaskResult"]:
        """Normalize whatever a task returned into a TaskResult."""
        if raw is None or isinstance(raw, TaskResult):
            return raw
        if isinstance(raw, dict):
            return cls(
                success=raw.get("success"),
                insights=list(raw.get("insights") or []),
                value=raw.get("value"),
                learning_metrics=raw.get("learning_metrics", raw.get("learningMetrics")),
            )
        raise TypeError(f"Unsupported task result type: {type(raw).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BackgroundTask(ABC):
    """
    Base class for all background tasks an agent may choose to run.

    The engine constructs tasks twice: once with ``agent_id=None`` to read
    their metadata, and once per execution with the selecting agent's id and
    the evaluated metadata.
    """

    def __init__(self, agent_id: Optional[str] = None, metadata: Optional[TaskMetadata] = None):
        self.agent_id = agent_id
        self.metadata = metadata

    def get_metadata(self) -> Optional[Union[TaskMetadata, Dict[str, Any]]]:
        """Describe the task. Returning None selects the catalog default."""
        return None

    @abstractmethod
    def run(self) -> Union[TaskResult, Dict[str, Any]]:
        """Execute the task. May be a coroutine function."""

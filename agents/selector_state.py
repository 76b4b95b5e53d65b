#!/usr/bin/env python3
"""
Per-agent selection state: execution history, decision log and the
ephemeral per-cycle evaluation record.
"""

from collections import deque
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from tasks.catalog import Candidate

from .personality_engine import PersonalityProfile


class DecisionKind(Enum):
    """Kinds of recorded selection decisions"""
    EXECUTE_TASK = "EXECUTE_TASK"
    NO_ACTION = "NO_ACTION"
    TASK_FAILED = "TASK_FAILED"


@dataclass
class TaskHistoryEntry:
    """Execution statistics of one task type for one agent."""
    executions: int = 0
    successes: int = 0
    total_performance: float = 0.0
    avg_performance: float = 0.5
    last_execution: Optional[float] = None

    @property
    def avg_success(self) -> float:
        if self.executions == 0:
            return 0.5
        return self.successes / self.executions

    def record(self, success: bool, performance: float, timestamp: float) -> None:
        self.executions += 1
        if success:
            self.successes += 1
        self.total_performance += performance
        self.avg_performance = self.total_performance / self.executions
        self.last_execution = timestamp

    def snapshot(self) -> Dict[str, Any]:
        data = asdict(self)
        data["avg_success"] = self.avg_success
        return data


@dataclass
class Decision:
    """One entry of an agent's decision log."""
    timestamp: float
    agent_id: str
    kind: DecisionKind
    task_type: Optional[str] = None
    projected_score: Optional[float] = None
    actual_performance: Optional[float] = None
    performance_delta: Optional[float] = None
    execution_time: Optional[float] = None
    success: Optional[bool] = None
    error: Optional[str] = None
    available_tasks: Optional[int] = None
    best_task_score: Optional[float] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if v is not None}
        data["kind"] = self.kind.value
        return data


@dataclass
class Evaluation:
    """A candidate and its scores at every pipeline stage."""
    candidate: Candidate
    opportunity_score: float = 0.0
    evaluation_reason: str = ""
    personality_multiplier: float = 1.0
    personality_score: float = 0.0
    personality_reasons: List[str] = field(default_factory=list)
    reward_projection: float = 0.0
    reward_breakdown: Dict[str, Any] = field(default_factory=dict)
    historical_performance: Dict[str, Any] = field(default_factory=dict)
    awareness: Dict[str, Any] = field(default_factory=dict)
    final_score: float = 0.0
    decision_confidence: float = 0.0

    @property
    def task_type(self) -> str:
        return self.candidate.task_type

    @property
    def metadata(self):
        return self.candidate.metadata

    @property
    def descriptor(self):
        return self.candidate.descriptor

    def summary(self) -> Dict[str, Any]:
        return {
            "task_type": self.task_type,
            "opportunity_score": round(self.opportunity_score, 4),
            "personality_score": round(self.personality_score, 4),
            "reward_projection": round(self.reward_projection, 4),
            "final_score": round(self.final_score, 4),
            "decision_confidence": self.decision_confidence,
            "personality_reasons": list(self.personality_reasons),
        }


class SelectorState:
    """
    Selection state owned by exactly one agent.

    Only the agent's own cycle and its executor callback mutate it.
    """

    def __init__(self, agent_id: str, personality: PersonalityProfile,
                 selection_interval: float, max_decision_history: int = 100):
        self.agent_id = agent_id
        self.personality = personality
        self.selection_interval = selection_interval
        self.is_active = False
        self.last_decision_time: Optional[float] = None
        self.decision_history: Deque[Decision] = deque(maxlen=max_decision_history)
        self.task_history: Dict[str, TaskHistoryEntry] = {}
        self.execution_in_flight = False
        self.cycles_run = 0
        self.cycles_skipped = 0

    @property
    def max_decision_history(self) -> int:
        return self.decision_history.maxlen

    def history_for(self, task_type: str) -> TaskHistoryEntry:
        """Existing entry for ``task_type``, or a fresh unrecorded one."""
        return self.task_history.get(task_type) or TaskHistoryEntry()

    def entry_for_update(self, task_type: str) -> TaskHistoryEntry:
        """Entry for ``task_type``, created on first execution."""
        if task_type not in self.task_history:
            self.task_history[task_type] = TaskHistoryEntry()
        return self.task_history[task_type]

    def historical_performance(self, task_type: str) -> Dict[str, Any]:
        entry = self.history_for(task_type)
        return {
            "executions": entry.executions,
            "avg_success": entry.avg_success,
            "avg_performance": entry.avg_performance,
            "last_execution": entry.last_execution,
        }

    def time_since_last_run(self, task_type: str, now: float) -> float:
        """Seconds since ``task_type`` last ran for this agent (inf if never)."""
        entry = self.task_history.get(task_type)
        if entry is None or entry.last_execution is None:
            return float("inf")
        return now - entry.last_execution

    def append_decision(self, decision: Decision) -> None:
        self.decision_history.append(decision)

    def recent_performance(self, window: int = 10) -> float:
        """Mean actual performance over the last ``window`` executions."""
        scores = [
            d.actual_performance for d in self.decision_history
            if d.kind != DecisionKind.NO_ACTION and d.actual_performance is not None
        ][-window:]
        if not scores:
            return 0.5
        return sum(scores) / len(scores)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "personality": self.personality.to_dict(),
            "is_active": self.is_active,
            "selection_interval": self.selection_interval,
            "last_decision_time": self.last_decision_time,
            "execution_in_flight": self.execution_in_flight,
            "cycles_run": self.cycles_run,
            "cycles_skipped": self.cycles_skipped,
            "decision_count": len(self.decision_history),
            "task_history": {k: v.snapshot() for k, v in self.task_history.items()},
        }

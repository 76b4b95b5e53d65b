#!/usr/bin/env python3
"""
Tests for structured logging context and Prometheus metrics
"""

import structlog
from prometheus_client import REGISTRY

from monitoring.logger import AgentLogContext
from monitoring.metrics import (
    get_metrics_content_type,
    get_metrics_response,
    record_collaborator_failure,
    record_decision,
    record_error,
    record_task_execution,
    start_metrics_server,
)


def sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestAgentLogContext:
    def test_binds_and_unbinds_agent(self):
        with AgentLogContext("agent-7", cycle=3):
            bound = structlog.contextvars.get_contextvars()
            assert bound["agent_id"] == "agent-7"
            assert bound["cycle"] == 3

        bound = structlog.contextvars.get_contextvars()
        assert "agent_id" not in bound
        assert "cycle" not in bound

    def test_cycle_is_optional(self):
        with AgentLogContext("agent-7"):
            assert "cycle" not in structlog.contextvars.get_contextvars()


class TestMetrics:
    def test_record_decision(self):
        before = sample("selection_decisions_total", {"decision": "NO_ACTION"})
        record_decision("NO_ACTION")
        assert sample("selection_decisions_total", {"decision": "NO_ACTION"}) == before + 1

    def test_record_task_execution(self):
        labels = {"task_type": "metrics_check", "status": "failure"}
        before = sample("task_executions_total", labels)
        record_task_execution("metrics_check", False, 0.5, 0.1)
        assert sample("task_executions_total", labels) == before + 1
        assert sample("task_execution_duration_seconds_count", {"task_type": "metrics_check"}) >= 1

    def test_record_errors(self):
        labels = {"error_type": "ScoringError", "component": "metrics_test"}
        record_error("ScoringError", "metrics_test")
        assert sample("errors_total", labels) >= 1

        labels = {"collaborator": "reward_engine", "operation": "metrics_test"}
        record_collaborator_failure("reward_engine", "metrics_test")
        assert sample("collaborator_failures_total", labels) >= 1

    def test_metrics_exposition(self):
        assert b"selection_cycles_total" in get_metrics_response()
        assert get_metrics_content_type().startswith("text/plain")

    def test_metrics_server_disabled_in_tests(self):
        assert start_metrics_server() is False

#!/usr/bin/env python3
"""
Prometheus metrics for the autonomous task selection engine.
Provides metrics for selection cycles, decisions, task executions and collaborator health.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST, start_http_server
from config.environment import get_settings

# Import settings
settings = get_settings()

# Selection Cycle Metrics
selection_cycles_total = Counter(
    'selection_cycles_total',
    'Total selection cycles',
    ['status']  # completed, skipped_in_flight, error
)

selection_cycle_duration_seconds = Histogram(
    'selection_cycle_duration_seconds',
    'Time spent evaluating candidates and deciding',
    buckets=[0.001, 0.01, 0.1, 0.5, 1.0, 2.0, 5.0]
)

selection_decisions_total = Counter(
    'selection_decisions_total',
    'Total recorded decisions',
    ['decision']  # EXECUTE_TASK, NO_ACTION, TASK_FAILED
)

selection_final_score = Histogram(
    'selection_final_score',
    'Distribution of final candidate scores',
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
)

# Task Execution Metrics
task_executions_total = Counter(
    'task_executions_total',
    'Total background task executions',
    ['task_type', 'status']
)

task_execution_duration_seconds = Histogram(
    'task_execution_duration_seconds',
    'Background task execution time',
    ['task_type'],
    buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 600.0, 1800.0]
)

task_actual_performance = Histogram(
    'task_actual_performance',
    'Distribution of observed task performance',
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
)

# Engine Metrics
active_selectors = Gauge('active_selectors', 'Agents with an active selection loop')
in_flight_executions = Gauge('in_flight_executions', 'Task executions currently running')

# Error Metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type', 'component']
)

collaborator_failures_total = Counter(
    'collaborator_failures_total',
    'Failures of external learning collaborators',
    ['collaborator', 'operation']
)


def record_decision(decision: str):
    """Record a decision of the given kind."""
    selection_decisions_total.labels(decision=decision).inc()


def record_task_execution(task_type: str, success: bool, duration: float, performance: float):
    """Record a finished task execution."""
    status = "success" if success else "failure"
    task_executions_total.labels(task_type=task_type, status=status).inc()
    task_execution_duration_seconds.labels(task_type=task_type).observe(duration)
    task_actual_performance.observe(performance)


def record_error(error_type: str, component: str):
    """Record a degraded path or failure."""
    errors_total.labels(error_type=error_type, component=component).inc()


def record_collaborator_failure(collaborator: str, operation: str):
    """Record a failed call into an external learning collaborator."""
    collaborator_failures_total.labels(collaborator=collaborator, operation=operation).inc()


def get_metrics_response():
    """Get Prometheus metrics response."""
    return generate_latest()


def get_metrics_content_type():
    """Get Prometheus metrics content type."""
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: int = None):
    """Expose /metrics over HTTP when metrics are enabled."""
    if not settings.metrics_enabled:
        return False
    start_http_server(port or settings.metrics_port)
    return True

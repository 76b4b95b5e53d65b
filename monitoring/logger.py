#!/usr/bin/env python3
"""
Structured logging for the autonomous task selection engine.
Uses structlog for JSON-formatted logs with agent correlation context.
"""

import structlog
import logging
import sys
from typing import Any, Dict, Optional
from datetime import datetime
from pathlib import Path
from config.environment import get_settings

# Import settings
settings = get_settings()

# Audit logger for selection decisions
audit_logger = structlog.get_logger("audit")


def setup_structured_logging():
    """Configure structured logging with JSON (or console) output."""

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper())
    )

    # Optional file handler
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class AgentLogContext:
    """Context manager binding an agent id (and cycle number) to every log line."""

    def __init__(self, agent_id: str, cycle: Optional[int] = None):
        self.agent_id = agent_id
        self.cycle = cycle

    def __enter__(self):
        bound = {"agent_id": self.agent_id}
        if self.cycle is not None:
            bound["cycle"] = self.cycle
        structlog.contextvars.bind_contextvars(**bound)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        structlog.contextvars.unbind_contextvars("agent_id", "cycle")


def log_selection_decision(agent_id: str, decision: str, task_type: str = None,
                           score: float = None, **kwargs):
    """Audit log for every recorded selection decision."""
    log_data = {
        "agent_id": agent_id,
        "decision": decision,
        "task_type": task_type,
        "timestamp": datetime.now().isoformat(),
        **kwargs
    }

    if score is not None:
        log_data["score"] = round(score, 3)

    audit_logger.info("selection_decision", **log_data)


def log_background_task(task_name: str, status: str, duration: float = None, **kwargs):
    """Log background task execution."""
    logger = get_logger("background")
    log_data = {
        "task_name": task_name,
        "status": status,
        "timestamp": datetime.now().isoformat(),
        **kwargs
    }

    if duration is not None:
        log_data["duration_ms"] = duration * 1000

    logger.info("background_task", **log_data)


def log_error(error: Exception, context: Dict[str, Any] = None):
    """Log errors with structured context."""
    logger = get_logger("error")
    logger.error(
        "error_occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        timestamp=datetime.now().isoformat(),
        context=context or {}
    )


# Initialize logging on import
setup_structured_logging()

#!/usr/bin/env python3
"""
TaskCatalog - explicit registry of candidate background tasks

Maps a stable task type to its descriptor and to the factory that produces a
``BackgroundTask``. Candidates are resolved at evaluation time; entries that
cannot be loaded are skipped with a warning instead of failing the cycle.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .base import BackgroundTask, TaskDescriptor, TaskMetadata
from agents.errors import CatalogLoadError
from monitoring.metrics import record_error

logger = logging.getLogger(__name__)

TaskFactory = Callable[[Optional[str], Optional[TaskMetadata]], BackgroundTask]


@dataclass(frozen=True)
class Candidate:
    """A catalog entry resolved for one selection cycle."""
    descriptor: TaskDescriptor
    metadata: TaskMetadata

    @property
    def task_type(self) -> str:
        return self.descriptor.task_type


class TaskCatalog:
    """
    Registry of candidate tasks.

    Capabilities:
    - Register descriptors and factories independently
    - Resolve candidates with task-supplied or default metadata
    - Instantiate runnables for execution
    """

    def __init__(self):
        self._descriptors: Dict[str, TaskDescriptor] = {}
        self._factories: Dict[str, TaskFactory] = {}

    @classmethod
    def from_config(cls, entries: Iterable[Dict[str, Any]],
                    factories: Optional[Dict[str, TaskFactory]] = None) -> "TaskCatalog":
        """
        Build a catalog from ``task_catalog`` entries of config.yaml.

        Args:
            entries: Descriptor dictionaries (type, category, default_priority, ...)
            factories: Optional mapping of task type to factory

        Returns:
            Populated catalog
        """
        catalog = cls()
        for entry in entries:
            catalog.add_descriptor(TaskDescriptor.from_dict(entry))
        for task_type, factory in (factories or {}).items():
            catalog.register_factory(task_type, factory)
        return catalog

    def add_descriptor(self, descriptor: TaskDescriptor) -> None:
        self._descriptors[descriptor.task_type] = descriptor

    def register(self, descriptor: TaskDescriptor, factory: TaskFactory) -> None:
        """Register a descriptor together with its factory."""
        self.add_descriptor(descriptor)
        self.register_factory(descriptor.task_type, factory)
        logger.info(f"[TaskCatalog] Registered task {descriptor.task_type} ({descriptor.category.value})")

    def register_factory(self, task_type: str, factory: TaskFactory) -> None:
        if not callable(factory):
            raise TypeError(f"Factory for {task_type} is not callable")
        self._factories[task_type] = factory

    def unregister(self, task_type: str) -> None:
        self._descriptors.pop(task_type, None)
        self._factories.pop(task_type, None)

    def get(self, task_type: str) -> Optional[TaskDescriptor]:
        return self._descriptors.get(task_type)

    def descriptors(self) -> List[TaskDescriptor]:
        return list(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, task_type: str) -> bool:
        return task_type in self._descriptors

    def list_candidates(self) -> List[Candidate]:
        """
        Resolve every loadable catalog entry into a candidate.

        Returns:
            Candidates in registration order; entries without a factory are omitted
        """
        candidates = []
        for descriptor in self._descriptors.values():
            try:
                candidates.append(Candidate(descriptor, self._resolve_metadata(descriptor)))
            except CatalogLoadError as e:
                logger.warning(f"[TaskCatalog] Could not load task {descriptor.task_type}: {e}")
                record_error("CatalogLoadError", "catalog")
        return candidates

    def instantiate(self, task_type: str, agent_id: Optional[str] = None,
                    metadata: Optional[TaskMetadata] = None) -> BackgroundTask:
        """Build the runnable for ``task_type``. Raises CatalogLoadError."""
        factory = self._factories.get(task_type)
        if factory is None:
            raise CatalogLoadError(f"No factory registered for task type '{task_type}'")
        try:
            return factory(agent_id, metadata)
        except Exception as e:
            raise CatalogLoadError(f"Factory for '{task_type}' failed: {e}") from e

    def _resolve_metadata(self, descriptor: TaskDescriptor) -> TaskMetadata:
        if descriptor.task_type not in self._factories:
            raise CatalogLoadError(f"No factory registered for task type '{descriptor.task_type}'")

        try:
            task = self.instantiate(descriptor.task_type)
            raw = task.get_metadata() if hasattr(task, "get_metadata") else None
            if isinstance(raw, TaskMetadata):
                return raw.with_descriptor(descriptor)
            if isinstance(raw, dict):
                return TaskMetadata.from_dict(raw, descriptor)
        except Exception as e:
            logger.debug(f"[TaskCatalog] Metadata introspection failed for {descriptor.task_type}: {e}")

        return TaskMetadata.default_for(descriptor)


def describe_catalog(catalog: TaskCatalog) -> List[Tuple[str, str, str]]:
    """(type, category, risk level) rows for status output."""
    return [
        (d.task_type, d.category.value, d.risk_level.value)
        for d in catalog.descriptors()
    ]

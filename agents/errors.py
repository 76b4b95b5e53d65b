import functools
import inspect
import logging


class SelectionError(Exception):
    """Base class for task selection errors."""

    pass


class RegistrationError(SelectionError):
    """Raised when an agent cannot be registered."""

    pass


class CatalogLoadError(SelectionError):
    """Raised when a catalog entry cannot be loaded or introspected."""

    pass


class ScoringError(SelectionError):
    """Raised when a candidate cannot be scored."""

    pass


class ProjectionError(SelectionError):
    """Raised when a reward projection cannot be computed."""

    pass


class AwarenessError(SelectionError):
    """Raised when the decision-awareness collaborator fails."""

    pass


class ExecutionError(SelectionError):
    """Raised when a selected task fails to execute."""

    pass


class CycleError(SelectionError):
    """Raised when an entire selection cycle fails."""

    pass


def escalate_as(error_cls):
    """Decorator for coroutine functions that re-raises any failure as ``error_cls`` with logging."""
    def decorator(fn):
        if not inspect.iscoroutinefunction(fn):
            raise TypeError(f"escalate_as expects a coroutine function, got {fn.__name__}")

        @functools.wraps(fn)
        async def async_wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except error_cls:
                raise
            except Exception as e:
                logging.debug(f"[{error_cls.__name__}] {fn.__name__}: {e}", exc_info=True)
                raise error_cls(f"{fn.__name__} failed: {e}") from e

        return async_wrapper
    return decorator

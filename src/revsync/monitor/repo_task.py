"""Profiled wrapper for origin and destination calls."""

from typing import Callable, TypeVar

from loguru import logger

from ..exceptions import RevSyncError
from .profiler import Profiler

T = TypeVar('T')


def repo_task(profiler: Profiler, description: str, task: Callable[[], T]) -> T:
    """Run a repository call inside a named profiler task.

    The result is returned as is and exceptions propagate unchanged. Engine
    errors raised without a task name get this task's name attached.

    Args:
        profiler: Profiler receiving the task
        description: Task label, e.g. 'origin.resolve_source_ref'
        task: Zero argument callable doing the repository work

    Returns:
        Whatever the callable returns
    """
    with profiler.start(description):
        try:
            return task()
        except RevSyncError as e:
            if e.task is None:
                e.task = description
            logger.debug(f'Repo task {description} failed: {e}')
            raise

"""Profiler producing nested, named and timed tasks."""

import threading
import time
from abc import ABC, abstractmethod
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field


class TaskRecord(BaseModel):
    """A finished profiler task."""

    name: str = Field(..., description='Full task path, e.g. run/default/squash')
    depth: int = Field(..., description='Nesting depth, 0 for root tasks')
    elapsed_ms: float = Field(..., description='Duration in milliseconds')
    failed: bool = Field(default=False, description='Task exited with an error')


class ProfilerListener(ABC):
    """Receives task notifications from a profiler."""

    @abstractmethod
    def task_started(self, name: str, depth: int) -> None:
        pass

    @abstractmethod
    def task_finished(self, record: TaskRecord) -> None:
        pass


class LogProfilerListener(ProfilerListener):
    """Logs task timings through loguru."""

    def __init__(self, level: str = 'DEBUG'):
        self.level = level
        self.logger = logger.bind(component='Profiler')

    def task_started(self, name: str, depth: int) -> None:
        self.logger.log(self.level, f'{"  " * depth}> {name}')

    def task_finished(self, record: TaskRecord) -> None:
        status = ' (failed)' if record.failed else ''
        self.logger.log(
            self.level,
            f'{"  " * record.depth}< {record.name} {record.elapsed_ms:.1f}ms{status}',
        )


class RecordingProfilerListener(ProfilerListener):
    """Keeps finished task records in memory."""

    def __init__(self):
        self.started: List[str] = []
        self.records: List[TaskRecord] = []

    def task_started(self, name: str, depth: int) -> None:
        self.started.append(name)

    def task_finished(self, record: TaskRecord) -> None:
        self.records.append(record)

    @property
    def names(self) -> List[str]:
        return [r.name for r in self.records]


class ProfilerTask:
    """Context manager timing one profiler task."""

    def __init__(self, profiler: 'Profiler', name: str):
        self.profiler = profiler
        self.name = name
        self.depth = 0
        self._start = 0.0

    def __enter__(self) -> 'ProfilerTask':
        stack = self.profiler._stack()
        self.depth = len(stack)
        if stack:
            self.name = f'{stack[-1].name}/{self.name}'
        stack.append(self)
        self._start = time.perf_counter()
        self.profiler._dispatch_started(self.name, self.depth)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        elapsed_ms = (time.perf_counter() - self._start) * 1000
        stack = self.profiler._stack()
        if stack and stack[-1] is self:
            stack.pop()
        self.profiler._dispatch_finished(
            TaskRecord(
                name=self.name,
                depth=self.depth,
                elapsed_ms=elapsed_ms,
                failed=exc_type is not None,
            )
        )
        return False


class Profiler:
    """Creates nested tasks and fans notifications out to listeners.

    Task nesting is tracked per thread. Listener dispatch is serialised so a
    profiler can be shared between workflows running in different threads.
    """

    def __init__(self, listeners: Optional[List[ProfilerListener]] = None):
        self.listeners = list(listeners or [])
        self._local = threading.local()
        self._lock = threading.Lock()

    def start(self, name: str) -> ProfilerTask:
        return ProfilerTask(self, name)

    def _stack(self) -> List[ProfilerTask]:
        if not hasattr(self._local, 'stack'):
            self._local.stack = []
        return self._local.stack

    def _dispatch_started(self, name: str, depth: int) -> None:
        with self._lock:
            for listener in self.listeners:
                listener.task_started(name, depth)

    def _dispatch_finished(self, record: TaskRecord) -> None:
        with self._lock:
            for listener in self.listeners:
                listener.task_finished(record)

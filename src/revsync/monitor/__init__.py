"""Profiling and event monitoring collaborators."""

from .profiler import (
    LogProfilerListener,
    Profiler,
    ProfilerListener,
    ProfilerTask,
    RecordingProfilerListener,
    TaskRecord,
)
from .events import (
    ChangeMigrationFinishedEvent,
    ChangeMigrationStartedEvent,
    EventMonitor,
    MigrationFinishedEvent,
    MigrationOutcome,
    MigrationStartedEvent,
)
from .repo_task import repo_task

__all__ = [
    'LogProfilerListener',
    'Profiler',
    'ProfilerListener',
    'ProfilerTask',
    'RecordingProfilerListener',
    'TaskRecord',
    'ChangeMigrationFinishedEvent',
    'ChangeMigrationStartedEvent',
    'EventMonitor',
    'MigrationFinishedEvent',
    'MigrationOutcome',
    'MigrationStartedEvent',
    'repo_task',
]

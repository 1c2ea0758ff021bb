"""Process wide options shared by workflows."""

from typing import Callable, Optional, TypeVar

from pydantic import BaseModel, Field

from ..monitor.events import EventMonitor
from ..monitor.profiler import LogProfilerListener, Profiler
from ..monitor.repo_task import repo_task
from ..utils.console import Console, LogConsole
from .config import RunConfig

T = TypeVar('T')


class GeneralOptions(BaseModel):
    """Console, profiler and event monitor plus global flags."""

    console: Console = Field(..., description='User facing console')
    profiler: Profiler = Field(
        default_factory=Profiler, description='Profiler receiving repo tasks'
    )
    event_monitor: EventMonitor = Field(
        default_factory=EventMonitor, description='Migration lifecycle events sink'
    )
    force: bool = Field(default=False, description='Migrate even when nothing changed')
    verbose: bool = Field(default=False, description='Verbose output')

    class Config:
        """Pydantic configuration."""

        arbitrary_types_allowed = True

    @classmethod
    def from_config(
        cls,
        config: RunConfig,
        console: Optional[Console] = None,
        event_monitor: Optional[EventMonitor] = None,
    ) -> 'GeneralOptions':
        """Create options from a run configuration.

        Args:
            config: Run configuration
            console: Console to use, a LogConsole if not provided
            event_monitor: Event sink, a no-op monitor if not provided

        Returns:
            General options
        """
        listener_level = 'INFO' if config.verbose else 'DEBUG'
        return cls(
            console=console or LogConsole(),
            profiler=Profiler([LogProfilerListener(level=listener_level)]),
            event_monitor=event_monitor or EventMonitor(),
            force=config.force,
            verbose=config.verbose,
        )

    def repo_task(self, description: str, task: Callable[[], T]) -> T:
        return repo_task(self.profiler, description, task)

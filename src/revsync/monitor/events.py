"""Migration lifecycle events."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.status import DestinationEffect


class MigrationOutcome(str, Enum):
    """Final outcome of a migration run."""

    SUCCESS = 'success'
    NO_OP = 'no_op'
    ERROR = 'error'


class MigrationStartedEvent(BaseModel):
    workflow_name: str = Field(..., description='Workflow name')
    mode: str = Field(..., description='Workflow mode')
    started_at: datetime = Field(default_factory=datetime.now)


class ChangeMigrationStartedEvent(BaseModel):
    workflow_name: str = Field(..., description='Workflow name')
    origin_ref: str = Field(..., description='Origin revision being migrated')


class ChangeMigrationFinishedEvent(BaseModel):
    workflow_name: str = Field(..., description='Workflow name')
    origin_ref: str = Field(..., description='Origin revision migrated')
    effects: List[DestinationEffect] = Field(
        default_factory=list, description='Destination effects of the write'
    )


class MigrationFinishedEvent(BaseModel):
    workflow_name: str = Field(..., description='Workflow name')
    outcome: MigrationOutcome = Field(..., description='Run outcome')
    error_message: Optional[str] = Field(default=None, description='Failure message')
    completed_at: datetime = Field(default_factory=datetime.now)


class EventMonitor:
    """Receives migration lifecycle events. All hooks are no-ops by default."""

    def on_migration_started(self, event: MigrationStartedEvent) -> None:
        pass

    def on_change_migration_started(self, event: ChangeMigrationStartedEvent) -> None:
        pass

    def on_change_migration_finished(self, event: ChangeMigrationFinishedEvent) -> None:
        pass

    def on_migration_finished(self, event: MigrationFinishedEvent) -> None:
        pass

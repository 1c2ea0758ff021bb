"""Destination status, writer context and migration info models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .revision import Change, Revision


class DestinationStatus(BaseModel):
    """The destination's record of the last migrated origin revision."""

    baseline: str = Field(..., description='Last migrated origin revision')
    pending_changes: List[str] = Field(
        default_factory=list, description='Destination side pending references'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True


class WriterContext(BaseModel):
    """Data a destination needs to open a writer for one run."""

    workflow_name: str = Field(..., description='Name of the running workflow')
    workflow_identity_user: Optional[str] = Field(
        default=None, description='Owner of the migration identities'
    )
    dry_run: bool = Field(default=False, description='Do not publish writes')
    origin_revision: Revision = Field(..., description='Resolved origin revision')

    class Config:
        """Pydantic configuration."""

        frozen = True


class EffectType(str, Enum):
    """Kind of effect a write had on the destination."""

    CREATED = 'created'
    UPDATED = 'updated'
    NOOP = 'noop'
    INSUFFICIENT_APPROVALS = 'insufficient_approvals'
    ERROR = 'error'
    TEMPORARY_ERROR = 'temporary_error'


class DestinationEffect(BaseModel):
    """Result of writing one change to the destination."""

    type: EffectType = Field(..., description='Effect type')
    summary: str = Field(..., description='Human readable summary')
    origin_refs: List[str] = Field(
        default_factory=list, description='Origin revisions included in the write'
    )
    destination_ref: Optional[str] = Field(
        default=None, description='Reference created or updated in the destination'
    )
    errors: List[str] = Field(default_factory=list, description='Error messages')


class MigrationReference(BaseModel):
    """Last migrated revision and the changes still pending migration."""

    label: str = Field(..., description='Workflow derived reference name')
    last_migrated: Optional[Revision] = Field(
        default=None, description='Last migrated revision, None if never migrated'
    )
    available_to_migrate: List[Change] = Field(
        default_factory=list, description='Pending changes, oldest first'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def last_available_to_migrate(self) -> Optional[Change]:
        return self.available_to_migrate[-1] if self.available_to_migrate else None


class Info(BaseModel):
    """Machine readable migration status of a workflow."""

    migration_references: List[MigrationReference] = Field(
        default_factory=list, description='One entry per migration reference'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

"""revsync

Incrementally migrates changes from an origin repository to a destination
repository through a transformation pipeline, keeping track of what was
already migrated between runs.
"""

__version__ = '0.1.0'

from .exceptions import (
    CommandLineError,
    EmptyChangeError,
    RepoError,
    RevSyncError,
    TransformError,
    ValidationError,
)
from .migration import Workflow, WorkflowMode

__all__ = [
    'CommandLineError',
    'EmptyChangeError',
    'RepoError',
    'RevSyncError',
    'TransformError',
    'ValidationError',
    'Workflow',
    'WorkflowMode',
]

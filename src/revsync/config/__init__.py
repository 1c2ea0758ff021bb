"""Run configuration, workflow flags and shared options."""

from .config import (
    CHANGE_REQUEST_PARENT_FLAG,
    CHECK_LAST_REV_STATE_FLAG,
    INIT_HISTORY_FLAG,
    ITERATIVE_LIMIT_CHANGES_FLAG,
    LAST_REV_FLAG,
    LoggingConfig,
    RunConfig,
    WorkflowOptions,
)
from .config_file import ConfigFile
from .options import GeneralOptions

__all__ = [
    'CHANGE_REQUEST_PARENT_FLAG',
    'CHECK_LAST_REV_STATE_FLAG',
    'INIT_HISTORY_FLAG',
    'ITERATIVE_LIMIT_CHANGES_FLAG',
    'LAST_REV_FLAG',
    'LoggingConfig',
    'RunConfig',
    'WorkflowOptions',
    'ConfigFile',
    'GeneralOptions',
]

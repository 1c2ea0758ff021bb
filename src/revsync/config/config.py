"""Configuration management for revsync runs."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

from ..utils.logging import setup_logging

LAST_REV_FLAG = '--last-rev'
INIT_HISTORY_FLAG = '--init-history'
CHECK_LAST_REV_STATE_FLAG = '--check-last-rev-state'
CHANGE_REQUEST_PARENT_FLAG = '--change-request-parent'
ITERATIVE_LIMIT_CHANGES_FLAG = '--iterative-limit-changes'


class WorkflowOptions(BaseModel):
    """Command line flags that affect how workflows run."""

    last_revision: Optional[str] = Field(
        default=None,
        description='Last revision migrated, overrides the destination status',
    )
    init_history: bool = Field(
        default=False,
        description='Migrate all history when no previous migration is found',
    )
    iterative_limit_changes: int = Field(
        default=2**31 - 1,
        description='Maximum number of changes migrated by one ITERATIVE run',
    )
    change_request_parent: Optional[str] = Field(
        default=None,
        description='Destination baseline to use in CHANGE_REQUEST mode',
    )
    check_last_rev_state: bool = Field(
        default=False,
        description='Verify the destination last migrated state before writing',
    )
    workflow_identity_user: Optional[str] = Field(
        default=None, description='Owner used when computing migration identities'
    )

    @validator('last_revision', 'change_request_parent')
    def validate_reference(cls, v):
        """Blank references are treated as not set."""
        if v is not None and not v.strip():
            return None
        return v

    @validator('iterative_limit_changes')
    def validate_iterative_limit(cls, v):
        """Validate the limit is positive."""
        if v <= 0:
            raise ValueError(f'{ITERATIVE_LIMIT_CHANGES_FLAG} must be positive')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Console log format')

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class RunConfig(BaseModel):
    """Settings for one invocation of the workflow engine."""

    dry_run: bool = Field(default=False, description='Do not publish destination writes')
    force: bool = Field(default=False, description='Migrate even when nothing changed')
    verbose: bool = Field(default=False, description='Verbose output')
    workflow: WorkflowOptions = Field(
        default_factory=WorkflowOptions, description='Workflow flags'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'

    def setup_logging(self) -> None:
        """Configure loguru from the logging section, DEBUG when verbose."""
        setup_logging(
            level='DEBUG' if self.verbose else self.logging.level,
            log_file=self.logging.file,
            log_format=self.logging.format,
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'RunConfig':
        """Load configuration from a YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> 'RunConfig':
        """Load configuration from REVSYNC_* environment variables."""
        load_dotenv()

        config_data = {
            'dry_run': _env_bool('REVSYNC_DRY_RUN'),
            'force': _env_bool('REVSYNC_FORCE'),
            'verbose': _env_bool('REVSYNC_VERBOSE'),
            'workflow': {
                'last_revision': os.getenv('REVSYNC_LAST_REV'),
                'init_history': _env_bool('REVSYNC_INIT_HISTORY'),
                'iterative_limit_changes': os.getenv('REVSYNC_ITERATIVE_LIMIT_CHANGES'),
                'change_request_parent': os.getenv('REVSYNC_CHANGE_REQUEST_PARENT'),
                'check_last_rev_state': _env_bool('REVSYNC_CHECK_LAST_REV_STATE'),
                'workflow_identity_user': os.getenv('REVSYNC_IDENTITY_USER'),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        return cls(**cls._remove_none_values(config_data))

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: RunConfig._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                self.dict(), f, default_flow_style=False, indent=2, sort_keys=False
            )


def _env_bool(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in ('1', 'true', 'yes')

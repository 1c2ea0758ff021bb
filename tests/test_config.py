"""Tests for configuration management."""

import pytest
import tempfile
import os
from pathlib import Path

import yaml
from loguru import logger

from revsync.config import (
    ConfigFile,
    GeneralOptions,
    LoggingConfig,
    RunConfig,
    WorkflowOptions,
)
from revsync.monitor import EventMonitor
from revsync.testing import RecordingConsole
from revsync.utils import LogConsole, setup_logging


class TestWorkflowOptions:
    """Test workflow flags."""

    def test_defaults(self):
        """Test default flag values."""
        options = WorkflowOptions()

        assert options.last_revision is None
        assert options.init_history is False
        assert options.iterative_limit_changes == 2**31 - 1
        assert options.change_request_parent is None
        assert options.check_last_rev_state is False
        assert options.workflow_identity_user is None

    def test_blank_references_are_not_set(self):
        """Test blank references are treated as missing."""
        options = WorkflowOptions(last_revision='  ', change_request_parent='')

        assert options.last_revision is None
        assert options.change_request_parent is None

    def test_iterative_limit_must_be_positive(self):
        """Test that a non positive limit raises validation error."""
        with pytest.raises(ValueError):
            WorkflowOptions(iterative_limit_changes=0)


class TestLoggingConfig:
    """Test logging configuration."""

    def test_level_is_normalised(self):
        """Test log level is upper cased."""
        assert LoggingConfig(level='debug').level == 'DEBUG'

    def test_invalid_level(self):
        """Test that an unknown level raises validation error."""
        with pytest.raises(ValueError):
            LoggingConfig(level='LOUD')


class TestRunConfig:
    """Test main run configuration class."""

    def test_config_from_dict(self):
        """Test configuration creation from dictionary."""
        config_dict = {
            'dry_run': True,
            'workflow': {'last_revision': 'abc123', 'iterative_limit_changes': 5},
            'logging': {'level': 'warning'},
        }

        config = RunConfig(**config_dict)
        assert config.dry_run is True
        assert config.force is False
        assert config.workflow.last_revision == 'abc123'
        assert config.workflow.iterative_limit_changes == 5
        assert config.logging.level == 'WARNING'

    def test_unknown_keys_rejected(self):
        """Test unknown top level keys are rejected."""
        with pytest.raises(ValueError):
            RunConfig(workflows={})

    def test_config_from_file(self):
        """Test configuration loading from YAML file."""
        config_content = """
force: true
workflow:
  init_history: true
  workflow_identity_user: octocat
logging:
  level: DEBUG
  file: revsync.log
"""

        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(config_content)
            f.flush()

            try:
                config = RunConfig.from_file(f.name)
                assert config.force is True
                assert config.workflow.init_history is True
                assert config.workflow.workflow_identity_user == 'octocat'
                assert config.logging.level == 'DEBUG'
                assert config.logging.file == 'revsync.log'
            finally:
                os.unlink(f.name)

    def test_empty_config_file(self):
        """Test an empty file gives the defaults."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / 'empty.yaml'
            config_path.write_text('')

            config = RunConfig.from_file(str(config_path))
            assert config == RunConfig()

    def test_config_from_env(self):
        """Test configuration loading from environment variables."""
        env_vars = {
            'REVSYNC_DRY_RUN': 'true',
            'REVSYNC_LAST_REV': 'abc123',
            'REVSYNC_ITERATIVE_LIMIT_CHANGES': '10',
            'REVSYNC_IDENTITY_USER': 'octocat',
            'LOG_LEVEL': 'debug',
        }

        # Set environment variables
        for key, value in env_vars.items():
            os.environ[key] = value

        try:
            config = RunConfig.from_env()
            assert config.dry_run is True
            assert config.workflow.last_revision == 'abc123'
            assert config.workflow.iterative_limit_changes == 10
            assert config.workflow.workflow_identity_user == 'octocat'
            assert config.logging.level == 'DEBUG'
        finally:
            # Clean up environment variables
            for key in env_vars:
                os.environ.pop(key, None)

    def test_to_file(self):
        """Test configuration is saved as YAML."""
        config = RunConfig(
            verbose=True, workflow=WorkflowOptions(change_request_parent='base')
        )

        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / 'nested' / 'config.yaml'
            config.to_file(str(config_path))

            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
            assert data['verbose'] is True
            assert data['workflow']['change_request_parent'] == 'base'
            assert RunConfig.from_file(str(config_path)) == config

    def test_invalid_config_file(self):
        """Test handling of invalid configuration file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write('invalid: yaml: content:')
            f.flush()

            try:
                with pytest.raises(Exception):  # Should raise YAML parsing error
                    RunConfig.from_file(f.name)
            finally:
                os.unlink(f.name)

    def test_missing_config_file(self):
        """Test handling of missing configuration file."""
        with pytest.raises(FileNotFoundError):
            RunConfig.from_file('/nonexistent/config.yaml')


class TestRunConfigLogging:
    """Test logging set up from the run configuration."""

    def teardown_method(self):
        """Restore the default logger."""
        setup_logging(level='INFO')

    def test_logging_section(self, tmp_path):
        """Test the configured level and file are used."""
        log_file = tmp_path / 'revsync.log'
        config = RunConfig(logging={'level': 'warning', 'file': str(log_file)})

        config.setup_logging()
        logger.bind(component='Workflow').info('Resolving origin reference')
        logger.bind(component='Workflow').warning('Nothing to migrate')
        logger.complete()

        text = log_file.read_text()
        assert 'Resolving origin reference' not in text
        assert 'WARNING  | Workflow | ' in text
        assert 'Nothing to migrate' in text

    def test_verbose_logs_debug(self, tmp_path):
        """Test verbose runs log at DEBUG whatever the configured level."""
        log_file = tmp_path / 'revsync.log'
        config = RunConfig(verbose=True, logging={'level': 'ERROR', 'file': str(log_file)})

        config.setup_logging()
        logger.debug('Checking out 3')
        logger.complete()

        assert '| revsync | ' in log_file.read_text()
        assert 'Checking out 3' in log_file.read_text()


class TestConfigFile:
    """Test config file identifiers."""

    def test_identifier_relative_to_root(self):
        """Test the identifier drops the root."""
        config = ConfigFile(path='admin/foo/bar.sky', root='admin')

        assert config.identifier == 'foo/bar.sky'

    def test_identifier_without_root(self):
        """Test the identifier is the path without a root."""
        assert ConfigFile(path='foo/bar.sky').identifier == 'foo/bar.sky'

    def test_root_must_contain_path(self):
        """Test a root that is not a parent of the path is rejected."""
        with pytest.raises(ValueError):
            ConfigFile(path='admin/foo/bar.sky', root='other')


class TestGeneralOptions:
    """Test general options."""

    def test_from_config(self):
        """Test options are built from the run configuration."""
        console = RecordingConsole()
        monitor = EventMonitor()

        options = GeneralOptions.from_config(
            RunConfig(force=True, verbose=True), console=console, event_monitor=monitor
        )

        assert options.force is True
        assert options.verbose is True
        assert options.console is console
        assert options.event_monitor is monitor
        assert len(options.profiler.listeners) == 1

    def test_default_console(self):
        """Test a non interactive console is used by default."""
        options = GeneralOptions.from_config(RunConfig())

        assert isinstance(options.console, LogConsole)

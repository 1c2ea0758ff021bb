"""Tests for profiling, repo tasks, consoles and logging."""

import io
import threading

import pytest
from loguru import logger
from rich.console import Console as RichConsole

from revsync.exceptions import RepoError
from revsync.monitor import (
    LogProfilerListener,
    Profiler,
    RecordingProfilerListener,
    repo_task,
)
from revsync.utils import LogConsole, TerminalConsole, setup_logging


class TestProfiler:
    """Test nested profiler tasks."""

    def setup_method(self):
        """Set up test fixtures."""
        self.listener = RecordingProfilerListener()
        self.profiler = Profiler([self.listener])

    def test_nested_names(self):
        """Test nested tasks are named after their parents."""
        with self.profiler.start('run/default'):
            with self.profiler.start('squash'):
                with self.profiler.start('destination.write'):
                    pass

        assert self.listener.started == [
            'run/default',
            'run/default/squash',
            'run/default/squash/destination.write',
        ]
        assert self.listener.names == [
            'run/default/squash/destination.write',
            'run/default/squash',
            'run/default',
        ]
        assert [r.depth for r in self.listener.records] == [2, 1, 0]

    def test_failed_task(self):
        """Test tasks exited with an error are marked as failed."""
        with pytest.raises(RuntimeError):
            with self.profiler.start('boom'):
                raise RuntimeError('boom')

        assert self.listener.records[0].failed is True
        assert self.listener.records[0].elapsed_ms >= 0

    def test_stack_is_per_thread(self):
        """Test tasks started in another thread are not nested."""
        with self.profiler.start('main'):
            thread = threading.Thread(target=lambda: self.profiler.start('worker').__enter__())
            thread.start()
            thread.join()

        assert 'worker' in self.listener.started

    def test_log_listener(self):
        """Test the log listener writes task timings through loguru."""
        messages = []
        handler_id = logger.add(messages.append, level='DEBUG', format='{message}')
        try:
            with Profiler([LogProfilerListener()]).start('origin.resolve'):
                pass
        finally:
            logger.remove(handler_id)

        assert any('> origin.resolve' in m for m in messages)
        assert any('< origin.resolve' in m for m in messages)


class TestRepoTask:
    """Test profiled repository calls."""

    def setup_method(self):
        """Set up test fixtures."""
        self.listener = RecordingProfilerListener()
        self.profiler = Profiler([self.listener])

    def test_returns_result(self):
        """Test the callable result is returned as is."""
        result = object()

        assert repo_task(self.profiler, 'origin.resolve', lambda: result) is result
        assert self.listener.names == ['origin.resolve']

    def test_attaches_task_name(self):
        """Test engine errors get the task name and propagate unchanged."""
        error = RepoError('cannot connect')

        def fail():
            raise error

        with pytest.raises(RepoError) as exc_info:
            repo_task(self.profiler, 'destination.write', fail)

        assert exc_info.value is error
        assert error.task == 'destination.write'
        assert str(error) == 'cannot connect'
        assert self.listener.records[0].failed is True

    def test_keeps_inner_task_name(self):
        """Test the innermost task name wins."""

        def fail():
            raise RepoError('cannot connect')

        with pytest.raises(RepoError) as exc_info:
            repo_task(
                self.profiler, 'info', lambda: repo_task(self.profiler, 'origin.changes', fail)
            )

        assert exc_info.value.task == 'origin.changes'

    def test_other_errors_propagate(self):
        """Test non engine errors are not wrapped."""

        def fail():
            raise OSError('disk full')

        with pytest.raises(OSError, match='disk full'):
            repo_task(self.profiler, 'origin.checkout', fail)


class TestConsoles:
    """Test console implementations."""

    def test_terminal_console(self):
        """Test the terminal console renders messages with rich."""
        output = io.StringIO()
        console = TerminalConsole(rich_console=RichConsole(file=output, width=200))

        console.progress('Resolving origin reference')
        console.warn('Couldn\'t find label')
        console.error('Migration failed')

        text = output.getvalue()
        assert 'Task: Resolving origin reference' in text
        assert 'WARN: Couldn\'t find label' in text
        assert 'ERROR: Migration failed' in text

    def test_terminal_console_default(self):
        """Test the terminal console writes to stderr without a rich console."""
        console = TerminalConsole()

        assert isinstance(console.console, RichConsole)
        assert console.console.stderr is True

    @pytest.mark.parametrize('auto_confirm', [True, False])
    def test_log_console_confirmation(self, auto_confirm):
        """Test the log console answers prompts without asking."""
        assert LogConsole(auto_confirm=auto_confirm).prompt_for_confirmation('Proceed?') is (
            auto_confirm
        )


class TestSetupLogging:
    """Test logging setup."""

    def teardown_method(self):
        """Restore the default logger."""
        setup_logging(level='INFO')

    def test_log_file(self, tmp_path):
        """Test logs are written to the configured file."""
        log_file = tmp_path / 'logs' / 'revsync.log'

        setup_logging(level='DEBUG', log_file=str(log_file))
        logger.info('Migrated 3')
        logger.complete()

        assert 'Migrated 3' in log_file.read_text()

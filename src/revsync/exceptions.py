"""Workflow engine exceptions."""

from typing import Any, Optional


class RevSyncError(Exception):
    """Base exception for workflow engine errors."""

    def __init__(self, message: str, task: Optional[str] = None):
        """Initialize workflow engine error.

        Args:
            message: Error message
            task: Name of the repo task that was running when the error happened
        """
        super().__init__(message)
        self.task = task


class CommandLineError(RevSyncError):
    """Invalid invocation of a workflow by the caller."""

    pass


class ValidationError(RevSyncError):
    """Configuration or flag combination is invalid."""

    pass


class ChangeRejectedError(ValidationError):
    """User declined to migrate a change when asked for confirmation."""

    pass


class RepoError(RevSyncError):
    """Failure while talking to an origin or destination repository."""

    pass


class CannotResolveRevisionError(RepoError):
    """A reference could not be resolved to a revision."""

    pass


class LastRevStateMismatchError(RepoError):
    """The destination's last migrated state changed during the run."""

    def __init__(self, message: str, expected: Optional[str], actual: Optional[str], **kwargs):
        """Initialize mismatch error.

        Args:
            message: Error message
            expected: Baseline recorded when the run started
            actual: Baseline reported right before writing
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual


class TransformError(RevSyncError):
    """Failure applying the transformation pipeline to a change."""

    pass


class EmptyChangeError(RevSyncError):
    """There is nothing to migrate."""

    pass


def check_condition(condition: bool, message: str, *args: Any) -> None:
    """Raise a ValidationError with a formatted message if condition is false."""
    if not condition:
        raise ValidationError(message % args if args else message)

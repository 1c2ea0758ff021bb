"""Testing utilities for revsync workflows.

In-memory collaborators to build workflows in tests without any real
repository:

    origin = DummyOrigin()
    origin.add_change('1', {'foo.txt': 'one'})
    destination = RecordingDestination()
"""

from .fakes import (
    DEFAULT_AUTHOR,
    ORIGIN_LABEL,
    DummyOrigin,
    DummyReader,
    ProcessedChange,
    RecordingConsole,
    RecordingDestination,
    RecordingTransformation,
    RecordingWriter,
)

__all__ = [
    'DEFAULT_AUTHOR',
    'ORIGIN_LABEL',
    'DummyOrigin',
    'DummyReader',
    'ProcessedChange',
    'RecordingConsole',
    'RecordingDestination',
    'RecordingTransformation',
    'RecordingWriter',
]

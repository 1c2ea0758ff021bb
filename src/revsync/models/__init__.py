"""Data models exchanged between the workflow engine and its collaborators."""

from .revision import Author, Change, ChangesResponse, EmptyReason, Revision
from .status import (
    DestinationEffect,
    DestinationStatus,
    EffectType,
    Info,
    MigrationReference,
    WriterContext,
)
from .glob import Glob
from .authoring import Authoring, AuthoringMappingMode
from .token import Token, TokenType, parse_identity_template

__all__ = [
    'Author',
    'Change',
    'ChangesResponse',
    'EmptyReason',
    'Revision',
    'DestinationEffect',
    'DestinationStatus',
    'EffectType',
    'Info',
    'MigrationReference',
    'WriterContext',
    'Glob',
    'Authoring',
    'AuthoringMappingMode',
    'Token',
    'TokenType',
    'parse_identity_template',
]

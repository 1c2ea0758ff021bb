"""Revision and change models."""

import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator


class Revision(BaseModel):
    """Origin-side pointer to a specific state of a repository."""

    value: str = Field(..., description='Canonical string form of the revision')
    context_reference: Optional[str] = Field(
        default=None,
        description='Human meaningful reference used to request the revision',
    )
    labels: Dict[str, List[str]] = Field(
        default_factory=dict, description='Labels associated with the revision'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @validator('value')
    def validate_value(cls, v):
        """Validate the canonical form is not blank."""
        if not v or not v.strip():
            raise ValueError('Revision value cannot be empty')
        return v

    def as_string(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class Author(BaseModel):
    """Author of a change."""

    name: str = Field(..., description='Author display name')
    email: str = Field(default='', description='Author email')

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def parse(cls, author: str) -> 'Author':
        """Parse an author in 'Name <email>' form.

        Args:
            author: Author string

        Returns:
            Parsed author

        Raises:
            ValueError: If the string is not in 'Name <email>' form
        """
        match = re.match(r'^\s*(?P<name>[^<]*?)\s*<(?P<email>[^>]*)>\s*$', author)
        if not match or not match.group('name'):
            raise ValueError(f"Author '{author}' doesn't match 'Name <email>' form")
        return cls(name=match.group('name'), email=match.group('email'))

    def __str__(self) -> str:
        return f'{self.name} <{self.email}>'


class Change(BaseModel):
    """One unit of origin history."""

    revision: Revision = Field(..., description='Revision of the change')
    author: Author = Field(..., description='Origin author')
    message: str = Field(default='', description='Change message')
    date: Optional[datetime] = Field(default=None, description='Change timestamp')
    labels: Dict[str, List[str]] = Field(
        default_factory=dict, description='Labels found in the change metadata'
    )
    changed_files: Optional[List[str]] = Field(
        default=None,
        description='Files modified by the change, None when unknown',
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def ref(self) -> str:
        return self.revision.as_string()

    @property
    def first_line_message(self) -> str:
        return self.message.strip().split('\n', 1)[0]

    def get_label(self, name: str) -> Optional[str]:
        """Return the last value of a label, or None if not present."""
        values = self.labels.get(name)
        return values[-1] if values else None


class EmptyReason(str, Enum):
    """Why a changes request returned no changes."""

    NO_CHANGES = 'no_changes'
    TO_IS_ANCESTOR = 'to_is_ancestor'
    UNRELATED_REVISIONS = 'unrelated_revisions'


class ChangesResponse(BaseModel):
    """Ordered changes, oldest first, for a (from, to] range."""

    changes: List[Change] = Field(default_factory=list, description='Changes in range')
    empty_reason: Optional[EmptyReason] = Field(
        default=None, description='Set when the response has no changes'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def for_changes(cls, changes: List[Change]) -> 'ChangesResponse':
        if not changes:
            raise ValueError('Use ChangesResponse.no_changes for an empty response')
        return cls(changes=list(changes))

    @classmethod
    def no_changes(cls, reason: EmptyReason) -> 'ChangesResponse':
        return cls(empty_reason=reason)

    @property
    def is_empty(self) -> bool:
        return self.empty_reason is not None

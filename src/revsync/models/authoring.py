"""Author mapping between origin and destination."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, validator

from .revision import Author


class AuthoringMappingMode(str, Enum):
    """How origin authors are mapped to destination authors."""

    OVERWRITE = 'overwrite'
    PASS_THRU = 'pass_thru'
    ALLOWED = 'allowed'


class Authoring(BaseModel):
    """Policy mapping origin authors to destination acceptable authors."""

    default_author: Author = Field(..., description='Author used when not allowed')
    mode: AuthoringMappingMode = Field(
        default=AuthoringMappingMode.PASS_THRU, description='Mapping mode'
    )
    allowlist: List[str] = Field(
        default_factory=list,
        description='Author emails allowed in ALLOWED mode',
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @validator('default_author', pre=True)
    def parse_default_author(cls, v):
        """Accept authors written as 'Name <email>'."""
        if isinstance(v, str):
            return Author.parse(v)
        return v

    @validator('allowlist', always=True)
    def validate_allowlist(cls, v, values):
        """Only ALLOWED mode uses an allowlist."""
        mode = values.get('mode')
        if v and mode != AuthoringMappingMode.ALLOWED:
            raise ValueError('allowlist can only be used with ALLOWED mode')
        if mode == AuthoringMappingMode.ALLOWED and not v:
            raise ValueError('ALLOWED mode requires a non-empty allowlist')
        return v

    def resolve(self, author: Author) -> Author:
        """Return the author to use in the destination for an origin author."""
        if self.mode == AuthoringMappingMode.OVERWRITE:
            return self.default_author
        if self.mode == AuthoringMappingMode.ALLOWED and author.email not in self.allowlist:
            return self.default_author
        return author

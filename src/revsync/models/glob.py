"""Path filters for origin and destination files."""

import re
from functools import lru_cache
from typing import List, Pattern

from pydantic import BaseModel, Field, validator


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Pattern:
    """Translate a glob with '**' support into a regular expression."""
    regex = ''
    i = 0
    while i < len(pattern):
        if pattern.startswith('**/', i):
            regex += '(?:.*/)?'
            i += 3
        elif pattern.startswith('**', i):
            regex += '.*'
            i += 2
        elif pattern[i] == '*':
            regex += '[^/]*'
            i += 1
        elif pattern[i] == '?':
            regex += '[^/]'
            i += 1
        else:
            regex += re.escape(pattern[i])
            i += 1
    return re.compile(f'^{regex}$')


class Glob(BaseModel):
    """Include/exclude glob patterns over repository relative paths."""

    include: List[str] = Field(..., description='Patterns of files to include')
    exclude: List[str] = Field(
        default_factory=list, description='Patterns of files to exclude'
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @validator('include', 'exclude', each_item=True)
    def validate_pattern(cls, v):
        """Patterns are relative to the repository root."""
        if v.startswith('/'):
            raise ValueError(f"Glob pattern '{v}' must be a relative path")
        return v

    @classmethod
    def all_files(cls) -> 'Glob':
        return cls(include=['**'])

    def matches(self, path: str) -> bool:
        """Check whether a relative path is selected by this glob.

        Args:
            path: Repository relative path, '/' separated

        Returns:
            True if the path matches an include pattern and no exclude pattern
        """
        path = path.lstrip('/')
        if not any(_compile(p).match(path) for p in self.include):
            return False
        return not any(_compile(p).match(path) for p in self.exclude)

    def __str__(self) -> str:
        if self.exclude:
            return f'glob(include = {self.include}, exclude = {self.exclude})'
        return f'glob({self.include})'

"""Config files participating in a workflow."""

from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, Field, validator


class ConfigFile(BaseModel):
    """A configuration file located under a root directory."""

    path: str = Field(..., description="Path of the file, e.g. 'admin/foo/bar.sky'")
    root: Optional[str] = Field(
        default=None, description="Root the identifier is relative to, e.g. 'admin'"
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @validator('root')
    def validate_root(cls, v, values):
        """The root must be a parent of the path."""
        path = values.get('path')
        if v is not None and path is not None:
            if not PurePosixPath(path).is_relative_to(PurePosixPath(v)):
                raise ValueError(f"Config file '{path}' is not under root '{v}'")
        return v

    @property
    def identifier(self) -> str:
        """Path relative to the root, stable across checkouts and machines."""
        path = PurePosixPath(self.path)
        if self.root is not None:
            path = path.relative_to(PurePosixPath(self.root))
        return path.as_posix()

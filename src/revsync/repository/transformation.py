"""Transformation contract and the data flowing through it."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.revision import Author, Change, Revision


class Metadata(BaseModel):
    """Message and author of the change being written to the destination."""

    message: str = Field(..., description='Destination change message')
    author: Author = Field(..., description='Destination change author')


class TransformWork(BaseModel):
    """Mutable state handed to transformations for one migration."""

    checkout_dir: Path = Field(..., description='Directory holding the files')
    metadata: Metadata = Field(..., description='Destination message and author')
    changes: List[Change] = Field(
        default_factory=list, description='Origin changes being migrated'
    )
    current_change: Optional[Change] = Field(
        default=None, description='Change whose state is being migrated'
    )
    resolved_reference: Revision = Field(..., description='Migrated revision')
    labels: Dict[str, str] = Field(
        default_factory=dict, description='Labels added by transformations'
    )

    def add_label(self, name: str, value: str) -> None:
        self.labels[name] = value

    def get_label(self, name: str) -> Optional[str]:
        """Find a label in transformation output, the current change or the revision.

        Args:
            name: Label name

        Returns:
            Last value of the label, None if not found anywhere
        """
        if name in self.labels:
            return self.labels[name]
        if self.current_change is not None:
            value = self.current_change.get_label(name)
            if value is not None:
                return value
        values = self.resolved_reference.labels.get(name)
        return values[-1] if values else None


class Transformation(ABC):
    """A transformation applied to a checkout between read and write."""

    @abstractmethod
    def transform(self, work: TransformWork) -> None:
        """Transform the files and metadata in place.

        Raises:
            TransformError: If the transformation cannot be applied
        """
        pass

    def reverse(self) -> 'Transformation':
        """Return the transformation undoing this one.

        Raises:
            NotImplementedError: If the transformation is not reversible
        """
        raise NotImplementedError(f'{self.describe()} is not reversible')

    def describe(self) -> str:
        return self.__class__.__name__


class TransformResult(BaseModel):
    """Everything a destination writer needs to write one migrated unit."""

    path: Path = Field(..., description='Directory with the transformed files')
    current_revision: Revision = Field(..., description='Origin revision written')
    requested_revision: Revision = Field(..., description='Revision requested by the run')
    author: Author = Field(..., description='Destination author')
    summary: str = Field(..., description='Destination change message')
    changes: List[Change] = Field(
        default_factory=list, description='Origin changes included'
    )
    baseline: Optional[str] = Field(
        default=None, description='Destination baseline for change requests'
    )
    change_identity: str = Field(..., description='Stable migration identity')
    workflow_name: str = Field(..., description='Workflow name')
    labels: Dict[str, str] = Field(
        default_factory=dict, description='Labels added by transformations'
    )
    set_rev_id: bool = Field(default=True, description='Record the origin label')
    smart_prune: bool = Field(default=False, description='Prune unchanged files')
    ask_for_confirmation: bool = Field(
        default=False, description='Writer asked the user to confirm'
    )

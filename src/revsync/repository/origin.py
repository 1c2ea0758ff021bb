"""Origin repository contracts."""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Generic, Optional, Set, TypeVar

from ..models.authoring import Authoring
from ..models.glob import Glob
from ..models.revision import Change, ChangesResponse, Revision

O = TypeVar('O', bound=Revision)


class VisitResult(str, Enum):
    """Whether a history visit should continue."""

    CONTINUE = 'continue'
    TERMINATE = 'terminate'


class Reader(ABC, Generic[O]):
    """Reads changes and files from an origin."""

    @abstractmethod
    def changes(self, from_rev: Optional[O], to_rev: O) -> ChangesResponse:
        """Return the changes in (from_rev, to_rev], oldest first.

        A from_rev of None means from the beginning of history.

        Raises:
            RepoError: If the origin cannot be read
        """
        pass

    @abstractmethod
    def change(self, revision: O) -> Change:
        """Return the change for a single revision."""
        pass

    @abstractmethod
    def visit_changes(
        self, start: O, visitor: Callable[[Change], VisitResult]
    ) -> None:
        """Walk history from start towards older changes until the visitor terminates."""
        pass

    @abstractmethod
    def checkout(self, revision: O, workdir: Path) -> None:
        """Write the files of the revision into workdir."""
        pass


class Origin(ABC, Generic[O]):
    """The source of truth repository being migrated from."""

    @abstractmethod
    def resolve(self, reference: Optional[str]) -> O:
        """Resolve a reference, or the default reference when None.

        Raises:
            CannotResolveRevisionError: If the reference doesn't exist
        """
        pass

    @abstractmethod
    def new_reader(self, origin_files: Glob, authoring: Authoring) -> Reader[O]:
        pass

    @abstractmethod
    def get_label_name(self) -> str:
        """Label used in the destination to record the migrated origin revision."""
        pass

    def describe(self, origin_files: Glob) -> Dict[str, Set[str]]:
        return {'type': {self.__class__.__name__}, 'root': {str(origin_files)}}

"""Destination repository contracts."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Generic, List, Optional, Set, TypeVar

from ..models.glob import Glob
from ..models.revision import Revision
from ..models.status import DestinationEffect, DestinationStatus, WriterContext
from .transformation import TransformResult

if TYPE_CHECKING:
    from ..utils.console import Console

D = TypeVar('D', bound=Revision)


class Writer(ABC, Generic[D]):
    """Writes migrated changes to a destination for the lifetime of one run."""

    @abstractmethod
    def get_destination_status(
        self, destination_files: Glob, origin_label_name: str
    ) -> Optional[DestinationStatus]:
        """Return the last migrated origin revision, None if never migrated."""
        pass

    @abstractmethod
    def write(
        self,
        transform_result: TransformResult,
        destination_files: Glob,
        console: 'Console',
    ) -> List[DestinationEffect]:
        """Write one migrated unit.

        Raises:
            EmptyChangeError: If the write would be a no-op in the destination
            RepoError: On transport or permission failures
        """
        pass


class Destination(ABC, Generic[D]):
    """The repository being migrated to."""

    @abstractmethod
    def new_writer(self, writer_context: WriterContext) -> Writer[D]:
        pass

    @abstractmethod
    def get_label_name_when_origin(self) -> str:
        """Label a destination change carries to point at its origin baseline."""
        pass

    def describe(self, destination_files: Glob) -> Dict[str, Set[str]]:
        return {
            'type': {self.__class__.__name__},
            'root': {str(destination_files)},
        }

"""In-memory origin, destination, transformation and console for tests."""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from ..exceptions import CannotResolveRevisionError, EmptyChangeError, RepoError
from ..models.authoring import Authoring
from ..models.glob import Glob
from ..models.revision import Author, Change, ChangesResponse, EmptyReason, Revision
from ..models.status import DestinationEffect, DestinationStatus, EffectType, WriterContext
from ..repository.destination import Destination, Writer
from ..repository.origin import Origin, Reader, VisitResult
from ..repository.transformation import Transformation, TransformResult, TransformWork
from ..utils.console import Console

DEFAULT_AUTHOR = Author.parse('Foo Bar <foo@bar.com>')
ORIGIN_LABEL = 'DummyOrigin-RevId'


class DummyOrigin(Origin[Revision]):
    """Origin with a linear in-memory history.

    Every change stores the full file tree at that revision. Calls to the
    origin and its readers are counted in `calls`.
    """

    def __init__(self, label_name: str = ORIGIN_LABEL):
        self.label_name = label_name
        self.history: List[Change] = []
        self.trees: Dict[str, Dict[str, str]] = {}
        self.calls: List[str] = []

    def add_change(
        self,
        ref: str,
        files: Optional[Dict[str, str]] = None,
        message: Optional[str] = None,
        author: Author = DEFAULT_AUTHOR,
        labels: Optional[Dict[str, List[str]]] = None,
        context_reference: Optional[str] = None,
        changed_files: Optional[Set[str]] = None,
    ) -> Change:
        """Append a change to the history.

        Args:
            ref: Canonical revision string
            files: Full file tree at this revision, previous tree if not set
            message: Change message, 'Change <ref>' if not set
            author: Change author
            labels: Labels of the change
            context_reference: Context reference of the revision
            changed_files: Files changed, computed from the trees if not set

        Returns:
            The new change
        """
        previous = self.trees[self.history[-1].ref] if self.history else {}
        tree = dict(previous if files is None else files)
        if changed_files is None:
            changed_files = {
                path
                for path in set(previous) | set(tree)
                if previous.get(path) != tree.get(path)
            }
        change = Change(
            revision=Revision(value=ref, context_reference=context_reference),
            author=author,
            message=message if message is not None else f'Change {ref}\n',
            date=datetime(2020, 1, 1),
            labels=labels or {},
            changed_files=sorted(changed_files),
        )
        self.history.append(change)
        self.trees[ref] = tree
        return change

    def _index(self, ref: str) -> int:
        for index, change in enumerate(self.history):
            if change.ref == ref or change.revision.context_reference == ref:
                return index
        raise CannotResolveRevisionError(f"Cannot find revision '{ref}'")

    def resolve(self, reference: Optional[str]) -> Revision:
        self.calls.append('resolve')
        if reference is None:
            if not self.history:
                raise CannotResolveRevisionError('Origin has no changes')
            return self.history[-1].revision
        return self.history[self._index(reference)].revision

    def new_reader(self, origin_files: Glob, authoring: Authoring) -> 'DummyReader':
        self.calls.append('new_reader')
        return DummyReader(self, origin_files)

    def get_label_name(self) -> str:
        return self.label_name


class DummyReader(Reader[Revision]):
    def __init__(self, origin: DummyOrigin, origin_files: Glob):
        self.origin = origin
        self.origin_files = origin_files

    def changes(self, from_rev: Optional[Revision], to_rev: Revision) -> ChangesResponse:
        self.origin.calls.append('changes')
        end = self.origin._index(to_rev.as_string())
        start = 0 if from_rev is None else self.origin._index(from_rev.as_string()) + 1
        changes = self.origin.history[start : end + 1]
        if not changes:
            return ChangesResponse.no_changes(EmptyReason.NO_CHANGES)
        return ChangesResponse.for_changes(changes)

    def change(self, revision: Revision) -> Change:
        self.origin.calls.append('change')
        return self.origin.history[self.origin._index(revision.as_string())]

    def visit_changes(self, start: Revision, visitor: Callable[[Change], VisitResult]) -> None:
        self.origin.calls.append('visit_changes')
        for change in reversed(self.origin.history[: self.origin._index(start.as_string()) + 1]):
            if visitor(change) == VisitResult.TERMINATE:
                return

    def checkout(self, revision: Revision, workdir: Path) -> None:
        self.origin.calls.append('checkout')
        for path, content in self.origin.trees[revision.as_string()].items():
            if not self.origin_files.matches(path):
                continue
            target = workdir / path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding='utf-8')


class ProcessedChange:
    """A write received by a RecordingDestination."""

    def __init__(self, result: TransformResult, files: Dict[str, str], dry_run: bool):
        self.result = result
        self.files = files
        self.dry_run = dry_run

    @property
    def origin_ref(self) -> str:
        return self.result.current_revision.as_string()


class RecordingDestination(Destination[Revision]):
    """Destination keeping every write in memory.

    Non dry-run writes update `baseline`, the last migrated origin revision.
    Writes of origin revisions in `fail_on` raise RepoError and those in
    `empty_on` raise EmptyChangeError.
    """

    def __init__(self, baseline: Optional[str] = None):
        self.baseline = baseline
        self.processed: List[ProcessedChange] = []
        self.writer_contexts: List[WriterContext] = []
        self.status_calls = 0
        self.fail_on: Set[str] = set()
        self.empty_on: Set[str] = set()
        self.on_get_status: Optional[Callable[['RecordingDestination'], None]] = None

    def new_writer(self, writer_context: WriterContext) -> 'RecordingWriter':
        self.writer_contexts.append(writer_context)
        return RecordingWriter(self, writer_context)

    def get_label_name_when_origin(self) -> str:
        return ORIGIN_LABEL


class RecordingWriter(Writer[Revision]):
    def __init__(self, destination: RecordingDestination, context: WriterContext):
        self.destination = destination
        self.context = context

    def get_destination_status(
        self, destination_files: Glob, origin_label_name: str
    ) -> Optional[DestinationStatus]:
        self.destination.status_calls += 1
        if self.destination.on_get_status is not None:
            self.destination.on_get_status(self.destination)
        if self.destination.baseline is None:
            return None
        return DestinationStatus(baseline=self.destination.baseline)

    def write(
        self, transform_result: TransformResult, destination_files: Glob, console: Console
    ) -> List[DestinationEffect]:
        ref = transform_result.current_revision.as_string()
        if ref in self.destination.fail_on:
            raise RepoError(f"Failed writing '{ref}' to the destination")
        if ref in self.destination.empty_on:
            raise EmptyChangeError(f"'{ref}' is a no-op in the destination")

        files = {
            path.relative_to(transform_result.path).as_posix(): path.read_text(encoding='utf-8')
            for path in sorted(transform_result.path.rglob('*'))
            if path.is_file()
        }
        self.destination.processed.append(
            ProcessedChange(transform_result, files, self.context.dry_run)
        )
        if not self.context.dry_run:
            self.destination.baseline = ref
        return [
            DestinationEffect(
                type=EffectType.CREATED,
                summary=f'Created revision for {ref}',
                origin_refs=[ref],
                destination_ref=f'dest-{len(self.destination.processed)}',
            )
        ]


class RecordingTransformation(Transformation):
    """Transformation recording the work it receives.

    An optional callable does the actual transformation.
    """

    def __init__(self, fn: Optional[Callable[[TransformWork], None]] = None):
        self.fn = fn
        self.works: List[TransformWork] = []

    def transform(self, work: TransformWork) -> None:
        self.works.append(work)
        if self.fn is not None:
            self.fn(work)


class RecordingConsole(Console):
    """Console keeping messages in memory and answering prompts with `answer`."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.messages: List[str] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []
        self.prompts: List[str] = []

    def progress(self, message: str) -> None:
        self.messages.append(message)

    def info(self, message: str) -> None:
        self.messages.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def prompt_for_confirmation(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer

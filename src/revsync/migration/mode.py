"""Workflow modes: how origin changes are grouped and written to the destination."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List

from loguru import logger

from ..config.config import CHANGE_REQUEST_PARENT_FLAG
from ..exceptions import CannotResolveRevisionError, EmptyChangeError, ValidationError
from ..models.revision import Change
from ..models.status import DestinationEffect
from ..repository.origin import VisitResult
from ..repository.transformation import Metadata
from .run_helper import WorkflowRunHelper

SQUASH_HEADER = 'Project import generated by revsync.'


class WorkflowMode(str, Enum):
    """Migration pipeline strategy."""

    SQUASH = 'SQUASH'
    ITERATIVE = 'ITERATIVE'
    CHANGE_REQUEST = 'CHANGE_REQUEST'
    CHECK_LAST_REV_STATE = 'CHECK_LAST_REV_STATE'

    def strategy(self) -> 'ModeStrategy':
        return MODE_STRATEGIES[self]

    def run(self, helper: WorkflowRunHelper) -> List[DestinationEffect]:
        return self.strategy().run(helper)

    def __str__(self) -> str:
        return self.value


def squash_message(changes: List[Change]) -> str:
    """Default message for a squashed write, listing changes newest first."""
    if not changes:
        return f'{SQUASH_HEADER}\n'
    lines = [SQUASH_HEADER, '', 'Included changes:', '']
    for change in reversed(changes):
        lines.append(
            f'  - {change.ref} {change.first_line_message} by {change.author}'
        )
    return '\n'.join(lines) + '\n'


class ModeStrategy(ABC):
    """Abstract base class for workflow mode strategies."""

    def __init__(self):
        self.logger = logger.bind(strategy=self.__class__.__name__)

    @abstractmethod
    def run(self, helper: WorkflowRunHelper) -> List[DestinationEffect]:
        """Read, transform and write changes for one run.

        Args:
            helper: Run helper bound to the resolved revision, reader and writer

        Returns:
            Destination effects of every write performed
        """
        pass


class SquashStrategy(ModeStrategy):
    """Write all pending changes as one destination change."""

    def run(self, helper: WorkflowRunHelper) -> List[DestinationEffect]:
        workflow = helper.workflow
        current = helper.resolved_ref

        expected_state = None
        if workflow.check_last_rev_state:
            expected_state = helper.capture_last_rev_state()

        try:
            last_rev = helper.get_last_rev()
        except CannotResolveRevisionError as e:
            # A bad last revision flag is never forced through.
            if not helper.is_force() or workflow.last_revision_flag is not None:
                raise
            helper.console.warn(f'{e}. Migrating anyway because of force')
            last_rev = None

        response = helper.changes(last_rev, current)
        if response.is_empty:
            if last_rev is not None and not helper.is_force():
                raise EmptyChangeError(
                    f"No new changes to import for resolved ref '{current}' "
                    f"({response.empty_reason.value})"
                )
            changes = []
        else:
            changes = list(response.changes)

        migrator = helper.default_migrator()
        if (
            changes
            and not helper.is_force()
            and all(migrator.should_skip_change(c) for c in changes)
        ):
            raise EmptyChangeError(
                f"No changes up to '{current}' match any origin_files "
                f'({workflow.origin_files})'
            )

        if workflow.check_last_rev_state:
            helper.verify_last_rev_state(expected_state)

        author = changes[-1].author if changes else workflow.authoring.default_author
        self.logger.info(f'Squashing {len(changes)} change(s) up to {current}')
        return migrator.migrate(
            rev=current,
            metadata=Metadata(message=squash_message(changes), author=author),
            changes=changes,
            current_change=changes[-1] if changes else None,
        )


class IterativeStrategy(ModeStrategy):
    """Write one destination change per pending origin change, oldest first."""

    def run(self, helper: WorkflowRunHelper) -> List[DestinationEffect]:
        workflow = helper.workflow
        current = helper.resolved_ref

        expected_state = None
        if workflow.check_last_rev_state:
            expected_state = helper.capture_last_rev_state()

        last_rev = helper.get_last_rev()
        response = helper.changes(last_rev, current)
        if response.is_empty:
            raise EmptyChangeError(
                f"No new changes to import for resolved ref '{current}' "
                f'({response.empty_reason.value})'
            )

        changes = list(response.changes)
        limit = workflow.workflow_options.iterative_limit_changes
        if len(changes) > limit:
            self.logger.info(
                f'Limiting the migration to {limit} of {len(changes)} pending changes'
            )
            changes = changes[:limit]

        if workflow.check_last_rev_state:
            helper.verify_last_rev_state(expected_state)

        effects: List[DestinationEffect] = []
        migrated = 0
        for index, change in enumerate(changes, start=1):
            migrator = helper.get_migrator_for_change(change)
            if migrator.should_skip_change(change):
                self.logger.info(
                    f"Skipping '{change.ref}': no changed file matches origin_files"
                )
                continue

            helper.console.progress(f'Change {index} of {len(changes)} ({change.ref})')
            try:
                effects.extend(
                    migrator.migrate(
                        rev=change.revision,
                        metadata=Metadata(message=change.message, author=change.author),
                        changes=[change],
                        current_change=change,
                    )
                )
            except EmptyChangeError as e:
                helper.console.warn(
                    f"Migration of origin revision '{change.ref}' resulted in an empty "
                    f'change in the destination: {e}'
                )
                continue
            migrated += 1

        if migrated == 0:
            raise EmptyChangeError(
                f"Iterative workflow produced no changes in the destination for "
                f"resolved ref '{current}'"
            )
        return effects


class ChangeRequestStrategy(ModeStrategy):
    """Write the requested change on top of its baseline in the destination."""

    def run(self, helper: WorkflowRunHelper) -> List[DestinationEffect]:
        workflow = helper.workflow
        current = helper.resolved_ref

        change = helper.repo_task('origin.change', lambda: helper.reader.change(current))
        baseline = workflow.workflow_options.change_request_parent
        if baseline is None:
            baseline = self._find_baseline(helper)

        self.logger.info(f"Migrating change request '{current}' on top of '{baseline}'")
        return helper.get_migrator_for_change(change).migrate(
            rev=current,
            metadata=Metadata(message=change.message, author=change.author),
            changes=[change],
            current_change=change,
            baseline=baseline,
        )

    def _find_baseline(self, helper: WorkflowRunHelper) -> str:
        """Find the newest ancestor recording which origin revision it came from.

        Raises:
            ValidationError: If no ancestor carries the destination label
        """
        label = helper.workflow.destination.get_label_name_when_origin()
        start = helper.resolved_ref.as_string()
        found: List[str] = []

        def visitor(change: Change) -> VisitResult:
            if change.ref == start:
                return VisitResult.CONTINUE
            value = change.get_label(label)
            if value is None:
                return VisitResult.CONTINUE
            found.append(value)
            return VisitResult.TERMINATE

        helper.repo_task(
            'origin.find_baseline',
            lambda: helper.reader.visit_changes(helper.resolved_ref, visitor),
        )
        if not found:
            raise ValidationError(
                f"Cannot find matching parent commit in the destination with label "
                f"'{label}'. Use '{CHANGE_REQUEST_PARENT_FLAG}' flag to force a parent "
                'commit to use as baseline in the destination'
            )
        return found[0]


class CheckLastRevStateStrategy(ModeStrategy):
    """SQUASH or ITERATIVE with the destination state verified before writing."""

    def run(self, helper: WorkflowRunHelper) -> List[DestinationEffect]:
        base = helper.workflow.check_last_rev_state_base
        self.logger.info(f'Checking last revision state, writing as {base}')
        return MODE_STRATEGIES[base].run(helper)


MODE_STRATEGIES = {
    WorkflowMode.SQUASH: SquashStrategy(),
    WorkflowMode.ITERATIVE: IterativeStrategy(),
    WorkflowMode.CHANGE_REQUEST: ChangeRequestStrategy(),
    WorkflowMode.CHECK_LAST_REV_STATE: CheckLastRevStateStrategy(),
}

"""Per invocation state shared by the workflow mode strategies."""

import filecmp
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Generic, List, Optional

from loguru import logger

from ..config.config import INIT_HISTORY_FLAG, LAST_REV_FLAG
from ..exceptions import (
    CannotResolveRevisionError,
    ChangeRejectedError,
    LastRevStateMismatchError,
    RepoError,
    ValidationError,
)
from ..models.glob import Glob
from ..models.revision import Change, ChangesResponse, Revision
from ..models.status import DestinationEffect, DestinationStatus
from ..monitor.events import ChangeMigrationFinishedEvent, ChangeMigrationStartedEvent
from ..repository.destination import D, Writer
from ..repository.origin import O, Reader
from ..repository.transformation import Metadata, TransformResult, TransformWork
from .actions import ActionContext, ActionResultType

if TYPE_CHECKING:
    from .workflow import Workflow


class WorkflowRunHelper(Generic[O, D]):
    """Binds a resolved revision, a reader and a writer for one workflow run."""

    def __init__(
        self,
        workflow: 'Workflow[O, D]',
        workdir: Optional[Path],
        resolved_ref: O,
        reader: Reader[O],
        writer: Optional[Writer[D]],
        raw_source_ref: Optional[str],
    ):
        """Initialize run helper.

        Args:
            workflow: Workflow being run
            workdir: Working directory, None for read only requests like info
            resolved_ref: Revision the run migrates up to
            reader: Origin reader
            writer: Destination writer, None for read only requests
            raw_source_ref: Reference as requested by the caller, if any
        """
        self.workflow = workflow
        self.workdir = workdir
        self.resolved_ref = resolved_ref
        self.reader = reader
        self.writer = writer
        self.raw_source_ref = raw_source_ref
        self.logger = logger.bind(component='WorkflowRunHelper', workflow=workflow.name)

    @property
    def console(self):
        return self.workflow.general_options.console

    def is_force(self) -> bool:
        return self.workflow.general_options.force

    def repo_task(self, description, task):
        return self.workflow.general_options.repo_task(description, task)

    def resolve(self, reference: Optional[str]) -> O:
        return self.repo_task(
            'origin.resolve', lambda: self.workflow.origin.resolve(reference)
        )

    def get_destination_status(self) -> Optional[DestinationStatus]:
        return self.repo_task(
            'destination.previous_ref',
            lambda: self.writer.get_destination_status(
                self.workflow.destination_files, self.workflow.origin.get_label_name()
            ),
        )

    def get_last_rev(self) -> Optional[O]:
        """Find the last migrated revision.

        The last revision flag wins over the destination status. Without both,
        init history means migrating from the beginning.

        Returns:
            Last migrated revision, None to migrate from the beginning

        Raises:
            CannotResolveRevisionError: If there is no last revision and history
                initialization was not requested
        """
        last_revision_flag = self.workflow.last_revision_flag
        if last_revision_flag is not None:
            try:
                return self.resolve(last_revision_flag)
            except RepoError as e:
                raise CannotResolveRevisionError(
                    f"Could not resolve {LAST_REV_FLAG} '{last_revision_flag}': {e}"
                ) from e

        if self.workflow.init_history:
            self.logger.info('Initializing history, migrating from the first change')
            return None

        status = self.get_destination_status()
        if status is None:
            raise CannotResolveRevisionError(
                f"Previous revision label '{self.workflow.origin.get_label_name()}' "
                f'could not be found in the destination and {LAST_REV_FLAG} was not '
                f'passed. Use {LAST_REV_FLAG} or {INIT_HISTORY_FLAG} for the first '
                'migration'
            )
        return self.resolve(status.baseline)

    def changes(self, from_rev: Optional[O], to_rev: O) -> ChangesResponse:
        return self.repo_task('origin.changes', lambda: self.reader.changes(from_rev, to_rev))

    def capture_last_rev_state(self) -> Optional[str]:
        """Return the destination baseline, resolved through the origin."""
        status = self.get_destination_status()
        if status is None:
            return None
        return self.resolve(status.baseline).as_string()

    def verify_last_rev_state(self, expected: Optional[str]) -> None:
        """Check the destination still records the baseline seen when the run started.

        Raises:
            LastRevStateMismatchError: If the destination state drifted
        """
        actual = self.repo_task('destination.last_rev_state', self.capture_last_rev_state)
        if actual != expected:
            raise LastRevStateMismatchError(
                f"Last migrated revision in the destination changed during the run of "
                f"'{self.workflow.name}': expected '{expected}', found '{actual}'",
                expected=expected,
                actual=actual,
                task='destination.last_rev_state',
            )
        self.logger.debug(f'Destination last migrated state verified: {actual}')

    def get_migrator_for_change(
        self, change: Change, dry_run: Optional[bool] = None
    ) -> 'ChangeMigrator[O, D]':
        return ChangeMigrator(self, dry_run=dry_run)

    def default_migrator(self) -> 'ChangeMigrator[O, D]':
        return ChangeMigrator(self)


class ChangeMigrator(Generic[O, D]):
    """Transforms and writes origin changes, and decides which ones to skip."""

    def __init__(self, helper: WorkflowRunHelper[O, D], dry_run: Optional[bool] = None):
        self.helper = helper
        self.workflow = helper.workflow
        self.dry_run = self.workflow.dry_run_mode if dry_run is None else dry_run
        self.logger = helper.logger

    def should_skip_change(self, change: Change) -> bool:
        """Whether a change can be skipped because it can't affect the destination.

        Args:
            change: Origin change

        Returns:
            True if no changed file is selected by origin files nor is a config file
        """
        if self.workflow.migrate_noop_changes:
            return False
        if change.changed_files is None:
            return False

        origin_files: Glob = self.workflow.origin_files
        if any(origin_files.matches(path) for path in change.changed_files):
            return False

        # Config files can live next to the migrated code while being excluded by
        # origin files. Changes to them still need a migration.
        config_paths = self.workflow.config_paths()
        for path in change.changed_files:
            for config_path in config_paths:
                if path.endswith(config_path):
                    self.helper.console.info(
                        f'Migrating {change.ref} because config file {config_path} '
                        'changed at that revision'
                    )
                    return False
        return True

    def migrate(
        self,
        rev: Revision,
        metadata: Metadata,
        changes: List[Change],
        current_change: Optional[Change] = None,
        baseline: Optional[str] = None,
        identity_revision: Optional[Revision] = None,
    ) -> List[DestinationEffect]:
        """Checkout, transform and write one migrated unit.

        Args:
            rev: Origin revision whose files are migrated
            metadata: Message and origin author of the destination change
            changes: Origin changes included in this write
            current_change: Change used to look up labels
            baseline: Destination baseline for change requests
            identity_revision: Revision the identity is computed for, rev if None

        Returns:
            Destination effects of the write

        Raises:
            ValueError: If the run helper has no working directory
        """
        workflow = self.workflow
        options = workflow.general_options
        if self.helper.workdir is None:
            raise ValueError('A working directory is required to migrate changes')

        checkout_dir = self._clean_dir(self.helper.workdir / 'checkout')
        self.helper.repo_task(
            'origin.checkout', lambda: self.helper.reader.checkout(rev, checkout_dir)
        )

        origin_copy = None
        if workflow.reverse_transform_for_check is not None:
            origin_copy = self.helper.workdir / 'origin'
            if origin_copy.exists():
                shutil.rmtree(origin_copy)
            shutil.copytree(checkout_dir, origin_copy)

        work = TransformWork(
            checkout_dir=checkout_dir,
            metadata=Metadata(
                message=metadata.message,
                author=workflow.authoring.resolve(metadata.author),
            ),
            changes=changes,
            current_change=current_change,
            resolved_reference=rev,
        )
        with options.profiler.start('transforms'):
            workflow.transformation.transform(work)

        if origin_copy is not None:
            with options.profiler.start('reverse_transform_check'):
                self._check_reversible(work, origin_copy)

        identity = workflow.get_migration_identity(identity_revision or rev, work)
        result = TransformResult(
            path=checkout_dir,
            current_revision=rev,
            requested_revision=self.helper.resolved_ref,
            author=work.metadata.author,
            summary=work.metadata.message,
            changes=changes,
            baseline=baseline,
            change_identity=identity,
            workflow_name=workflow.name,
            labels=dict(work.labels),
            set_rev_id=workflow.set_rev_id,
            smart_prune=workflow.smart_prune,
            ask_for_confirmation=workflow.ask_for_confirmation,
        )

        if workflow.ask_for_confirmation and not self.dry_run:
            if not options.console.prompt_for_confirmation(
                f"Proceed with migration of '{rev}' to the destination?"
            ):
                raise ChangeRejectedError(
                    'User aborted execution: did not confirm the migration'
                )

        options.event_monitor.on_change_migration_started(
            ChangeMigrationStartedEvent(workflow_name=workflow.name, origin_ref=rev.as_string())
        )
        effects = self.helper.repo_task(
            'destination.write',
            lambda: self.helper.writer.write(result, workflow.destination_files, options.console),
        )
        options.event_monitor.on_change_migration_finished(
            ChangeMigrationFinishedEvent(
                workflow_name=workflow.name, origin_ref=rev.as_string(), effects=effects
            )
        )
        self.logger.info(f'Migrated {rev} with identity {identity}')

        self._run_after_migration_actions(effects)
        return effects

    def _run_after_migration_actions(self, effects: List[DestinationEffect]) -> None:
        context = ActionContext(
            workflow_name=self.workflow.name, dry_run=self.dry_run, effects=effects
        )
        for action in self.workflow.after_migration_actions:
            with self.workflow.general_options.profiler.start(f'action/{action.name}'):
                result = action.run(context)
            if result.type == ActionResultType.ERROR:
                raise ValidationError(
                    f"Action '{action.name}' failed after migration: {result.message}"
                )
            self.logger.debug(f"Action '{action.name}' finished: {result.type.value}")

    def _check_reversible(self, work: TransformWork, origin_copy: Path) -> None:
        """Reverse the transformed files and compare them with the origin checkout.

        Raises:
            ValidationError: If the reversed files don't match the origin
        """
        reverse_dir = self.helper.workdir / 'reverse'
        if reverse_dir.exists():
            shutil.rmtree(reverse_dir)
        shutil.copytree(work.checkout_dir, reverse_dir)

        reverse_work = work.copy(
            update={'checkout_dir': reverse_dir, 'metadata': work.metadata.copy()}
        )
        self.workflow.reverse_transform_for_check.transform(reverse_work)

        different = _diff_trees(origin_copy, reverse_dir, self.workflow.origin_files)
        if different:
            raise ValidationError(
                f"Workflow '{self.workflow.name}' is not reversible. Files that differ "
                f"after reversing the transformations: {', '.join(different)}"
            )

    @staticmethod
    def _clean_dir(path: Path) -> Path:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
        return path


def _list_files(root: Path, files: Glob) -> List[str]:
    result = []
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            relative = (Path(dirpath) / filename).relative_to(root).as_posix()
            if files.matches(relative):
                result.append(relative)
    return sorted(result)


def _diff_trees(left: Path, right: Path, files: Glob) -> List[str]:
    """Relative paths selected by files that differ between two trees."""
    left_files = _list_files(left, files)
    right_files = _list_files(right, files)
    different = sorted(set(left_files) ^ set(right_files))
    for relative in sorted(set(left_files) & set(right_files)):
        if not filecmp.cmp(left / relative, right / relative, shallow=False):
            different.append(relative)
    return sorted(different)

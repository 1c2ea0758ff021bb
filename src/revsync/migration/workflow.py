"""Workflow orchestrator: one configured migration from an origin to a destination."""

from pathlib import Path
from typing import Callable, Dict, Generic, List, Optional, Sequence, Set

from loguru import logger
from pydantic import BaseModel, Field

from ..config.config import CHECK_LAST_REV_STATE_FLAG, INIT_HISTORY_FLAG, WorkflowOptions
from ..config.config_file import ConfigFile
from ..config.options import GeneralOptions
from ..exceptions import CommandLineError, EmptyChangeError, ValidationError, check_condition
from ..models.authoring import Authoring
from ..models.glob import Glob
from ..models.revision import Change, Revision
from ..models.status import (
    DestinationEffect,
    DestinationStatus,
    Info,
    MigrationReference,
    WriterContext,
)
from ..models.token import Token
from ..monitor.events import MigrationFinishedEvent, MigrationOutcome, MigrationStartedEvent
from ..repository.destination import D, Destination
from ..repository.origin import O, Origin
from ..repository.transformation import Transformation, TransformWork
from .actions import Action
from .identity import (
    CHANGE_IDENTITY_TAG,
    MissingLabelError,
    compute_custom_identity,
    compute_identity,
    render_template,
)
from .mode import WorkflowMode
from .run_helper import WorkflowRunHelper


class WorkflowSnapshot(BaseModel):
    """Configuration fields of a workflow, for logging."""

    name: str = Field(..., description='Workflow name')
    origin: str = Field(..., description='Origin')
    destination: str = Field(..., description='Destination')
    authoring: str = Field(..., description='Authoring')
    transformation: str = Field(..., description='Transformation')
    origin_files: str = Field(..., description='Origin files glob')
    destination_files: str = Field(..., description='Destination files glob')
    mode: str = Field(..., description='Workflow mode')
    reverse_transform_for_check: Optional[str] = Field(
        default=None, description='Reverse transformation used for checks'
    )
    ask_for_confirmation: bool = Field(..., description='Ask before writing')
    check_last_rev_state: bool = Field(..., description='Verify destination state')
    after_migration_actions: List[str] = Field(
        default_factory=list, description='Actions run after each write'
    )
    change_identity: List[str] = Field(
        default_factory=list, description='Custom identity template'
    )
    set_rev_id: bool = Field(..., description='Record the origin revision label')


class Workflow(Generic[O, D]):
    """A migration of one origin to one destination.

    A project can define several workflows. Each run resolves what changed in
    the origin since the last migration and hands it to the configured mode.
    """

    def __init__(
        self,
        name: str,
        origin: Origin[O],
        destination: Destination[D],
        authoring: Authoring,
        transformation: Transformation,
        *,
        main_config_file: ConfigFile,
        general_options: GeneralOptions,
        workflow_options: Optional[WorkflowOptions] = None,
        origin_files: Optional[Glob] = None,
        destination_files: Optional[Glob] = None,
        mode: WorkflowMode = WorkflowMode.SQUASH,
        all_config_files: Optional[Callable[[], Dict[str, ConfigFile]]] = None,
        reverse_transform_for_check: Optional[Transformation] = None,
        reversible_check: bool = False,
        ask_for_confirmation: bool = False,
        dry_run_mode: bool = False,
        check_last_rev_state: bool = False,
        check_last_rev_state_base: WorkflowMode = WorkflowMode.SQUASH,
        after_migration_actions: Sequence[Action] = (),
        change_identity: Sequence[Token] = (),
        set_rev_id: bool = True,
        smart_prune: bool = False,
        migrate_noop_changes: bool = False,
    ):
        """Initialize workflow.

        Args:
            name: Workflow name, unique within its config file
            origin: Repository migrated from
            destination: Repository migrated to
            authoring: Author mapping
            transformation: Transformation applied between read and write
            main_config_file: Config file defining the workflow
            general_options: Console, profiler, event monitor and global flags
            workflow_options: Workflow command line flags
            origin_files: Origin paths to migrate, all files if not set
            destination_files: Destination paths owned by the workflow, all if not set
            mode: Migration mode
            all_config_files: Supplier of every config file used by the run
            reverse_transform_for_check: Transformation used to check reversibility
            reversible_check: Check reversibility with the reverse of transformation
                when no reverse_transform_for_check is given
            ask_for_confirmation: Prompt before each write
            dry_run_mode: Don't publish destination writes
            check_last_rev_state: Verify the destination state before writing
            check_last_rev_state_base: Write mode for CHECK_LAST_REV_STATE
            after_migration_actions: Actions run after each write
            change_identity: Custom identity template tokens
            set_rev_id: Record the origin revision label in the destination
            smart_prune: Let the destination prune unchanged files
            migrate_noop_changes: Never skip changes that don't touch origin files
        """
        if not name:
            raise ValueError('Workflow name cannot be empty')
        if check_last_rev_state_base not in (WorkflowMode.SQUASH, WorkflowMode.ITERATIVE):
            raise ValueError(
                f'{WorkflowMode.CHECK_LAST_REV_STATE} can only write as '
                f'{WorkflowMode.SQUASH} or {WorkflowMode.ITERATIVE}'
            )
        if reversible_check and reverse_transform_for_check is None:
            try:
                reverse_transform_for_check = transformation.reverse()
            except NotImplementedError as e:
                raise ValidationError(
                    f"Workflow '{name}' checks reversibility but "
                    f'{transformation.describe()} is not reversible'
                ) from e

        self.name = name
        self.origin = origin
        self.destination = destination
        self.authoring = authoring
        self.transformation = transformation
        self.main_config_file = main_config_file
        self.general_options = general_options
        self.workflow_options = workflow_options or WorkflowOptions()
        self.origin_files = origin_files or Glob.all_files()
        self.destination_files = destination_files or Glob.all_files()
        self.mode = mode
        self.reverse_transform_for_check = reverse_transform_for_check
        self.ask_for_confirmation = ask_for_confirmation
        self.dry_run_mode = dry_run_mode
        self.check_last_rev_state_base = check_last_rev_state_base
        self.after_migration_actions = list(after_migration_actions)
        self.change_identity = list(change_identity)
        self.set_rev_id = set_rev_id
        self.smart_prune = smart_prune
        self.migrate_noop_changes = migrate_noop_changes
        self._check_last_rev_state = check_last_rev_state
        self._all_config_files_supplier = all_config_files or (
            lambda: {main_config_file.path: main_config_file}
        )
        self._all_config_files: Optional[Dict[str, ConfigFile]] = None

        self.logger = logger.bind(component='Workflow', workflow=name)

    @property
    def console(self):
        return self.general_options.console

    @property
    def last_revision_flag(self) -> Optional[str]:
        return self.workflow_options.last_revision

    @property
    def init_history(self) -> bool:
        return self.workflow_options.init_history

    @property
    def check_last_rev_state(self) -> bool:
        return (
            self._check_last_rev_state
            or self.workflow_options.check_last_rev_state
            or self.mode == WorkflowMode.CHECK_LAST_REV_STATE
        )

    @property
    def effective_mode(self) -> WorkflowMode:
        """Mode used to write: CHECK_LAST_REV_STATE writes as its base mode."""
        if self.mode == WorkflowMode.CHECK_LAST_REV_STATE:
            return self.check_last_rev_state_base
        return self.mode

    def get_mode_string(self) -> str:
        return self.mode.value

    def run(self, workdir: Path, source_refs: Sequence[str] = ()) -> List[DestinationEffect]:
        """Migrate the origin up to the requested reference.

        Args:
            workdir: Working directory for checkouts and transformations
            source_refs: At most one origin reference, the origin default if empty

        Returns:
            Destination effects of every write

        Raises:
            CommandLineError: If more than one source reference is passed
            ValidationError: If the flags are not compatible with the mode
        """
        if len(source_refs) > 1:
            raise CommandLineError(
                f'Workflow does not support multiple source_ref arguments yet: '
                f'{list(source_refs)}'
            )
        source_ref = source_refs[0] if source_refs else None

        self.validate_flags()
        options = self.general_options
        with options.profiler.start(f'run/{self.name}'):
            self.console.progress(
                'Getting last revision: Resolving '
                + (source_ref if source_ref is not None else 'origin reference')
            )
            resolved_ref = options.repo_task(
                'origin.resolve_source_ref', lambda: self.origin.resolve(source_ref)
            )
            self.logger.info(
                f"Running workflow '{self.name}' and ref '{resolved_ref.as_string()}': {self}"
            )
            self.logger.info(f'Using working directory : {workdir}')

            helper = self.new_run_helper(workdir, resolved_ref, source_ref)
            options.event_monitor.on_migration_started(
                MigrationStartedEvent(workflow_name=self.name, mode=self.get_mode_string())
            )
            try:
                with options.profiler.start(self.mode.value.lower()):
                    effects = self.mode.run(helper)
            except EmptyChangeError as e:
                self._migration_finished(MigrationOutcome.NO_OP, str(e))
                raise
            except Exception as e:
                self._migration_finished(MigrationOutcome.ERROR, str(e))
                raise
            self._migration_finished(MigrationOutcome.SUCCESS)
            return effects

    def _migration_finished(self, outcome: MigrationOutcome, error: Optional[str] = None) -> None:
        self.general_options.event_monitor.on_migration_finished(
            MigrationFinishedEvent(
                workflow_name=self.name, outcome=outcome, error_message=error
            )
        )

    def validate_flags(self) -> None:
        """Validate that flags are compatible with this workflow.

        Raises:
            ValidationError: If a flag can't be used with the mode
        """
        check_condition(
            not self.init_history or self.mode != WorkflowMode.CHANGE_REQUEST,
            '%s is not compatible with %s',
            INIT_HISTORY_FLAG,
            WorkflowMode.CHANGE_REQUEST,
        )
        check_condition(
            not self.check_last_rev_state or self.mode != WorkflowMode.CHANGE_REQUEST,
            '%s is not compatible with %s',
            CHECK_LAST_REV_STATE_FLAG,
            WorkflowMode.CHANGE_REQUEST,
        )

    def new_run_helper(
        self, workdir: Optional[Path], resolved_ref: O, raw_source_ref: Optional[str]
    ) -> WorkflowRunHelper[O, D]:
        options = self.general_options
        reader = options.repo_task(
            'origin.new_reader',
            lambda: self.origin.new_reader(self.origin_files, self.authoring),
        )
        writer_context = WriterContext(
            workflow_name=self.name,
            workflow_identity_user=self.workflow_options.workflow_identity_user,
            dry_run=self.dry_run_mode,
            origin_revision=resolved_ref,
        )
        writer = options.repo_task(
            'destination.new_writer', lambda: self.destination.new_writer(writer_context)
        )
        return WorkflowRunHelper(self, workdir, resolved_ref, reader, writer, raw_source_ref)

    def all_config_files(self) -> Dict[str, ConfigFile]:
        if self._all_config_files is None:
            self._all_config_files = dict(self._all_config_files_supplier())
        return self._all_config_files

    def config_paths(self) -> Set[str]:
        """Config files relative to their roots.

        For example a config file 'admin/foo/bar' with root 'admin' is 'foo/bar'.
        """
        return {config.identifier for config in self.all_config_files().values()}

    def get_info(self) -> Info:
        """Compute the last migrated revision and the changes pending migration.

        Nothing is written to the destination and the filesystem is not used.
        """
        return self.general_options.repo_task('info', self._compute_info)

    def _compute_info(self) -> Info:
        options = self.general_options
        last_resolved = options.repo_task(
            'origin.last_resolved', lambda: self.origin.resolve(None)
        )
        reader = options.repo_task(
            'origin.new_reader',
            lambda: self.origin.new_reader(self.origin_files, self.authoring),
        )
        status = options.repo_task(
            'destination.previous_ref', lambda: self._get_destination_status(last_resolved)
        )
        last_migrated = options.repo_task(
            'origin.last_migrated',
            lambda: None if status is None else self.origin.resolve(status.baseline),
        )

        def read_changes() -> List[Change]:
            response = reader.changes(last_migrated, last_resolved)
            return [] if response.is_empty else list(response.changes)

        all_changes = options.repo_task('origin.changes', read_changes)
        # No workdir and no writer: info only reads change metadata.
        helper = WorkflowRunHelper(self, None, last_resolved, reader, None, None)

        affected = [
            change
            for change in all_changes
            if not helper.get_migrator_for_change(change, dry_run=True).should_skip_change(change)
        ]
        return Info(
            migration_references=[
                MigrationReference(
                    label=f'workflow_{self.name}',
                    last_migrated=last_migrated,
                    available_to_migrate=affected,
                )
            ]
        )

    def _get_destination_status(self, revision: O) -> Optional[DestinationStatus]:
        if self.last_revision_flag is not None:
            return DestinationStatus(baseline=self.last_revision_flag)
        writer_context = WriterContext(
            workflow_name=self.name,
            workflow_identity_user=self.workflow_options.workflow_identity_user,
            dry_run=True,
            origin_revision=revision,
        )
        return self.destination.new_writer(writer_context).get_destination_status(
            self.destination_files, self.origin.get_label_name()
        )

    def get_origin_description(self) -> Dict[str, Set[str]]:
        return self.origin.describe(self.origin_files)

    def get_destination_description(self) -> Dict[str, Set[str]]:
        return self.destination.describe(self.destination_files)

    def get_migration_identity(
        self, requested_revision: Revision, transform_work: Optional[TransformWork] = None
    ) -> str:
        """Identity of a migration, stable between runs for the same reference.

        It depends on the config file location relative to its root, the
        workflow name and the reference requested. Destinations use it to
        reuse code reviews and similar artifacts.

        Args:
            requested_revision: Revision being migrated
            transform_work: Transformation state used to look up template labels

        Returns:
            Identity string
        """
        # ITERATIVE creates one destination change per origin change, so it
        # ignores context references shared by several revisions.
        if (
            requested_revision.context_reference is not None
            and self.effective_mode != WorkflowMode.ITERATIVE
        ):
            reference = requested_revision.context_reference
        else:
            reference = requested_revision.as_string()

        config_path = self.main_config_file.identifier
        identity_user = self.workflow_options.workflow_identity_user
        if not self.change_identity:
            return compute_identity(
                CHANGE_IDENTITY_TAG, reference, self.name, config_path, identity_user
            )

        def get_label(name: str) -> Optional[str]:
            return transform_work.get_label(name) if transform_work is not None else None

        try:
            text = render_template(
                self.change_identity, reference, self.name, config_path, get_label
            )
        except MissingLabelError as e:
            self.console.warn(
                f"Couldn't find label '{e.label}'. Using the default identity algorithm"
            )
            return compute_identity(
                CHANGE_IDENTITY_TAG, reference, self.name, config_path, identity_user
            )
        return compute_custom_identity(text, identity_user)

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            name=self.name,
            origin=str(self.origin),
            destination=str(self.destination),
            authoring=str(self.authoring),
            transformation=self.transformation.describe(),
            origin_files=str(self.origin_files),
            destination_files=str(self.destination_files),
            mode=self.get_mode_string(),
            reverse_transform_for_check=(
                self.reverse_transform_for_check.describe()
                if self.reverse_transform_for_check is not None
                else None
            ),
            ask_for_confirmation=self.ask_for_confirmation,
            check_last_rev_state=self.check_last_rev_state,
            after_migration_actions=[a.name for a in self.after_migration_actions],
            change_identity=[str(t) for t in self.change_identity],
            set_rev_id=self.set_rev_id,
        )

    def __str__(self) -> str:
        fields = ', '.join(f'{k}={v}' for k, v in self.snapshot().dict().items())
        return f'Workflow{{{fields}}}'

"""Workflow engine: orchestrator, modes, run helper and identities."""

from .actions import Action, ActionContext, ActionResult, ActionResultType
from .identity import compute_custom_identity, compute_identity, hash_identity
from .mode import (
    ChangeRequestStrategy,
    CheckLastRevStateStrategy,
    IterativeStrategy,
    ModeStrategy,
    SquashStrategy,
    WorkflowMode,
)
from .run_helper import ChangeMigrator, WorkflowRunHelper
from .workflow import Workflow, WorkflowSnapshot

__all__ = [
    'Action',
    'ActionContext',
    'ActionResult',
    'ActionResultType',
    'compute_custom_identity',
    'compute_identity',
    'hash_identity',
    'ChangeRequestStrategy',
    'CheckLastRevStateStrategy',
    'IterativeStrategy',
    'ModeStrategy',
    'SquashStrategy',
    'WorkflowMode',
    'ChangeMigrator',
    'WorkflowRunHelper',
    'Workflow',
    'WorkflowSnapshot',
]

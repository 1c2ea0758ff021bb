"""Actions executed after each destination write."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from ..models.status import DestinationEffect


class ActionResultType(str, Enum):
    """Action result enumeration."""

    SUCCESS = 'success'
    NO_OP = 'no_op'
    ERROR = 'error'


class ActionResult(BaseModel):
    """Result of running an after migration action."""

    type: ActionResultType = Field(..., description='Result type')
    message: str = Field(default='', description='Human readable detail')

    @classmethod
    def success(cls, message: str = '') -> 'ActionResult':
        return cls(type=ActionResultType.SUCCESS, message=message)

    @classmethod
    def error(cls, message: str) -> 'ActionResult':
        return cls(type=ActionResultType.ERROR, message=message)


class ActionContext(BaseModel):
    """What an action gets to see about the write that just happened."""

    workflow_name: str = Field(..., description='Workflow name')
    dry_run: bool = Field(default=False, description='Write was a dry run')
    effects: List[DestinationEffect] = Field(
        default_factory=list, description='Effects of the write'
    )


class Action(ABC):
    """Feedback action run after a migration, e.g. to comment on a review."""

    @abstractmethod
    def run(self, context: ActionContext) -> ActionResult:
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__

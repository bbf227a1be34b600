"""Result types for workflow execution."""

from enum import Enum

from pydantic import BaseModel


class Outcome(str, Enum):
    """How a workflow ended.

    Every outcome is a clean exit; errors travel as exceptions.
    """

    COMPLETED = "completed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class WorkflowResult(BaseModel):
    """Result of a workflow run, returned up to the command dispatcher."""

    outcome: Outcome
    message: str | None = None

    @classmethod
    def completed(cls, message: str | None = None) -> "WorkflowResult":
        return cls(outcome=Outcome.COMPLETED, message=message)

    @classmethod
    def declined(cls, message: str | None = None) -> "WorkflowResult":
        return cls(outcome=Outcome.DECLINED, message=message)

    @classmethod
    def cancelled(cls, message: str | None = None) -> "WorkflowResult":
        return cls(outcome=Outcome.CANCELLED, message=message)

    @classmethod
    def aborted(cls, message: str | None = None) -> "WorkflowResult":
        return cls(outcome=Outcome.ABORTED, message=message)

    @property
    def exit_code(self) -> int:
        return 0

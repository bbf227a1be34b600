"""Command workflows: each a short, guarded sequence of steps."""

from coursegit.workflow.cherry_pick import CherryPick
from coursegit.workflow.context import WorkflowContext
from coursegit.workflow.edit_commit import EditCommit
from coursegit.workflow.exercise import Exercise
from coursegit.workflow.pull import Pull
from coursegit.workflow.rebase_to_main import RebaseToMain
from coursegit.workflow.reset import Reset
from coursegit.workflow.walk_through import WalkThrough

__all__ = [
    "WorkflowContext",
    "Reset",
    "CherryPick",
    "EditCommit",
    "WalkThrough",
    "RebaseToMain",
    "Pull",
    "Exercise",
]

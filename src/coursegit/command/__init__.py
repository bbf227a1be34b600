"""CLI command modules for coursegit."""

from coursegit.command.cherry_pick import CherryPickCommand
from coursegit.command.edit_commit import EditCommitCommand
from coursegit.command.exercise import ExerciseCommand
from coursegit.command.lessons import LessonsCommand, RenameCommand
from coursegit.command.pull import PullCommand
from coursegit.command.rebase_to_main import RebaseToMainCommand
from coursegit.command.reset import ResetCommand
from coursegit.command.walk_through import WalkThroughCommand

__all__ = [
    "ResetCommand",
    "CherryPickCommand",
    "EditCommitCommand",
    "WalkThroughCommand",
    "RebaseToMainCommand",
    "PullCommand",
    "ExerciseCommand",
    "LessonsCommand",
    "RenameCommand",
]

#!/usr/bin/env python3
"""coursegit CLI - navigate lesson commits in a course repository."""

import contextlib
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from coursegit.command.cherry_pick import CherryPickCommand
from coursegit.command.edit_commit import EditCommitCommand
from coursegit.command.exercise import ExerciseCommand
from coursegit.command.lessons import LessonsCommand, RenameCommand
from coursegit.command.pull import PullCommand
from coursegit.command.rebase_to_main import RebaseToMainCommand
from coursegit.command.reset import ResetCommand
from coursegit.command.walk_through import WalkThroughCommand
from coursegit.core.config import State
from coursegit.core.log import logger


class CliState(State):
    """Reset to, cherry-pick, edit and walk through numbered lesson
    commits of a course repository, and run its exercises.

    Lesson commits are identified by a prefix such as 01.02.03 in the
    commit subject. The course branch is refreshed from the upstream
    course repository before lessons are resolved.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.git.target-branch value)
    2. ./coursegit.yaml, the user config file, and --include files
    3. .env file
    4. Environment variables
       (COURSEGIT_CONFIG__GIT__TARGET_BRANCH=value)
    """

    reset: CliSubCommand[ResetCommand]
    cherry_pick: CliSubCommand[CherryPickCommand]
    edit_commit: CliSubCommand[EditCommitCommand]
    walk_through: CliSubCommand[WalkThroughCommand]
    rebase_to_main: CliSubCommand[RebaseToMainCommand]
    pull: CliSubCommand[PullCommand]
    exercise: CliSubCommand[ExerciseCommand]
    lessons: CliSubCommand[LessonsCommand]
    rename: CliSubCommand[RenameCommand]

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            with contextlib.suppress(SystemExit):
                CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Use logger as context manager to ensure files are closed on exit
        with logger:
            exit_code = subcommand.run_workflow(self)
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()

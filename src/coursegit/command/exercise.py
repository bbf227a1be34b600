"""Exercise command - run lesson exercises."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import CliPositionalArg

from coursegit.command.base import RepoCommand
from coursegit.workflow.exercise import Exercise


class ExerciseCommand(RepoCommand):
    """Run an exercise's entry file, then go on to the next one.

    LESSON is the number at the start of the lesson folder name
    (3, or 1.03 for a folder named 01.03-intro). Without it a
    searchable list of lessons is offered.
    """

    lesson: CliPositionalArg[str | None] = Field(
        default=None,
        description="Lesson number to run, e.g. 3 or 1.03",
    )
    root: Path | None = Field(
        default=None,
        description=(
            "Folder holding the sections (default: config.exercise.root)"
        ),
    )
    env_file: Path | None = Field(
        default=None,
        description=(
            "Environment file for the exercise "
            "(default: config.exercise.env_file)"
        ),
    )

    def workflow(self, state) -> Exercise:
        settings = state.config.exercise
        cwd = self.workdir()
        return Exercise(
            root=cwd / (self.root or settings.root),
            env_file=cwd / (self.env_file or settings.env_file),
            cwd=cwd,
            lesson=self.lesson,
        )

"""Reset command - move to a lesson's problem or solution state."""

from pydantic import Field
from pydantic_settings import CliPositionalArg

from coursegit.command.base import RepoCommand
from coursegit.workflow.reset import Reset


class ResetCommand(RepoCommand):
    """Reset to a specific lesson commit.

    Resolves LESSON_ID (1.1.1, 01.01.01 and 1-1-1 are the same lesson)
    on the course branch, or offers a searchable list when it is
    omitted. The branch is refreshed from the upstream course
    repository first.
    """

    lesson_id: CliPositionalArg[str | None] = Field(
        default=None,
        description="Lesson to reset to, e.g. 01.02.03",
    )
    branch: str | None = Field(
        default=None,
        description=(
            "Branch to search for the lesson commit "
            "(default: config.git.target_branch)"
        ),
    )
    problem: bool = Field(
        default=False,
        description="Reset to problem state (start the exercise)",
    )
    solution: bool = Field(
        default=False,
        description="Reset to solution state (final code)",
    )
    demo: bool = Field(
        default=False,
        description=(
            "Reset the current branch to the solution without prompts "
            "and leave the lesson's changes unstaged"
        ),
    )

    def workflow(self, state) -> Reset:
        return Reset(
            branch=self.branch or state.config.git.target_branch,
            lesson_id=self.lesson_id,
            problem=self.problem,
            solution=self.solution,
            demo=self.demo,
        )

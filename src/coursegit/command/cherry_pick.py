"""Cherry-pick command - apply a lesson commit to the current branch."""

from pydantic import Field
from pydantic_settings import CliPositionalArg

from coursegit.command.base import RepoCommand
from coursegit.workflow.cherry_pick import CherryPick


class CherryPickCommand(RepoCommand):
    """Cherry-pick a lesson commit onto the current branch.

    Lessons already present on the current branch are not offered.
    """

    lesson_id: CliPositionalArg[str | None] = Field(
        default=None,
        description="Lesson to cherry-pick, e.g. 01.02.03",
    )
    branch: str | None = Field(
        default=None,
        description=(
            "Branch to search for the lesson commit "
            "(default: config.git.target_branch)"
        ),
    )

    def workflow(self, state) -> CherryPick:
        return CherryPick(
            branch=self.branch or state.config.git.target_branch,
            lesson_id=self.lesson_id,
        )

"""Edit-commit command - amend a lesson commit and replay the rest."""

from pydantic import Field
from pydantic_settings import CliPositionalArg

from coursegit.command.base import RepoCommand
from coursegit.workflow.edit_commit import EditCommit


class EditCommitCommand(RepoCommand):
    """Edit a lesson commit and cherry-pick the commits that follow it."""

    lesson_id: CliPositionalArg[str | None] = Field(
        default=None,
        description="Lesson to edit, e.g. 01.02.03",
    )
    branch: str | None = Field(
        default=None,
        description=(
            "Branch holding the lesson commit "
            "(default: config.git.target_branch)"
        ),
    )

    def workflow(self, state) -> EditCommit:
        return EditCommit(
            branch=self.branch or state.config.git.target_branch,
            lesson_id=self.lesson_id,
        )

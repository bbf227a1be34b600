"""Rebase-to-main command."""

from pydantic import Field

from coursegit.command.base import RepoCommand
from coursegit.workflow.rebase_to_main import RebaseToMain


class RebaseToMainCommand(RepoCommand):
    """Rebase the target branch onto main and force push it."""

    target: str | None = Field(
        default=None,
        description=(
            "The branch to rebase (default: config.git.target_branch)"
        ),
    )

    def workflow(self, state) -> RebaseToMain:
        return RebaseToMain(
            target=self.target or state.config.git.target_branch
        )

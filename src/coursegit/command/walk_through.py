"""Walk-through command - reveal the live branch one commit at a time."""

from pydantic import Field

from coursegit.command.base import RepoCommand
from coursegit.workflow.walk_through import WalkThrough


class WalkThroughCommand(RepoCommand):
    """Walk through every commit between the main and live branches."""

    main_branch: str | None = Field(
        default=None,
        description=(
            "Base branch to start from (default: config.git.main_branch)"
        ),
    )
    live_branch: str | None = Field(
        default=None,
        description=(
            "Branch with the commits to walk through "
            "(default: config.git.target_branch)"
        ),
    )

    def workflow(self, state) -> WalkThrough:
        git_config = state.config.git
        return WalkThrough(
            main_branch=self.main_branch or git_config.main_branch,
            live_branch=self.live_branch or git_config.target_branch,
        )

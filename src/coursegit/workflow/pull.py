"""Pull workflow - merge the course upstream's main into a working branch."""

from __future__ import annotations

from dataclasses import dataclass

from coursegit.core.errors import InvalidBranchOperation
from coursegit.core.result import WorkflowResult
from coursegit.workflow.context import WorkflowContext


class UncommittedChangesBlockPull(InvalidBranchOperation):
    """The working tree must be clean before pulling."""

    def __init__(self, status_text: str):
        self.status_text = status_text
        super().__init__(
            f"You have uncommitted changes:\n\n{status_text}",
            hint=(
                "Commit or stash your changes before pulling:\n"
                "  git stash\n"
                "  coursegit pull\n"
                "  git stash pop"
            ),
        )


@dataclass
class Pull:
    """Fetch main from the detected upstream remote and merge it."""

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        git = ctx.git
        main_branch = ctx.config.git.main_branch

        git.ensure_is_git_repo()

        current = git.current_branch()
        if current == main_branch:
            raise InvalidBranchOperation(
                f"Cannot pull when on {main_branch} branch. "
                "Switch to a working branch first."
            )

        changes = git.uncommitted_changes()
        if changes.dirty:
            raise UncommittedChangesBlockPull(changes.status_text)

        remote = git.detect_upstream_remote().name

        ctx.say(f"Fetching {main_branch} from {remote}...")
        git.fetch(remote, main_branch)

        upstream_main = f"{remote}/{main_branch}"
        ctx.say(f"Merging {upstream_main} into {current}...")
        git.merge(upstream_main)

        message = f"Successfully merged {upstream_main} into {current}"
        ctx.say()
        ctx.success(message)
        return WorkflowResult.completed(message)

"""Cherry-pick workflow - apply one lesson commit to the current branch."""

from __future__ import annotations

from dataclasses import dataclass

from coursegit.core.errors import InvalidBranchOperation
from coursegit.core.log import logger
from coursegit.core.result import WorkflowResult
from coursegit.lessons.commits import select_lesson_commit
from coursegit.workflow.context import WorkflowContext


@dataclass
class CherryPick:
    """Cherry-pick a lesson commit that is not yet on the current branch.

    Only lessons missing from HEAD are offered. A conflict leaves the
    repository mid-cherry-pick and is reported as an error; there is
    no resolution loop here.
    """

    branch: str
    lesson_id: str | None = None

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        git = ctx.git

        git.ensure_is_git_repo()
        git.ensure_upstream_branch_connected(self.branch)

        selection = select_lesson_commit(
            git,
            ctx.prompts,
            branch=self.branch,
            lesson_id=self.lesson_id,
            prompt_message=(
                "Which lesson do you want to cherry-pick? (type to search)"
            ),
            exclude_current_branch=True,
            console=ctx.console,
        )

        current = git.current_branch()
        if current == self.branch:
            raise InvalidBranchOperation(
                f'Cannot cherry-pick when on target branch "{self.branch}"'
            )

        main_branch = ctx.config.git.main_branch
        if current == main_branch:
            ctx.say(f"Cannot cherry-pick directly onto {main_branch}.")
            name = ctx.prompts.text("Enter new branch name:")
            git.checkout_new_branch(name)
            ctx.success(f"Created and checked out branch: {name}")
            current = name

        ctx.say(f"Cherry-picking {selection.commit.sha} onto {current}...\n")
        git.cherry_pick(selection.commit.sha)

        logger.info(
            "Cherry-picked {sha} onto {branch}",
            sha=selection.commit.sha,
            branch=current,
        )
        message = f"Successfully cherry-picked lesson {selection.lesson_id}"
        ctx.success(message)
        return WorkflowResult.completed(message)

"""Rebase-to-main workflow - replay the live branch onto main."""

from __future__ import annotations

from dataclasses import dataclass

from coursegit.core.errors import InvalidBranchOperation
from coursegit.core.log import logger
from coursegit.core.result import WorkflowResult
from coursegit.workflow.context import WorkflowContext


@dataclass
class RebaseToMain:
    """Rebase ``target`` onto main and force-push it with lease.

    Runs only from a clean main. Each step waits for confirmation;
    declining any of them stops the workflow where it is.
    """

    target: str

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        git = ctx.git
        main_branch = ctx.config.git.main_branch
        origin = ctx.config.git.origin_remote

        git.ensure_is_git_repo()

        if git.current_branch() != main_branch:
            raise InvalidBranchOperation(
                f"Cannot rebase to {main_branch} when not on "
                f"{main_branch} branch"
            )
        if git.uncommitted_changes().dirty:
            raise InvalidBranchOperation(
                f"Cannot rebase to {main_branch} when there are "
                "uncommitted changes"
            )

        steps = [
            (
                f"Do you want to checkout {self.target}?",
                lambda: git.checkout(self.target),
            ),
            (
                f"Do you want to rebase to {main_branch}?",
                lambda: git.rebase(main_branch),
            ),
            (
                f"Do you want to force push to {self.target}?",
                lambda: git.push_force_with_lease(origin, self.target),
            ),
            (
                f"Do you want to checkout {main_branch}?",
                lambda: git.checkout(main_branch),
            ),
        ]
        for question, step in steps:
            if not ctx.prompts.confirm(question, default=True):
                logger.info("Stopped before: {question}", question=question)
                return WorkflowResult.declined("Rebase-to-main cancelled")
            step()

        message = (
            f"Successfully rebased {self.target} to {main_branch} "
            "and force pushed"
        )
        ctx.success(message)
        return WorkflowResult.completed(message)

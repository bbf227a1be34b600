"""Walk-through workflow - reveal the live branch one commit at a time."""

from __future__ import annotations

from dataclasses import dataclass

from coursegit.core.errors import NoCommitsFound
from coursegit.core.log import logger
from coursegit.core.prompt import Choice
from coursegit.core.result import WorkflowResult
from coursegit.lessons.commits import CommitRecord, parse_commits
from coursegit.workflow.context import WorkflowContext
from coursegit.workflow.demo import apply_demo_reset

NEXT_CHOICES = [
    Choice(value="continue", title="Continue to next commit"),
    Choice(value="cancel", title="Cancel walk-through"),
]


@dataclass
class WalkThrough:
    """Step through ``main..live`` oldest first, each commit shown as
    unstaged changes on top of its parent.

    However the walk ends (finished, cancelled, interrupted or failed),
    the working branch is hard-reset to the live branch tip.
    """

    main_branch: str
    live_branch: str

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        git = ctx.git
        runtime = ctx.state.runtime.walk_through

        git.ensure_is_git_repo()

        if not self._prepare_branch(ctx):
            runtime.status = "cancelled"
            return WorkflowResult.declined("Walk-through cancelled")

        ctx.say(
            f"\nRetrieving commits between {self.main_branch} "
            f"and {self.live_branch}..."
        )
        commits = self._commits(ctx)
        if not commits:
            raise NoCommitsFound(self.main_branch, self.live_branch)

        runtime.commits_total = len(commits)
        runtime.status = "running"
        ctx.say(f"\nFound {len(commits)} commits to walk through\n")

        completed = False
        try:
            completed = self._walk(ctx, commits)
        finally:
            runtime.status = "completed" if completed else "cancelled"
            self._return_to_live(ctx, completed)

        if completed:
            return WorkflowResult.completed("Walk-through completed")
        return WorkflowResult.cancelled("Walk-through cancelled")

    def _prepare_branch(self, ctx: WorkflowContext) -> bool:
        """Get onto a disposable working branch.

        Returns False when the user declines to discard their changes.
        """
        git = ctx.git
        current = git.current_branch()

        if current in (self.main_branch, self.live_branch):
            ctx.say(
                f"You are on {current}. "
                "Walk-through requires a working branch."
            )
            name = ctx.prompts.text("Enter name for new working branch:")
            git.checkout_new_branch(name)
            ctx.success(f"Created and switched to {name}")
            return True

        changes = git.uncommitted_changes()
        if changes.dirty:
            ctx.warn("\nWarning: You have uncommitted changes:")
            ctx.say(changes.status_text)
            return ctx.prompts.confirm(
                "This will lose all uncommitted work. Continue?",
                default=False,
            )
        return True

    def _commits(self, ctx: WorkflowContext) -> list[CommitRecord]:
        return parse_commits(ctx.git.log_oneline_reverse(
            f"{self.main_branch}..{self.live_branch}"
        ))

    def _walk(
        self, ctx: WorkflowContext, commits: list[CommitRecord]
    ) -> bool:
        """Reveal each commit in turn; False if the user cancels."""
        runtime = ctx.state.runtime.walk_through
        total = len(commits)

        for number, commit in enumerate(commits, start=1):
            ctx.rule()
            ctx.say(f"Commit {number}/{total}: {commit.sha}")
            subject = commit.message
            if commit.lesson_id:
                subject = f"{commit.lesson_id} {subject}"
            ctx.say(f"Message: {subject}")
            ctx.rule()

            apply_demo_reset(ctx.git, commit.sha, ctx.say)
            runtime.commits_applied = number

            action = ctx.prompts.select(
                f"Commit {number}/{total} applied. Next?", NEXT_CHOICES
            )
            if action == "cancel":
                return False
        return True

    def _return_to_live(self, ctx: WorkflowContext, completed: bool):
        ctx.say("\n" + "=" * 60)
        ctx.say(
            "Walk-through completed!" if completed
            else "Walk-through cancelled"
        )
        ctx.say(f"Returning to {self.live_branch}...")
        ctx.git.reset_hard(self.live_branch)
        logger.info(
            "Walk-through ended at {applied}/{total}",
            applied=ctx.state.runtime.walk_through.commits_applied,
            total=ctx.state.runtime.walk_through.commits_total,
        )
        ctx.success(f"Returned to {self.live_branch}")
        ctx.rule()

"""Edit-commit workflow - amend a pushed lesson and replay what follows."""

from __future__ import annotations

from dataclasses import dataclass

from coursegit.core.errors import (
    CheckoutFailed,
    CherryPickConflict,
    GitError,
    InvalidBranchOperation,
    PushFailed,
    ResetFailed,
)
from coursegit.core.log import logger
from coursegit.core.result import WorkflowResult
from coursegit.lessons.commits import select_lesson_commit
from coursegit.workflow.conflict import CherryPickConflictLoop, ConflictState
from coursegit.workflow.context import WorkflowContext


def _commits(count: int) -> str:
    return f"{count} commit{'' if count == 1 else 's'}"


@dataclass
class EditCommit:
    """Rewrite one lesson commit on a working branch.

    Steps:
    1. Reset the working branch to the lesson commit and turn it back
       into unstaged changes for the user to edit.
    2. Recommit with the original message, lesson id included, so the
       rewritten history still resolves by lesson id.
    3. Cherry-pick every later commit from ``origin/<branch>``,
       looping on conflicts until resolved, skipped or aborted.
    4. Optionally move ``branch`` to the result and force-push it with
       lease.
    """

    branch: str
    lesson_id: str | None = None

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        git = ctx.git
        runtime = ctx.state.runtime.edit_commit
        origin = ctx.config.git.origin_remote

        git.ensure_is_git_repo()
        git.fetch_origin()

        current = git.current_branch()
        if current == self.branch:
            raise InvalidBranchOperation(
                f'Cannot edit commit on target branch "{self.branch}". '
                "Switch to a different branch first."
            )
        runtime.working_branch = current

        selection = select_lesson_commit(
            git,
            ctx.prompts,
            branch=self.branch,
            lesson_id=self.lesson_id,
            prompt_message=(
                "Which lesson do you want to edit? (type to search)"
            ),
            exclude_current_branch=False,
            console=ctx.console,
        )
        lesson_id = selection.lesson_id
        original_message = f"{lesson_id} {selection.commit.message}"
        target_sha = selection.commit.sha
        runtime.target_sha = target_sha

        remote_branch = f"{origin}/{self.branch}"
        tip = git.rev_parse(remote_branch)
        following = git.rev_list_count(target_sha, remote_branch)
        runtime.following_commits = following

        if following == 0:
            ctx.warn(
                f"Warning: No commits after {lesson_id}. "
                "You can still edit this commit."
            )
        else:
            ctx.say(
                f"Will reset to {lesson_id}. "
                f"Will cherry-pick {_commits(following)} after."
            )

        self._open_session(ctx, target_sha, lesson_id)

        if not ctx.prompts.confirm("Ready to commit?", default=True):
            ctx.say("Session cancelled. Branch left as-is.")
            return WorkflowResult.declined("Session cancelled")

        ctx.say(f'Committing with original message: "{original_message}"')
        git.stage_all()
        git.commit(original_message)
        runtime.status = "committed"
        ctx.success("Commit complete")

        if following > 0 and not self._replay(
            ctx, f"{target_sha}..{tip}", following
        ):
            runtime.status = "aborted"
            return WorkflowResult.aborted(
                "Cherry-pick aborted. Branch left as-is."
            )
        runtime.status = "replayed"

        ctx.say()
        ctx.success(f"Edit complete! Lesson {lesson_id} updated.")

        if not ctx.prompts.confirm(
            f"Save changes to {self.branch} branch?", default=True
        ):
            ctx.say(f"Changes kept on {current}. Session complete.")
            return WorkflowResult.declined(f"Changes kept on {current}")

        self._save(ctx, current)
        runtime.status = "saved"

        if not ctx.prompts.confirm(
            f"Force push {self.branch} to origin?", default=False
        ):
            ctx.say(
                f"Changes saved locally to {self.branch}. Not pushed."
            )
            return WorkflowResult.declined("Not pushed")

        ctx.say(f"Force pushing {self.branch} to {origin}...")
        try:
            git.push_force_with_lease(origin, self.branch)
        except PushFailed as e:
            e.hint = (
                f"Changes are saved locally on {self.branch}. "
                "Fetch and retry the push."
            )
            raise
        runtime.status = "pushed"
        ctx.success(f"Pushed {self.branch} to {origin}")

        self._switch_back(ctx, current)
        return WorkflowResult.completed(f"Lesson {lesson_id} updated")

    def _open_session(self, ctx: WorkflowContext, sha: str, lesson_id: str):
        """Leave ``sha``'s changes unstaged on top of its parent."""
        ctx.say(f"Resetting to {sha} ({lesson_id})...")
        ctx.git.reset_hard(sha)
        ctx.say("Undoing commit and unstaging changes...")
        ctx.git.reset_soft_head_minus_one()
        ctx.git.restore_staged()
        ctx.state.runtime.edit_commit.status = "editing"
        ctx.success("Reset complete with unstaged changes")
        ctx.say(
            "\nSession active. Make your changes to the code. "
            "ALL unstaged changes will be added to the commit."
        )

    def _replay(
        self, ctx: WorkflowContext, range_: str, count: int
    ) -> bool:
        """Cherry-pick the following commits; False when aborted."""
        ctx.say(f"\nCherry-picking {_commits(count)}...")
        try:
            ctx.git.cherry_pick(range_)
        except CherryPickConflict:
            ctx.warn("\nCherry-pick conflict detected!")
            ctx.say("Resolve conflicts, then continue.\n")

            loop = CherryPickConflictLoop(ctx)
            outcome = loop.run()
            ctx.state.runtime.edit_commit.conflict_rounds = loop.rounds
            return outcome is not ConflictState.ABORTED

        ctx.success("Cherry-pick complete")
        return True

    def _save(self, ctx: WorkflowContext, working_branch: str):
        """Point ``branch`` at the working branch tip."""
        ctx.say(f"Switching to {self.branch} and applying changes...")
        try:
            ctx.git.checkout(self.branch)
        except CheckoutFailed as e:
            e.hint = f"Changes remain on {working_branch}."
            raise

        try:
            ctx.git.reset_hard(working_branch)
        except ResetFailed as e:
            e.message = f"Failed to reset {self.branch} to {working_branch}."
            e.hint = (
                f"You are now on {self.branch}; "
                f"your edits remain on {working_branch}."
            )
            raise

        ctx.success(f"{self.branch} now matches {working_branch}")

    def _switch_back(self, ctx: WorkflowContext, working_branch: str):
        try:
            ctx.git.checkout(working_branch)
        except GitError as e:
            logger.warn(
                "Could not switch back to {branch}: {error}",
                branch=working_branch,
                error=e.message,
            )
            return
        ctx.success(f"Switched back to {working_branch}")

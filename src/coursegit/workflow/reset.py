"""Reset workflow - move to a lesson's problem or solution state."""

from __future__ import annotations

from dataclasses import dataclass

from coursegit.core.errors import InvalidBranchOperation, InvalidFlags
from coursegit.core.log import logger
from coursegit.core.prompt import Choice
from coursegit.core.result import WorkflowResult
from coursegit.lessons.commits import select_lesson_commit
from coursegit.workflow.context import WorkflowContext
from coursegit.workflow.demo import apply_demo_reset

RESET_CURRENT = "reset-current"
CREATE_BRANCH = "create-branch"


@dataclass
class Reset:
    """Reset to a lesson commit, either on the current branch or on a
    new branch created at the commit.

    The problem state is the lesson commit's parent; the solution
    state is the commit itself. Demo mode always uses the solution,
    skips every prompt and leaves the lesson's changes unstaged.
    """

    branch: str
    lesson_id: str | None = None
    problem: bool = False
    solution: bool = False
    demo: bool = False

    def validate_flags(self):
        """Reject flag combinations before touching the repository."""
        if self.problem and self.solution:
            raise InvalidFlags(
                "Cannot use both --problem and --solution flags"
            )
        if self.demo and (self.problem or self.solution):
            raise InvalidFlags(
                "Cannot use --demo with --problem or --solution flags"
            )

    def run(self, ctx: WorkflowContext) -> WorkflowResult:
        self.validate_flags()

        git = ctx.git
        runtime = ctx.state.runtime.reset
        runtime.status = "running"

        git.ensure_is_git_repo()
        git.ensure_upstream_branch_connected(self.branch)

        selection = select_lesson_commit(
            git,
            ctx.prompts,
            branch=self.branch,
            lesson_id=self.lesson_id,
            prompt_message=(
                "Which lesson do you want to reset to? (type to search)"
            ),
            exclude_current_branch=False,
            console=ctx.console,
        )
        runtime.lesson_id = selection.lesson_id

        if self._wants_problem(ctx):
            commit = git.parent_commit(selection.commit.sha)
            description = "problem state"
        else:
            commit = selection.commit.sha
            description = "final code"
        runtime.commit = commit

        current = git.current_branch()
        action = self._choose_action(ctx, current)
        runtime.action = action

        if action == CREATE_BRANCH:
            name = ctx.prompts.text("Enter new branch name:")
            ctx.say(
                f"Creating branch {name} from {commit} ({description})..."
            )
            git.checkout_new_branch_at(name, commit)
            runtime.status = "complete"
            ctx.success(f"Created and checked out branch: {name}")
            return WorkflowResult.completed(
                f"Created {name} at lesson {selection.lesson_id}"
            )

        if current == self.branch:
            raise InvalidBranchOperation(
                "Cannot reset current branch when on target branch "
                f'"{self.branch}"'
            )

        if not self.demo and not self._confirm_discard(ctx):
            ctx.say("Reset cancelled")
            return WorkflowResult.declined("Reset cancelled")

        if self.demo:
            apply_demo_reset(git, commit, ctx.say)
            message = (
                f"Demo mode: Reset to lesson {selection.lesson_id} "
                "with unstaged changes"
            )
        else:
            ctx.say(f"Resetting to {commit} ({description})...")
            git.reset_hard(commit)
            message = f"Reset to lesson {selection.lesson_id} ({description})"

        runtime.status = "complete"
        logger.info(
            "Reset {branch} to {commit}", branch=current, commit=commit
        )
        ctx.success(message)
        return WorkflowResult.completed(message)

    def _wants_problem(self, ctx: WorkflowContext) -> bool:
        if self.problem:
            return True
        if self.solution or self.demo:
            return False
        choice = ctx.prompts.select(
            "Start the exercise or view final code?",
            [
                Choice(value="problem", title="Start the exercise"),
                Choice(value="solution", title="Final code"),
            ],
        )
        return choice == "problem"

    def _choose_action(self, ctx: WorkflowContext, current: str) -> str:
        main_branch = ctx.config.git.main_branch
        if current == main_branch:
            ctx.say(
                f"On {main_branch}; the lesson will be checked out "
                "on a new branch."
            )
            return CREATE_BRANCH
        if self.demo:
            return RESET_CURRENT
        return ctx.prompts.select(
            "How would you like to proceed?",
            [
                Choice(
                    value=RESET_CURRENT,
                    title=f"Reset current branch ({current})",
                ),
                Choice(
                    value=CREATE_BRANCH,
                    title="Create new branch from commit",
                ),
            ],
        )

    def _confirm_discard(self, ctx: WorkflowContext) -> bool:
        changes = ctx.git.uncommitted_changes()
        if not changes.dirty:
            return True
        ctx.warn("\nWarning: You have uncommitted changes:")
        ctx.say(changes.status_text)
        return ctx.prompts.confirm(
            "This will lose all uncommitted work. Continue?", default=False
        )

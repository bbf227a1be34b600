"""Cherry-pick conflict resolution loop."""

from __future__ import annotations

from enum import Enum

from coursegit.core.errors import CherryPickConflict
from coursegit.core.log import logger
from coursegit.core.prompt import Choice
from coursegit.workflow.context import WorkflowContext


class ConflictState(str, Enum):
    CONFLICTED = "conflicted"
    RESOLVED = "resolved"
    ABORTED = "aborted"
    SKIPPED_EXTERNALLY = "skipped-externally"


CONFLICT_CHOICES = [
    Choice(
        value="continue",
        title="Continue (run git cherry-pick --continue)",
    ),
    Choice(
        value="skip",
        title="Skip (already resolved in another session)",
    ),
    Choice(value="abort", title="Abort (stop cherry-pick)"),
]


class CherryPickConflictLoop:
    """Drive an in-progress cherry-pick out of the conflicted state.

    Each round shows ``git status --short`` and asks the user to
    continue, skip or abort:

    - continue runs ``git cherry-pick --continue``; another conflict
      starts a new round, success ends in RESOLVED
    - skip trusts that the user finished the pick elsewhere and ends
      in SKIPPED_EXTERNALLY without running git
    - abort runs ``git cherry-pick --abort`` and ends in ABORTED
    """

    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self.rounds = 0

    def run(self) -> ConflictState:
        state = ConflictState.CONFLICTED
        while state is ConflictState.CONFLICTED:
            self.rounds += 1
            state = self._round()
            logger.debug(
                "Conflict round {round} ended {state}",
                round=self.rounds,
                state=state.value,
            )
        return state

    def _round(self) -> ConflictState:
        ctx = self.ctx

        status = ctx.git.status_short()
        if status:
            ctx.say(status)

        action = ctx.prompts.select(
            "Cherry-pick conflict. What do you want to do?",
            CONFLICT_CHOICES,
        )

        if action == "abort":
            ctx.say("Cherry-pick aborted. Branch left as-is.")
            ctx.git.cherry_pick_abort()
            return ConflictState.ABORTED

        if action == "skip":
            ctx.success("Skipping git command")
            return ConflictState.SKIPPED_EXTERNALLY

        try:
            ctx.git.cherry_pick_continue()
        except CherryPickConflict:
            ctx.warn("\nAnother conflict detected during cherry-pick!")
            ctx.say("Resolve conflicts, then continue.\n")
            return ConflictState.CONFLICTED

        ctx.success("Cherry-pick complete")
        return ConflictState.RESOLVED

"""Tests for the edit-commit workflow and its conflict loop."""

import pytest
from fakes import FakeGit, ScriptedPrompts

from coursegit.core.errors import (
    CheckoutFailed,
    CherryPickConflict,
    InvalidBranchOperation,
    PushFailed,
    ResetFailed,
)
from coursegit.core.result import Outcome
from coursegit.workflow.conflict import CherryPickConflictLoop, ConflictState
from coursegit.workflow.edit_commit import EditCommit

BRANCH = "live-run-through"
LOG = "c3 01.02.03 Three\nc2 01.02.02 Two\nc1 01.02.01 One"
TIP = "origin-tip"


def make_git(following=2, **kwargs):
    kwargs.setdefault("logs", {BRANCH: LOG})
    return FakeGit(
        branch="work",
        revs={f"origin/{BRANCH}": TIP},
        counts={("c2", f"origin/{BRANCH}"): following},
        **kwargs,
    )


class TestEditCommit:
    def test_full_session_with_push(self, make_ctx):
        git = make_git()
        prompts = ScriptedPrompts(True, True, True)
        ctx = make_ctx(git, prompts)

        result = EditCommit(branch=BRANCH, lesson_id="1.2.2").run(ctx)

        assert result.outcome == Outcome.COMPLETED
        assert prompts.messages() == [
            "Ready to commit?",
            f"Save changes to {BRANCH} branch?",
            f"Force push {BRANCH} to origin?",
        ]
        mutating = [
            call for call in git.calls
            if call[0] not in (
                "ensure_is_git_repo", "current_branch", "log_oneline",
                "rev_parse", "rev_list_count",
            )
        ]
        assert mutating == [
            ("fetch_origin",),
            ("reset_hard", "c2"),
            ("reset_soft_head_minus_one",),
            ("restore_staged",),
            ("stage_all",),
            ("commit", "01.02.02 Two"),
            ("cherry_pick", f"c2..{TIP}"),
            ("checkout", BRANCH),
            ("reset_hard", "work"),
            ("push_force_with_lease", "origin", BRANCH),
            ("checkout", "work"),
        ]
        assert ctx.state.runtime.edit_commit.status == "pushed"

    def test_commit_keeps_lesson_prefix(self, make_ctx):
        git = make_git(following=0)
        ctx = make_ctx(git, ScriptedPrompts(True, False))

        EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert git.called("commit") == [("01.02.02 Two",)]

    def test_last_lesson_skips_replay(self, make_ctx, output):
        git = make_git(following=0)
        ctx = make_ctx(git, ScriptedPrompts(True, False))

        result = EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert result.outcome == Outcome.DECLINED
        assert "cherry_pick" not in git.names()
        assert "No commits after 01.02.02" in output()

    def test_reports_following_count(self, make_ctx, output):
        git = make_git(following=1)
        ctx = make_ctx(git, ScriptedPrompts(False))

        EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert "Will cherry-pick 1 commit after." in output()
        assert ctx.state.runtime.edit_commit.following_commits == 1

    def test_declining_commit_leaves_branch(self, make_ctx):
        git = make_git()
        ctx = make_ctx(git, ScriptedPrompts(False))

        result = EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert result.outcome == Outcome.DECLINED
        assert "commit" not in git.names()
        assert "stage_all" not in git.names()

    def test_declining_save(self, make_ctx):
        git = make_git()
        ctx = make_ctx(git, ScriptedPrompts(True, False))

        result = EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert result.outcome == Outcome.DECLINED
        assert "checkout" not in git.names()
        assert "push_force_with_lease" not in git.names()

    def test_declining_push(self, make_ctx):
        git = make_git()
        ctx = make_ctx(git, ScriptedPrompts(True, True, False))

        result = EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert result.outcome == Outcome.DECLINED
        assert git.called("reset_hard")[-1] == ("work",)
        assert "push_force_with_lease" not in git.names()
        assert git.branch == BRANCH

    def test_refuses_on_target_branch(self, make_ctx):
        git = make_git()
        git.branch = BRANCH
        ctx = make_ctx(git, ScriptedPrompts())

        with pytest.raises(InvalidBranchOperation):
            EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert "reset_hard" not in git.names()

    def test_push_failure_keeps_local_save(self, make_ctx):
        git = make_git(
            failures={"push_force_with_lease": PushFailed("origin", BRANCH)}
        )
        ctx = make_ctx(git, ScriptedPrompts(True, True, True))

        with pytest.raises(PushFailed) as exc_info:
            EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert "saved locally" in exc_info.value.hint
        assert ctx.state.runtime.edit_commit.status == "saved"

    def test_checkout_failure_names_working_branch(self, make_ctx):
        git = make_git(failures={"checkout": CheckoutFailed(BRANCH)})
        ctx = make_ctx(git, ScriptedPrompts(True, True))

        with pytest.raises(CheckoutFailed) as exc_info:
            EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert "work" in exc_info.value.hint

    def test_reset_failure_while_saving(self, make_ctx):
        git = make_git(
            failures={"reset_hard": [None, ResetFailed("work", exit_code=1)]}
        )
        ctx = make_ctx(git, ScriptedPrompts(True, True))

        with pytest.raises(ResetFailed) as exc_info:
            EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert exc_info.value.message == (
            f"Failed to reset {BRANCH} to work."
        )


class TestEditCommitConflicts:
    def conflicted_git(self, continue_failures=None):
        return make_git(failures={
            "cherry_pick": CherryPickConflict(f"c2..{TIP}"),
            "cherry_pick_continue": continue_failures or [],
        })

    def test_continue_resolves(self, make_ctx):
        git = self.conflicted_git()
        prompts = ScriptedPrompts(True, "continue", False)
        ctx = make_ctx(git, prompts)

        result = EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert result.outcome == Outcome.DECLINED
        assert git.called("cherry_pick_continue") == [()]
        assert ctx.state.runtime.edit_commit.conflict_rounds == 1
        assert prompts.messages()[-1] == f"Save changes to {BRANCH} branch?"

    def test_repeated_conflicts_loop(self, make_ctx):
        git = self.conflicted_git(continue_failures=[
            CherryPickConflict("continue"),
            CherryPickConflict("continue"),
        ])
        prompts = ScriptedPrompts(
            True, "continue", "continue", "continue", False
        )
        ctx = make_ctx(git, prompts)

        EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert len(git.called("cherry_pick_continue")) == 3
        assert ctx.state.runtime.edit_commit.conflict_rounds == 3

    def test_abort_stops_workflow(self, make_ctx):
        git = self.conflicted_git()
        prompts = ScriptedPrompts(True, "abort")
        ctx = make_ctx(git, prompts)

        result = EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert result.outcome == Outcome.ABORTED
        assert result.exit_code == 0
        assert git.called("cherry_pick_abort") == [()]
        assert "checkout" not in git.names()
        assert ctx.state.runtime.edit_commit.status == "aborted"

    def test_skip_trusts_external_resolution(self, make_ctx):
        git = self.conflicted_git()
        prompts = ScriptedPrompts(True, "skip", True, False)
        ctx = make_ctx(git, prompts)

        EditCommit(branch=BRANCH, lesson_id="01.02.02").run(ctx)

        assert "cherry_pick_continue" not in git.names()
        assert "cherry_pick_abort" not in git.names()
        assert git.called("checkout") == [(BRANCH,)]


class TestConflictLoop:
    def test_shows_status_each_round(self, make_ctx, output):
        git = FakeGit(
            status_text="UU src/app.ts",
            failures={"cherry_pick_continue": [CherryPickConflict("x")]},
        )
        prompts = ScriptedPrompts("continue", "continue")
        loop = CherryPickConflictLoop(make_ctx(git, prompts))

        assert loop.run() is ConflictState.RESOLVED
        assert loop.rounds == 2
        assert len(git.called("status_short")) == 2
        assert "UU src/app.ts" in output()

    def test_offers_three_choices(self, make_ctx):
        prompts = ScriptedPrompts("abort")
        CherryPickConflictLoop(make_ctx(FakeGit(), prompts)).run()

        kind, message, choices = prompts.asked[0]
        assert kind == "select"
        assert message == "Cherry-pick conflict. What do you want to do?"
        assert [c.value for c in choices] == ["continue", "skip", "abort"]

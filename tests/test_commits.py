"""Tests for lesson id parsing and lesson-commit resolution."""

import pytest
from fakes import FakeGit, ScriptedPrompts

from coursegit.core.errors import CommitNotFound
from coursegit.core.prompt import Choice
from coursegit.lessons.commits import (
    lesson_filter,
    normalize_lesson_id,
    parse_commits,
    select_lesson_commit,
)

BRANCH = "live-run-through"


class TestNormalizeLessonId:
    """Lesson ids compare by their zero-padded canonical form."""

    @pytest.mark.parametrize("raw", ["1.1.1", "01.1.01", "1-1-1", "01-01-01"])
    def test_equivalent_forms(self, raw):
        assert normalize_lesson_id(raw) == "01.01.01"

    def test_idempotent(self):
        once = normalize_lesson_id("3-14-2")
        assert normalize_lesson_id(once) == once == "03.14.02"

    def test_wide_segments_kept(self):
        assert normalize_lesson_id("100.2.3") == "100.02.03"

    @pytest.mark.parametrize("raw", ["1.1", "abc", "1.1.1 extra", ""])
    def test_unparseable_returns_none(self, raw):
        assert normalize_lesson_id(raw) is None


class TestParseCommits:
    def test_strips_prefix_and_normalizes(self):
        commits = parse_commits(
            "def5678 01.02.03 Add feature\n"
            "ghi9012 1-2-2 Setup\n"
            "abc1234 Initial commit\n"
        )

        assert [c.sha for c in commits] == ["def5678", "ghi9012", "abc1234"]
        assert commits[0].lesson_id == "01.02.03"
        assert commits[0].message == "Add feature"
        assert commits[1].lesson_id == "01.02.02"
        assert commits[1].message == "Setup"
        assert commits[2].lesson_id is None
        assert commits[2].message == "Initial commit"

    def test_blank_lines_skipped(self):
        assert parse_commits("\n\n") == []
        assert len(parse_commits("a1 x\n\nb2 y\n")) == 2

    def test_prefix_must_lead_message(self):
        (commit,) = parse_commits("abc1234 Fix 01.02.03 typo")
        assert commit.lesson_id is None
        assert commit.message == "Fix 01.02.03 typo"


class TestLessonFilter:
    choice = Choice(value="01.02.03", title="01.02.03 Add feature")

    def test_matches_any_padding(self):
        assert lesson_filter("1.2.3", self.choice)
        assert not lesson_filter("1.2.4", self.choice)

    def test_matches_id_prefix_and_message(self):
        assert lesson_filter("01.02", self.choice)
        assert lesson_filter("feature", self.choice)
        assert not lesson_filter("setup", self.choice)


class TestSelectLessonCommit:
    def test_end_to_end_supplied_id(self, console):
        """A supplied id resolves without prompting."""
        git = FakeGit(logs={
            BRANCH: "def5678 01.02.03 Add feature\nghi9012 01.02.02 Setup",
        })
        prompts = ScriptedPrompts()

        selection = select_lesson_commit(
            git, prompts, BRANCH, lesson_id="01.02.02", console=console
        )

        assert selection.commit.sha == "ghi9012"
        assert selection.commit.message == "Setup"
        assert selection.commit.lesson_id == "01.02.02"
        assert selection.lesson_id == "01.02.02"
        assert prompts.asked == []

    def test_supplied_id_any_padding(self, console):
        git = FakeGit(logs={BRANCH: "def5678 01.02.03 Add feature"})

        selection = select_lesson_commit(
            git, ScriptedPrompts(), BRANCH, lesson_id="1-2-3",
            console=console,
        )

        assert selection.commit.sha == "def5678"
        assert selection.lesson_id == "01.02.03"

    def test_duplicate_ids_pick_last(self, console):
        git = FakeGit(logs={
            BRANCH: (
                "aaa1111 01.01.01 First take\n"
                "bbb2222 01.01.02 Other\n"
                "ccc3333 01.01.01 Second take\n"
            ),
        })

        selection = select_lesson_commit(
            git, ScriptedPrompts(), BRANCH, lesson_id="1.1.1",
            console=console,
        )

        assert selection.commit.sha == "ccc3333"

    def test_not_found_carries_id_and_branch(self, console):
        git = FakeGit(logs={BRANCH: "def5678 01.02.03 Add feature"})

        with pytest.raises(CommitNotFound) as exc_info:
            select_lesson_commit(
                git, ScriptedPrompts(), BRANCH, lesson_id="99.99.99",
                console=console,
            )

        assert exc_info.value.lesson_id == "99.99.99"
        assert exc_info.value.branch == BRANCH
        assert "99.99.99" in exc_info.value.message

    def test_unparseable_id_used_verbatim(self, console):
        git = FakeGit(logs={BRANCH: "def5678 01.02.03 Add feature"})

        with pytest.raises(CommitNotFound) as exc_info:
            select_lesson_commit(
                git, ScriptedPrompts(), BRANCH, lesson_id="intro",
                console=console,
            )

        assert exc_info.value.lesson_id == "intro"

    def test_empty_branch_fails_with_any(self, console):
        git = FakeGit(logs={BRANCH: ""})

        with pytest.raises(CommitNotFound) as exc_info:
            select_lesson_commit(
                git, ScriptedPrompts(), BRANCH, console=console
            )

        assert exc_info.value.lesson_id == "any"
        assert exc_info.value.branch == BRANCH

    def test_untagged_branch_fails_with_any(self, console):
        git = FakeGit(logs={BRANCH: "abc1234 Initial commit"})

        with pytest.raises(CommitNotFound) as exc_info:
            select_lesson_commit(
                git, ScriptedPrompts(), BRANCH, console=console
            )

        assert exc_info.value.lesson_id == "any"

    def test_prompt_offers_sorted_lessons(self, console):
        git = FakeGit(logs={
            BRANCH: (
                "c3 01.02.03 Third\n"
                "a1 01.02.01 First\n"
                "x0 Initial commit\n"
                "b2 01.02.02 Second\n"
            ),
        })
        prompts = ScriptedPrompts("01.02.02")

        selection = select_lesson_commit(
            git, prompts, BRANCH, prompt_message="Pick one", console=console
        )

        kind, message, choices = prompts.asked[0]
        assert kind == "autocomplete"
        assert message == "Pick one"
        assert [c.value for c in choices] == [
            "01.02.01", "01.02.02", "01.02.03"
        ]
        assert choices[0].title == "01.02.01 First"
        assert selection.commit.sha == "b2"

    def test_exclusion_removes_lessons_on_head(self, console):
        git = FakeGit(logs={
            "HEAD": "h1 01.02.01 Done already\nh0 Initial commit",
            BRANCH: (
                "t3 01.02.03 Three\n"
                "t2 01.02.02 Two\n"
                "t1 01.02.01 One\n"
            ),
        })
        prompts = ScriptedPrompts("01.02.02")

        select_lesson_commit(
            git, prompts, BRANCH, exclude_current_branch=True,
            console=console,
        )

        _, _, choices = prompts.asked[0]
        assert {c.value for c in choices} == {"01.02.02", "01.02.03"}

    def test_exclusion_keeps_untagged_commits(self, console):
        git = FakeGit(logs={
            "HEAD": "h1 01.02.01 One",
            BRANCH: "t1 01.02.01 One\nt0 Initial commit",
        })

        with pytest.raises(CommitNotFound) as exc_info:
            select_lesson_commit(
                git, ScriptedPrompts(), BRANCH,
                exclude_current_branch=True, console=console,
            )

        # Only the untagged commit survives, so nothing can be offered
        assert exc_info.value.lesson_id == "any"

    def test_exclusion_applies_to_supplied_id(self, console):
        git = FakeGit(logs={
            "HEAD": "h1 01.02.01 One",
            BRANCH: "t2 01.02.02 Two\nt1 01.02.01 One",
        })

        with pytest.raises(CommitNotFound):
            select_lesson_commit(
                git, ScriptedPrompts(), BRANCH, lesson_id="01.02.01",
                exclude_current_branch=True, console=console,
            )

    def test_head_not_read_without_exclusion(self, console):
        git = FakeGit(logs={BRANCH: "t1 01.02.01 One"})

        select_lesson_commit(
            git, ScriptedPrompts(), BRANCH, lesson_id="1.2.1",
            console=console,
        )

        assert git.called("log_oneline") == [(BRANCH,)]

    def test_prints_search_and_result(self, console, output):
        git = FakeGit(logs={BRANCH: "def5678 01.02.03 Add feature"})

        select_lesson_commit(
            git, ScriptedPrompts(), BRANCH, lesson_id="1.2.3",
            console=console,
        )

        text = output()
        assert f"Searching for lesson 01.02.03 on branch {BRANCH}" in text
        assert "Found commit: def5678 Add feature" in text

"""Lesson-commit resolution.

Commit subjects on a course branch start with a lesson id such as
``01.02.03 Add feature``. This module parses ``git log --oneline``
output into CommitRecords and resolves a lesson id, typed or picked
interactively, to exactly one commit.
"""

from __future__ import annotations

import re

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape

from coursegit.core.errors import CommitNotFound
from coursegit.core.log import logger
from coursegit.core.prompt import Choice, PromptSurface
from coursegit.git.gateway import GitGateway

_LESSON_PREFIX = re.compile(r"^(\d+)[.-](\d+)[.-](\d+)\s*")
_LESSON_ID = re.compile(r"^(\d+)[.-](\d+)[.-](\d+)$")


class CommitRecord(BaseModel):
    """One parsed ``git log --oneline`` line."""

    sha: str
    message: str
    lesson_id: str | None = None


class LessonSelection(BaseModel):
    """The commit a lesson id resolved to."""

    commit: CommitRecord
    lesson_id: str


def _canonical(match: re.Match) -> str:
    return ".".join(part.zfill(2) for part in match.groups())


def normalize_lesson_id(lesson_id: str) -> str | None:
    """Canonical ``NN.NN.NN`` form, or None when the id doesn't parse.

    >>> normalize_lesson_id("1-1-1")
    '01.01.01'
    """
    match = _LESSON_ID.match(lesson_id.strip())
    if not match:
        return None
    return _canonical(match)


def parse_commits(history: str) -> list[CommitRecord]:
    """Parse ``git log --oneline`` output, keeping git's order."""
    commits = []
    for line in history.strip().splitlines():
        if not line.strip():
            continue
        sha, _, full_message = line.strip().partition(" ")

        match = _LESSON_PREFIX.match(full_message)
        if match:
            commits.append(CommitRecord(
                sha=sha,
                message=full_message[match.end():].strip(),
                lesson_id=_canonical(match),
            ))
        else:
            commits.append(CommitRecord(sha=sha, message=full_message))
    return commits


def lesson_filter(query: str, choice: Choice) -> bool:
    """Match typed text against a lesson choice.

    Accepts a lesson id in any padding (``1.2.3``), a leading part of
    the canonical id (``01.02``) or any part of the commit message.
    """
    query = query.strip()
    if not query:
        return True
    normalized = normalize_lesson_id(query)
    if normalized is not None:
        return choice.value == normalized
    if choice.value.startswith(query):
        return True
    return query.lower() in choice.title.lower()


def _lesson_commits(
    git: GitGateway, branch: str, exclude_current_branch: bool
) -> list[CommitRecord]:
    commits = parse_commits(git.log_oneline(branch))
    if not exclude_current_branch:
        return commits

    applied = {
        commit.lesson_id
        for commit in parse_commits(git.log_oneline("HEAD"))
        if commit.lesson_id is not None
    }
    logger.debug(
        "Excluding {count} lessons already on HEAD", count=len(applied)
    )
    return [
        commit for commit in commits
        if commit.lesson_id is None or commit.lesson_id not in applied
    ]


def select_lesson_commit(
    git: GitGateway,
    prompts: PromptSurface,
    branch: str,
    lesson_id: str | None = None,
    prompt_message: str = "Which lesson do you want to select?",
    exclude_current_branch: bool = False,
    console: Console | None = None,
) -> LessonSelection:
    """Resolve a lesson id on ``branch`` to a single commit.

    Args:
        git: Gateway for the repository
        prompts: Used only when no lesson id is supplied
        branch: Branch whose history holds the lesson commits
        lesson_id: Lesson id as typed by the user, in any padding
        prompt_message: Autocomplete prompt shown when picking
        exclude_current_branch: Hide lessons already present on HEAD
        console: Where progress lines are printed

    Returns:
        LessonSelection with the commit and canonical lesson id. When
        several commits carry the id, the last one in log order wins.

    Raises:
        CommitNotFound: No commit carries the id (``"any"`` when the
            branch has no lesson commits at all)
    """
    console = console or Console()
    commits = _lesson_commits(git, branch, exclude_current_branch)

    if lesson_id is not None:
        selected = normalize_lesson_id(lesson_id) or lesson_id
        console.print(
            f"Searching for lesson {escape(selected)} "
            f"on branch {escape(branch)}..."
        )
    else:
        # One choice per lesson; the last commit in log order wins
        by_id = {c.lesson_id: c for c in commits if c.lesson_id is not None}
        tagged = [by_id[key] for key in sorted(by_id)]
        if not tagged:
            raise CommitNotFound("any", branch)

        selected = prompts.autocomplete(
            prompt_message,
            [
                Choice(value=c.lesson_id, title=f"{c.lesson_id} {c.message}")
                for c in tagged
            ],
            lesson_filter,
        )

    matching = [c for c in commits if c.lesson_id == selected]
    if not matching:
        raise CommitNotFound(selected, branch)

    commit = matching[-1]
    logger.info(
        "Resolved lesson {lesson_id} to {sha}",
        lesson_id=selected,
        sha=commit.sha,
        candidates=len(matching),
    )
    console.print(
        f"Found commit: {escape(commit.sha)} {escape(commit.message)}"
    )
    return LessonSelection(commit=commit, lesson_id=selected)

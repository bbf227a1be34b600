"""Exception hierarchy for coursegit.

Every failure the tool reports to the user derives from
CourseGitError and carries a human message plus an optional hint.
The command dispatcher prints these as ``Error: <message>`` and
exits with status 1.

PromptCancelled is deliberately outside the hierarchy: cancelling a
prompt is a clean exit, not an error.
"""

from __future__ import annotations


class CourseGitError(Exception):
    """Base exception for all coursegit errors."""

    def __init__(self, message: str, hint: str | None = None):
        self.message = message
        self.hint = hint
        super().__init__(message)


class PromptCancelled(Exception):
    """The user cancelled an interactive prompt (Ctrl-C, Ctrl-D)."""


# ============================================================
# PRECONDITIONS
# ============================================================

class InvalidFlags(CourseGitError):
    """Mutually exclusive command-line flags were combined."""


class InvalidBranchOperation(CourseGitError):
    """The requested operation is not allowed on the current branch."""


class NoCommitsFound(CourseGitError):
    """A commit range between two branches is empty."""

    def __init__(self, main_branch: str, live_branch: str):
        self.main_branch = main_branch
        self.live_branch = live_branch
        super().__init__(
            f"No commits found between {main_branch} and {live_branch}"
        )


# ============================================================
# LESSON RESOLUTION
# ============================================================

class CommitNotFound(CourseGitError):
    """No commit on the branch carries the requested lesson id."""

    def __init__(self, lesson_id: str, branch: str):
        self.lesson_id = lesson_id
        self.branch = branch
        super().__init__(
            f"No commit found for lesson {lesson_id} on branch {branch}"
        )


class LessonPathError(CourseGitError):
    """A lesson or section folder name cannot be parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


class InvalidLessonPath(LessonPathError):
    """Folder name has no ``<number>-<name>`` shape."""


class LessonNumberInvalid(LessonPathError):
    """Folder name prefix is not a number."""

    def __init__(self, path: str, num_section: str):
        self.num_section = num_section
        super().__init__(
            path, f"Could not retrieve number from path: {path}"
        )


class LessonNotFound(CourseGitError):
    """No lesson folder carries the requested number."""

    def __init__(self, lesson: str, root: str):
        self.lesson = lesson
        self.root = root
        super().__init__(
            f"Lesson {lesson} not found",
            hint=f"Lessons are read from {root}; see --root",
        )


class LessonEntrypointNotFound(CourseGitError):
    """A lesson has no runnable exercise."""

    def __init__(self, lesson: str, message: str):
        self.lesson = lesson
        super().__init__(message)


# ============================================================
# GIT FAILURES
# ============================================================

class GitError(CourseGitError):
    """A git invocation exited with a nonzero status."""

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        exit_code: int | None = None,
    ):
        self.exit_code = exit_code
        super().__init__(message, hint)


class NotAGitRepo(GitError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Current directory is not a git repository: {path}"
        )


class NoUpstreamFound(GitError):
    def __init__(self, orgs: list[str]):
        self.orgs = list(orgs)
        super().__init__(
            "No valid upstream remote found.\n"
            f"Looking for repos from usernames: {', '.join(orgs)}",
            hint=(
                "Add upstream remote:\n"
                "  git remote add upstream "
                "https://github.com/<username>/<repo>.git"
            ),
        )


class FetchFailed(GitError):
    def __init__(
        self, remote: str, branch: str | None = None,
        exit_code: int | None = None,
    ):
        self.remote = remote
        self.branch = branch
        target = f"{remote}/{branch}" if branch else remote
        super().__init__(
            f"Failed to fetch {target} (exit code: {exit_code})",
            exit_code=exit_code,
        )


class FetchUpstreamFailed(FetchFailed):
    pass


class TrackBranchFailed(GitError):
    def __init__(self, branch: str, upstream: str, exit_code=None):
        self.branch = branch
        self.upstream = upstream
        super().__init__(
            f"Failed to track {upstream} as {branch}",
            exit_code=exit_code,
        )


class InvalidRef(GitError):
    def __init__(self, ref: str, exit_code: int | None = None):
        self.ref = ref
        super().__init__(
            f"Failed to resolve ref: {ref}", exit_code=exit_code
        )


class NoParentCommit(GitError):
    def __init__(self, sha: str):
        self.sha = sha
        super().__init__(
            f"Commit {sha} has no parent commit. "
            "Repository may be in an invalid state."
        )


class ResetFailed(GitError):
    def __init__(self, ref: str, exit_code: int | None = None):
        self.ref = ref
        super().__init__(f"Failed to reset to {ref}", exit_code=exit_code)


class UndoCommitFailed(GitError):
    pass


class UnstageFailed(GitError):
    pass


class StageFailed(GitError):
    pass


class CommitFailed(GitError):
    pass


class CheckoutFailed(GitError):
    def __init__(self, branch: str, exit_code: int | None = None):
        self.branch = branch
        super().__init__(
            f"Failed to checkout {branch}", exit_code=exit_code
        )


class CreateBranchFailed(GitError):
    def __init__(self, branch: str, exit_code: int | None = None):
        self.branch = branch
        super().__init__(
            f"Failed to create branch {branch}",
            hint="The branch may already exist.",
            exit_code=exit_code,
        )


class PushFailed(GitError):
    def __init__(self, remote: str, branch: str, exit_code=None):
        self.remote = remote
        self.branch = branch
        super().__init__(
            f"Failed to force push {branch} to {remote}",
            exit_code=exit_code,
        )


class CherryPickAbortFailed(GitError):
    pass


# ============================================================
# CONFLICTS
# ============================================================

class ConflictError(GitError):
    """A cherry-pick, merge or rebase stopped with a nonzero exit.

    git does not cleanly separate conflicts from other failures for
    these commands, so every nonzero exit is reported as a conflict.
    """


class CherryPickConflict(ConflictError):
    def __init__(self, range_: str, exit_code: int | None = None):
        self.range = range_
        super().__init__(
            f"Cherry-pick of {range_} stopped with conflicts",
            hint=(
                "Resolve the conflicts, then run "
                "'git cherry-pick --continue' "
                "(or 'git cherry-pick --abort' to give up)."
            ),
            exit_code=exit_code,
        )


class MergeConflict(ConflictError):
    def __init__(self, ref: str, exit_code: int | None = None):
        self.ref = ref
        super().__init__(
            f"Merge of {ref} stopped with conflicts",
            hint="Resolve conflicts and commit.",
            exit_code=exit_code,
        )


class RebaseConflict(ConflictError):
    def __init__(self, onto: str, exit_code: int | None = None):
        self.onto = onto
        super().__init__(
            f"Failed to rebase onto {onto}",
            hint=(
                "Resolve the conflicts and run 'git rebase --continue', "
                "or 'git rebase --abort'."
            ),
            exit_code=exit_code,
        )

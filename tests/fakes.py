"""In-memory stand-ins for the git gateway and the prompt surface."""

from coursegit.core.errors import PromptCancelled
from coursegit.core.prompt import PromptSurface, default_filter
from coursegit.git.gateway import (
    GitGateway,
    UncommittedChanges,
    UpstreamRemote,
)


class FakeGit(GitGateway):
    """GitGateway that records every call and serves canned answers.

    ``failures`` maps an operation name to an exception, or to a list
    of exceptions/None consumed one call at a time.
    """

    def __init__(
        self,
        branch="feature",
        logs=None,
        dirty=False,
        status_text="",
        parents=None,
        revs=None,
        counts=None,
        failures=None,
        upstream=UpstreamRemote(
            name="upstream",
            url="https://github.com/mattpocock/course.git",
        ),
    ):
        self.branch = branch
        self.logs = logs or {}
        self.dirty = dirty
        self.status_text = status_text
        self.parents = parents or {}
        self.revs = revs or {}
        self.counts = counts or {}
        self.failures = failures or {}
        self.upstream = upstream
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, *args))
        failure = self.failures.get(name)
        if isinstance(failure, list):
            failure = failure.pop(0) if failure else None
        if failure is not None:
            raise failure

    def called(self, name):
        return [call[1:] for call in self.calls if call[0] == name]

    def names(self):
        return [call[0] for call in self.calls]

    # Queries

    def ensure_is_git_repo(self):
        self._record("ensure_is_git_repo")

    def current_branch(self):
        self._record("current_branch")
        return self.branch

    def uncommitted_changes(self):
        self._record("uncommitted_changes")
        return UncommittedChanges(
            dirty=self.dirty, status_text=self.status_text
        )

    def status_short(self):
        self._record("status_short")
        return self.status_text

    def detect_upstream_remote(self):
        self._record("detect_upstream_remote")
        return self.upstream

    def rev_parse(self, ref):
        self._record("rev_parse", ref)
        return self.revs.get(ref, f"{ref}-full")

    def parent_commit(self, sha):
        self._record("parent_commit", sha)
        return self.parents.get(sha, f"{sha}^")

    def rev_list_count(self, from_ref, to_ref):
        self._record("rev_list_count", from_ref, to_ref)
        return self.counts.get((from_ref, to_ref), 0)

    def log_oneline(self, range_):
        self._record("log_oneline", range_)
        return self.logs.get(range_, "")

    def log_oneline_reverse(self, range_):
        self._record("log_oneline_reverse", range_)
        return self.logs.get(range_, "")

    # Remotes

    def fetch(self, remote, branch):
        self._record("fetch", remote, branch)

    def fetch_origin(self):
        self._record("fetch_origin")

    def ensure_upstream_branch_connected(self, target_branch):
        self._record("ensure_upstream_branch_connected", target_branch)

    def push_force_with_lease(self, remote, branch):
        self._record("push_force_with_lease", remote, branch)

    # Mutations

    def reset_hard(self, ref):
        self._record("reset_hard", ref)

    def reset_soft_head_minus_one(self):
        self._record("reset_soft_head_minus_one")

    def restore_staged(self):
        self._record("restore_staged")

    def stage_all(self):
        self._record("stage_all")

    def commit(self, message):
        self._record("commit", message)

    def cherry_pick(self, range_or_sha):
        self._record("cherry_pick", range_or_sha)

    def cherry_pick_continue(self):
        self._record("cherry_pick_continue")

    def cherry_pick_abort(self):
        self._record("cherry_pick_abort")

    def checkout(self, branch):
        self._record("checkout", branch)
        self.branch = branch

    def checkout_new_branch(self, name):
        self._record("checkout_new_branch", name)
        self.branch = name

    def checkout_new_branch_at(self, name, sha):
        self._record("checkout_new_branch_at", name, sha)
        self.branch = name

    def merge(self, ref):
        self._record("merge", ref)

    def rebase(self, onto):
        self._record("rebase", onto)


class ScriptedPrompts(PromptSurface):
    """PromptSurface that replays answers in order.

    An answer that is an exception instance is raised instead, so
    ``PromptCancelled()`` simulates Ctrl-C.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def _next(self, kind, message, choices=None):
        self.asked.append((kind, message, choices))
        if not self.answers:
            raise AssertionError(f"Unexpected {kind} prompt: {message}")
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def messages(self):
        return [message for _, message, _ in self.asked]

    def confirm(self, message, default=False):
        return self._next("confirm", message)

    def select(self, message, choices):
        answer = self._next("select", message, choices)
        assert answer in [c.value for c in choices], answer
        return answer

    def text(self, message, default=None):
        return self._next("text", message)

    def autocomplete(self, message, choices, filter_fn=default_filter):
        answer = self._next("autocomplete", message, choices)
        assert answer in [c.value for c in choices], answer
        return answer


__all__ = ["FakeGit", "ScriptedPrompts", "PromptCancelled"]

"""Version-control gateway.

Every git invocation the workflows make goes through GitGateway. Each
operation runs one git command in the gateway's working directory and
turns a nonzero exit into a typed GitError.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

from invoke import Result
from pydantic import BaseModel

from coursegit.core.errors import (
    CheckoutFailed,
    CherryPickAbortFailed,
    CherryPickConflict,
    CommitFailed,
    CreateBranchFailed,
    FetchFailed,
    FetchUpstreamFailed,
    InvalidRef,
    MergeConflict,
    NoParentCommit,
    NotAGitRepo,
    NoUpstreamFound,
    PushFailed,
    RebaseConflict,
    ResetFailed,
    StageFailed,
    TrackBranchFailed,
    UndoCommitFailed,
    UnstageFailed,
)
from coursegit.core.log import logger
from coursegit.core.runner import Runner

DEFAULT_UPSTREAM_ORGS = ["mattpocock", "ai-hero-dev", "total-typescript"]


class UncommittedChanges(BaseModel):
    """Porcelain status of the working tree."""

    dirty: bool
    status_text: str


class UpstreamRemote(BaseModel):
    """A remote whose URL belongs to one of the course organizations."""

    name: str
    url: str


class GitGateway(ABC):
    """Abstract interface for every git operation coursegit performs.

    All implementations (real and fake) must implement this interface.
    """

    # ============================================================
    # Query Operations
    # ============================================================

    @abstractmethod
    def ensure_is_git_repo(self) -> None:
        """Raise NotAGitRepo unless the working directory has a .git."""

    @abstractmethod
    def current_branch(self) -> str:
        """Name of the checked-out branch, empty when detached."""

    @abstractmethod
    def uncommitted_changes(self) -> UncommittedChanges:
        pass

    @abstractmethod
    def status_short(self) -> str:
        pass

    @abstractmethod
    def detect_upstream_remote(self) -> UpstreamRemote:
        """Find the remote that points at the course repository.

        Raises:
            NoUpstreamFound: If no remote URL matches the allow-list
        """

    @abstractmethod
    def rev_parse(self, ref: str) -> str:
        pass

    @abstractmethod
    def parent_commit(self, sha: str) -> str:
        """Full hash of the first parent of ``sha``.

        Raises:
            NoParentCommit: If ``sha`` is a root commit
        """

    @abstractmethod
    def rev_list_count(self, from_ref: str, to_ref: str) -> int:
        """Commits reachable from ``to_ref`` but not from ``from_ref``."""

    @abstractmethod
    def log_oneline(self, range_: str) -> str:
        pass

    @abstractmethod
    def log_oneline_reverse(self, range_: str) -> str:
        pass

    # ============================================================
    # Remote Operations
    # ============================================================

    @abstractmethod
    def fetch(self, remote: str, branch: str) -> None:
        pass

    @abstractmethod
    def fetch_origin(self) -> None:
        pass

    @abstractmethod
    def ensure_upstream_branch_connected(self, target_branch: str) -> None:
        """Recreate ``target_branch`` as a tracking branch of upstream.

        Fetches the branch from the detected upstream remote, deletes
        the local branch and tracks ``<remote>/<target_branch>``, so
        lessons always resolve against upstream history.
        """

    @abstractmethod
    def push_force_with_lease(self, remote: str, branch: str) -> None:
        pass

    # ============================================================
    # Mutation Operations
    # ============================================================

    @abstractmethod
    def reset_hard(self, ref: str) -> None:
        """Move HEAD to ``ref``, discarding uncommitted work."""

    @abstractmethod
    def reset_soft_head_minus_one(self) -> None:
        """Undo the last commit, keeping its changes in the tree."""

    @abstractmethod
    def restore_staged(self) -> None:
        pass

    @abstractmethod
    def stage_all(self) -> None:
        pass

    @abstractmethod
    def commit(self, message: str) -> None:
        pass

    @abstractmethod
    def cherry_pick(self, range_or_sha: str) -> None:
        """Raises CherryPickConflict on any nonzero exit."""

    @abstractmethod
    def cherry_pick_continue(self) -> None:
        pass

    @abstractmethod
    def cherry_pick_abort(self) -> None:
        pass

    @abstractmethod
    def checkout(self, branch: str) -> None:
        pass

    @abstractmethod
    def checkout_new_branch(self, name: str) -> None:
        pass

    @abstractmethod
    def checkout_new_branch_at(self, name: str, sha: str) -> None:
        pass

    @abstractmethod
    def merge(self, ref: str) -> None:
        pass

    @abstractmethod
    def rebase(self, onto: str) -> None:
        pass


class Git(GitGateway):
    """GitGateway backed by the git executable, run through invoke."""

    def __init__(
        self,
        workdir: Path,
        runner: Runner | None = None,
        upstream_orgs: list[str] | None = None,
        preferred_upstream: str = "upstream",
        origin_remote: str = "origin",
    ):
        """Initialize the gateway.

        Args:
            workdir: Repository root; every command runs here
            runner: Command runner (a fresh Runner if omitted)
            upstream_orgs: Organizations accepted as upstream owners
            preferred_upstream: Remote name chosen when several match
            origin_remote: Remote used by fetch_origin()
        """
        self.workdir = Path(workdir)
        self.runner = runner or Runner()
        self.upstream_orgs = list(upstream_orgs or DEFAULT_UPSTREAM_ORGS)
        self.preferred_upstream = preferred_upstream
        self.origin_remote = origin_remote

    def _git(
        self,
        *args: str,
        echo: bool = False,
        env: dict[str, str] | None = None,
    ) -> Result:
        return self.runner.execute(
            ["git", *args], cwd=self.workdir, echo=echo, env=env
        )

    def _output(self, *args: str) -> str:
        return self._git(*args).stdout.strip()

    # Queries

    def ensure_is_git_repo(self) -> None:
        if not (self.workdir / ".git").exists():
            raise NotAGitRepo(str(self.workdir))

    def current_branch(self) -> str:
        return self._output("branch", "--show-current")

    def uncommitted_changes(self) -> UncommittedChanges:
        status = self._output("status", "--porcelain")
        return UncommittedChanges(dirty=status != "", status_text=status)

    def status_short(self) -> str:
        return self._output("status", "--short")

    def detect_upstream_remote(self) -> UpstreamRemote:
        remotes = self._output("remote", "-v")

        patterns = [
            re.compile(rf"[/:]{re.escape(org)}/", re.IGNORECASE)
            for org in self.upstream_orgs
        ]

        matches: list[UpstreamRemote] = []
        for line in remotes.splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            name, url = parts[0], parts[1]
            if any(m.name == name for m in matches):
                continue
            if any(p.search(url) for p in patterns):
                matches.append(UpstreamRemote(name=name, url=url))

        if not matches:
            raise NoUpstreamFound(self.upstream_orgs)

        for remote in matches:
            if remote.name == self.preferred_upstream:
                return remote
        return matches[0]

    def rev_parse(self, ref: str) -> str:
        result = self._git("rev-parse", "--verify", "--quiet", ref)
        if result.exited != 0:
            raise InvalidRef(ref, exit_code=result.exited)
        return result.stdout.strip()

    def parent_commit(self, sha: str) -> str:
        try:
            return self.rev_parse(f"{sha}^")
        except InvalidRef as e:
            raise NoParentCommit(sha) from e

    def rev_list_count(self, from_ref: str, to_ref: str) -> int:
        range_ = f"{from_ref}..{to_ref}"
        result = self._git("rev-list", "--count", range_)
        if result.exited != 0:
            raise InvalidRef(range_, exit_code=result.exited)
        return int(result.stdout.strip() or 0)

    def log_oneline(self, range_: str) -> str:
        result = self._git(
            "log", "--oneline", "--no-decorate", "--no-color", range_
        )
        if result.exited != 0:
            raise InvalidRef(range_, exit_code=result.exited)
        return result.stdout.strip()

    def log_oneline_reverse(self, range_: str) -> str:
        result = self._git(
            "log", "--oneline", "--no-decorate", "--no-color", "--reverse",
            range_,
        )
        if result.exited != 0:
            raise InvalidRef(range_, exit_code=result.exited)
        return result.stdout.strip()

    # Remotes

    def fetch(self, remote: str, branch: str) -> None:
        result = self._git("fetch", remote, branch, echo=True)
        if result.exited != 0:
            raise FetchFailed(remote, branch, exit_code=result.exited)

    def fetch_origin(self) -> None:
        result = self._git("fetch", self.origin_remote, echo=True)
        if result.exited != 0:
            raise FetchFailed(self.origin_remote, exit_code=result.exited)

    def ensure_upstream_branch_connected(self, target_branch: str) -> None:
        upstream = self.detect_upstream_remote()
        logger.info(
            "Using upstream remote {remote} ({url})",
            remote=upstream.name,
            url=upstream.url,
        )

        result = self._git("fetch", upstream.name, target_branch, echo=True)
        if result.exited != 0:
            raise FetchUpstreamFailed(
                upstream.name, target_branch, exit_code=result.exited
            )

        tracked = f"{upstream.name}/{target_branch}"

        # git refuses to delete the checked-out branch
        if self.current_branch() == target_branch:
            logger.warn(
                "{branch} is checked out; leaving it as is",
                branch=target_branch,
            )
            return

        # A missing local branch is fine
        self._git("branch", "-D", target_branch)

        result = self._git("branch", "--track", target_branch, tracked)
        if result.exited != 0:
            raise TrackBranchFailed(
                target_branch, tracked, exit_code=result.exited
            )

    def push_force_with_lease(self, remote: str, branch: str) -> None:
        result = self._git(
            "push", remote, branch, "--force-with-lease", echo=True
        )
        if result.exited != 0:
            raise PushFailed(remote, branch, exit_code=result.exited)

    # Mutations

    def reset_hard(self, ref: str) -> None:
        result = self._git("reset", "--hard", ref)
        if result.exited != 0:
            raise ResetFailed(ref, exit_code=result.exited)

    def reset_soft_head_minus_one(self) -> None:
        result = self._git("reset", "HEAD^")
        if result.exited != 0:
            raise UndoCommitFailed(
                "Failed to undo the last commit", exit_code=result.exited
            )

    def restore_staged(self) -> None:
        result = self._git("restore", "--staged", ".")
        if result.exited != 0:
            raise UnstageFailed(
                "Failed to unstage changes", exit_code=result.exited
            )

    def stage_all(self) -> None:
        result = self._git("add", ".")
        if result.exited != 0:
            raise StageFailed(
                "Failed to stage changes", exit_code=result.exited
            )

    def commit(self, message: str) -> None:
        result = self._git("commit", "-m", message)
        if result.exited != 0:
            raise CommitFailed(
                "Failed to commit changes",
                hint="Make sure there are changes to commit.",
                exit_code=result.exited,
            )

    def cherry_pick(self, range_or_sha: str) -> None:
        result = self._git("cherry-pick", range_or_sha, echo=True)
        if result.exited != 0:
            raise CherryPickConflict(range_or_sha, exit_code=result.exited)

    def cherry_pick_continue(self) -> None:
        result = self._git(
            "cherry-pick", "--continue",
            echo=True,
            env={"GIT_EDITOR": "true"},
        )
        if result.exited != 0:
            raise CherryPickConflict("--continue", exit_code=result.exited)

    def cherry_pick_abort(self) -> None:
        result = self._git("cherry-pick", "--abort")
        if result.exited != 0:
            raise CherryPickAbortFailed(
                "Failed to abort cherry-pick", exit_code=result.exited
            )

    def checkout(self, branch: str) -> None:
        result = self._git("checkout", branch)
        if result.exited != 0:
            raise CheckoutFailed(branch, exit_code=result.exited)

    def checkout_new_branch(self, name: str) -> None:
        result = self._git("checkout", "-b", name)
        if result.exited != 0:
            raise CreateBranchFailed(name, exit_code=result.exited)

    def checkout_new_branch_at(self, name: str, sha: str) -> None:
        result = self._git("checkout", "-b", name, sha)
        if result.exited != 0:
            raise CreateBranchFailed(name, exit_code=result.exited)

    def merge(self, ref: str) -> None:
        result = self._git("merge", ref, echo=True)
        if result.exited != 0:
            raise MergeConflict(ref, exit_code=result.exited)

    def rebase(self, onto: str) -> None:
        result = self._git("rebase", onto, echo=True)
        if result.exited != 0:
            raise RebaseConflict(onto, exit_code=result.exited)

"""Demo reveal: turn a commit into an unstaged diff on its parent."""

from coursegit.core.log import logger
from coursegit.git.gateway import GitGateway


def apply_demo_reset(git: GitGateway, sha: str, say=None):
    """Hard-reset to ``sha``, undo that commit, then unstage everything.

    Leaves the commit's changes in the working tree as an editable,
    unstaged diff. Stops at the first failing step.
    """
    say = say or (lambda _message: None)

    say(f"Resetting to {sha}...")
    git.reset_hard(sha)

    say("Undoing commit...")
    git.reset_soft_head_minus_one()

    say("Unstaging changes...")
    git.restore_staged()

    logger.debug("Revealed {sha} as unstaged changes", sha=sha)

"""Pull command."""

from coursegit.command.base import RepoCommand
from coursegit.workflow.pull import Pull


class PullCommand(RepoCommand):
    """Merge main from the course upstream into the current branch."""

    def workflow(self, state) -> Pull:
        return Pull()

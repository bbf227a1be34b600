"""Git gateway for coursegit."""

from coursegit.git.gateway import (
    Git,
    GitGateway,
    UncommittedChanges,
    UpstreamRemote,
)

__all__ = ["Git", "GitGateway", "UncommittedChanges", "UpstreamRemote"]

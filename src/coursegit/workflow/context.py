"""Shared context passed to every workflow."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from coursegit.core.config import Config, State
from coursegit.core.prompt import PromptSurface
from coursegit.git.gateway import GitGateway


@dataclass
class WorkflowContext:
    """State plus the collaborators a workflow drives.

    The gateway and prompts are injected so tests can substitute
    fakes; the gateway already carries the working directory.
    """

    state: State
    git: GitGateway
    prompts: PromptSurface
    console: Console = field(default_factory=Console)

    @property
    def config(self) -> Config:
        return self.state.config

    def say(self, message: str = "", style: str | None = None):
        """Print a progress line for the user."""
        self.console.print(
            message, style=style, markup=False, highlight=False
        )

    def success(self, message: str):
        self.say(f"✓ {message}", style="green")

    def warn(self, message: str):
        self.say(message, style="yellow")

    def rule(self):
        self.say("=" * 60)

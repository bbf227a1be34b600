"""Shared command plumbing: context construction and exit codes."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape

from coursegit.core.errors import CourseGitError, PromptCancelled
from coursegit.core.log import logger
from coursegit.core.prompt import RichPrompts
from coursegit.core.result import WorkflowResult
from coursegit.git.gateway import Git
from coursegit.workflow.context import WorkflowContext

if TYPE_CHECKING:
    from coursegit.core.config import State


def dispatch(
    run: Callable[[], WorkflowResult],
    console: Console | None = None,
    err_console: Console | None = None,
) -> int:
    """Run a workflow and turn its result or failure into an exit code.

    This is the only place an exit code is chosen:
    - any WorkflowResult, and a cancelled prompt, exit 0
    - a CourseGitError prints ``Error: <message>`` (and its hint) and
      exits 1
    - anything else prints ``Unexpected error: <exc>`` and exits 1
    """
    console = console or Console()
    err_console = err_console or Console(stderr=True)

    try:
        result = run()
    except PromptCancelled:
        logger.info("Prompt cancelled")
        console.print("\nOperation cancelled.", markup=False)
        return 0
    except CourseGitError as e:
        logger.error(
            "{error_type}: {message}",
            error_type=type(e).__name__,
            message=e.message,
        )
        err_console.print(f"[red]Error:[/red] {escape(e.message)}")
        if e.hint:
            err_console.print(escape(e.hint))
        return 1
    except Exception as e:
        logger.error(
            "Unexpected {error_type}: {error}",
            error_type=type(e).__name__,
            error=str(e),
        )
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        return 1

    logger.info(
        "Finished: {outcome}",
        outcome=result.outcome.value,
        detail=result.message,
    )
    return result.exit_code


class RepoCommand(BaseModel):
    """Base for commands that operate on a git working directory."""

    cwd: Path | None = Field(
        default=None,
        description=(
            "Repository to operate on (default: current directory)"
        ),
    )

    def workdir(self) -> Path:
        return (self.cwd or Path.cwd()).resolve()

    def build_context(
        self,
        state: State,
        console: Console | None = None,
    ) -> WorkflowContext:
        """Wire the real gateway and terminal prompts for ``state``."""
        console = console or Console()
        git_config = state.config.git
        git = Git(
            workdir=self.workdir(),
            upstream_orgs=git_config.upstream_orgs,
            preferred_upstream=git_config.upstream_remote,
            origin_remote=git_config.origin_remote,
        )
        return WorkflowContext(
            state=state,
            git=git,
            prompts=RichPrompts(console),
            console=console,
        )

    def workflow(self, state: State):
        """The workflow object this command runs."""
        raise NotImplementedError

    def run_workflow(
        self, state: State, ctx: WorkflowContext | None = None
    ) -> int:
        """Run this command's workflow.

        Args:
            state: State instance
            ctx: Prebuilt context (tests inject fakes here)

        Returns:
            Exit code (0=success or cancellation, 1=error)
        """
        if ctx is None:
            ctx = self.build_context(state)

        def run() -> WorkflowResult:
            workflow = self.workflow(state)
            with logger.span(
                "{command}", command=type(workflow).__name__
            ):
                return workflow.run(ctx)

        return dispatch(run, console=ctx.console)

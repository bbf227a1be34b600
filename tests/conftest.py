"""Pytest configuration and fixtures for coursegit tests."""

import io
import sys
import tempfile
from pathlib import Path

import pytest
from rich.console import Console

from coursegit.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only mode during tests.

    This enables debug output during test runs without requiring
    authentication or sending logs to logfire.dev.
    """
    test_log_root = Path(tempfile.gettempdir()) / "coursegit-tests"
    setup_logger(
        log_root=test_log_root,
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def mock_argv():
    """Save and restore sys.argv."""
    original = sys.argv.copy()
    sys.argv = ["coursegit"]
    yield
    sys.argv = original


@pytest.fixture
def state(mock_argv, tmp_path, monkeypatch):
    """Fresh State loaded from package defaults only.

    Runs from an empty directory so no ./coursegit.yaml is picked up.
    """
    from coursegit.core.config import State

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return State()


@pytest.fixture
def console():
    """Console that records output instead of printing it."""
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def make_ctx(state, console):
    """Build a WorkflowContext around a fake gateway and prompts."""
    from coursegit.workflow.context import WorkflowContext

    def _make(git, prompts):
        return WorkflowContext(
            state=state, git=git, prompts=prompts, console=console
        )

    return _make


@pytest.fixture
def output(console):
    """Everything printed to the test console so far."""
    return lambda: console.file.getvalue()

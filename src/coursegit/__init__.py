"""coursegit - lesson-commit navigation for course repositories."""

__version__ = "0.1.0"

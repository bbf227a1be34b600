"""Model bases shared by configuration and runtime state.

log.py builds its sinks on BaseConfig, so these live outside
config.py.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """A model that closes its Closeable fields, and is a context
    manager doing so on exit.

    Closing walks fields in declaration order, so a Config closes its
    Logger, which closes each Sink. A child that fails to close is
    reported on stderr and the walk carries on.
    """

    def closeable_children(self) -> Iterator[tuple[str, Closeable]]:
        for name in type(self).model_fields:
            child = getattr(self, name, None)
            if child is not None and isinstance(child, Closeable):
                yield name, child

    def close(self):
        for name, child in self.closeable_children():
            try:
                child.close()
            except Exception as e:
                print(
                    f"Warning: could not close {name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Configuration section, loaded from YAML, env or CLI."""


class BaseState(BaseCloseable):
    """Runtime record, updated while a workflow runs."""


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]

"""Interactive prompt surface.

Workflows only talk to PromptSurface. RichPrompts is the terminal
implementation; tests substitute a scripted one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from coursegit.core.errors import PromptCancelled


class Choice(BaseModel):
    """One selectable option: the value returned and the label shown."""

    value: str
    title: str


FilterFn = Callable[[str, Choice], bool]


def default_filter(query: str, choice: Choice) -> bool:
    """Case-insensitive substring match on the label."""
    return query.strip().lower() in choice.title.lower()


class PromptSurface(ABC):
    """Confirm, select, text and autocomplete prompts.

    Every method raises PromptCancelled when the user cancels.
    """

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        pass

    @abstractmethod
    def select(self, message: str, choices: list[Choice]) -> str:
        pass

    @abstractmethod
    def text(self, message: str, default: str | None = None) -> str:
        pass

    @abstractmethod
    def autocomplete(
        self,
        message: str,
        choices: list[Choice],
        filter_fn: FilterFn = default_filter,
    ) -> str:
        pass


@contextmanager
def _cancellable() -> Iterator[None]:
    try:
        yield
    except (KeyboardInterrupt, EOFError) as e:
        raise PromptCancelled() from e


class RichPrompts(PromptSurface):
    """Terminal prompts rendered with rich."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def confirm(self, message: str, default: bool = False) -> bool:
        with _cancellable():
            return Confirm.ask(
                message, default=default, console=self.console
            )

    def select(self, message: str, choices: list[Choice]) -> str:
        self._print_choices(choices)
        numbers = [str(i) for i in range(1, len(choices) + 1)]
        with _cancellable():
            picked = Prompt.ask(
                message,
                choices=numbers,
                show_choices=False,
                console=self.console,
            )
        return choices[int(picked) - 1].value

    def text(self, message: str, default: str | None = None) -> str:
        while True:
            with _cancellable():
                if default is None:
                    answer = Prompt.ask(message, console=self.console)
                else:
                    answer = Prompt.ask(
                        message, default=default, console=self.console
                    )
            if answer and answer.strip():
                return answer.strip()
            self.console.print("[prompt.invalid]A value is required")

    def autocomplete(
        self,
        message: str,
        choices: list[Choice],
        filter_fn: FilterFn = default_filter,
    ) -> str:
        """List the choices, then narrow them by typed text.

        An exact value match or a single remaining candidate is
        accepted; otherwise the narrowed list is shown again.
        """
        by_value = {choice.value: choice for choice in choices}
        candidates = choices
        while True:
            self._print_choices(candidates)
            with _cancellable():
                query = Prompt.ask(message, console=self.console)
            query = query.strip()

            if query in by_value:
                return query
            if query.isdigit() and 1 <= int(query) <= len(candidates):
                return candidates[int(query) - 1].value

            matches = [c for c in choices if filter_fn(query, c)]
            if len(matches) == 1:
                return matches[0].value
            if not matches:
                self.console.print(
                    f"[prompt.invalid]No match for {escape(repr(query))}"
                )
                candidates = choices
            else:
                candidates = matches

    def _print_choices(self, choices: list[Choice]):
        for i, choice in enumerate(choices, start=1):
            self.console.print(
                f"  [bold]{i:>3}[/bold]  {escape(choice.title)}"
            )

"""Interactive console gates.

The walk-through pauses before destructive steps. Gates go through a
``Prompter`` so the CLI's ``--yes`` flag and the tests can answer them
without a terminal.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})


def parse_confirmation(response: str | None, *, default: bool = True) -> bool:
    """Interpret a yes/no answer.

    Empty input (or EOF, as None) takes the default. Anything that is not
    a recognised yes or no also takes the default, so with ``default=True``
    only "n" and "no" decline.
    """
    answer = (response or "").strip().lower()
    if answer in _YES:
        return True
    if answer in _NO:
        return False
    return default


@runtime_checkable
class Prompter(Protocol):
    def confirm(self, question: str, *, default: bool = True) -> bool: ...

    def pause(self, message: str) -> None: ...


class ConsolePrompter:
    """Reads answers from the terminal through a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def _read(self, prompt: str) -> str | None:
        try:
            return self._console.input(escape(prompt))
        except EOFError:
            return None

    def confirm(self, question: str, *, default: bool = True) -> bool:
        choices = "[yes] no" if default else "yes [no]"
        self._console.print()
        return parse_confirmation(
            self._read(f"{question} {choices}: "), default=default,
        )

    def pause(self, message: str) -> None:
        self._console.print()
        self._read(f"{message} ")


class AutoPrompter:
    """Answers every gate without input and remembers what was asked."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.asked: list[str] = []

    def confirm(self, question: str, *, default: bool = True) -> bool:
        self.asked.append(question)
        return self.answer

    def pause(self, message: str) -> None:
        self.asked.append(message)

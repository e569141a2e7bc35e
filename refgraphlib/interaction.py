"""User-facing progress messages and confirmations.

Jobs report what they do through a UserInteraction rather than printing,
so that the same job can run on a console, in a service, or in a test
with scripted answers.
"""

import sys
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TextIO


class UserInteraction(ABC):
    """Sink for info messages and source of yes/no answers.

    Info messages are indented by the current indentation level, which
    indent() raises for the duration of a with-block.
    """

    INDENT = "  "

    def __init__(self):
        self._level = 0

    @property
    def level(self) -> int:
        return self._level

    @contextmanager
    def indent(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def provide_info(self, message: str) -> None:
        prefix = self.INDENT * self._level
        for line in str(message).splitlines() or [""]:
            self._emit(prefix + line)

    @abstractmethod
    def _emit(self, line: str) -> None:
        pass

    @abstractmethod
    def ask_yes_no(self, prompt: str) -> bool:
        """Ask a yes/no question, True for yes."""
        pass


class ConsoleUserInteraction(UserInteraction):
    """Interaction on a text stream, answers read through input_func.

    Example:
        interaction = ConsoleUserInteraction()
        interaction.provide_info("Visiting Domain/app:D/develop")
    """

    def __init__(self, stream: Optional[TextIO] = None,
                 input_func: Callable[[str], str] = input):
        super().__init__()
        self._stream = stream
        self._input = input_func

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so that a redirected sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, line: str) -> None:
        print(line, file=self.stream)

    def ask_yes_no(self, prompt: str) -> bool:
        while True:
            answer = self._input(f"{prompt} (Y/n) ").strip().lower()
            if answer in ("", "y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            self._emit("Please answer yes or no.")

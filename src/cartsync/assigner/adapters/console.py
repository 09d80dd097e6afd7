"""Console adapters: tqdm progress output and the continue-on-error prompt."""

import asyncio
import sys
from typing import Callable, Optional

from tqdm import tqdm

from ..domain.ports import IContinuePrompt, IProgressReporter


class TqdmProgressReporter(IProgressReporter):
    """Progress bar with per-record lines written above it."""

    def __init__(self, description: str = "Processing devices", disable: bool = False):
        self.description = description
        self.disable = disable
        self._bar: Optional[tqdm] = None

    def start(self, total: int) -> None:
        self._bar = tqdm(total=total, desc=self.description, unit="device", disable=self.disable)

    def info(self, message: str) -> None:
        tqdm.write(message, file=sys.stdout)

    def error(self, message: str) -> None:
        tqdm.write(message, file=sys.stderr)

    def advance(self, label: str) -> None:
        if self._bar is not None:
            self._bar.set_postfix_str(label)
            self._bar.update(1)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def read_single_key() -> str:
    """Read one key press without waiting for Enter.

    Falls back to a line read when stdin is not a terminal.
    """
    if not sys.stdin.isatty():
        line = sys.stdin.readline()
        return line[:1]

    try:
        import msvcrt
    except ImportError:
        import termios
        import tty

        fd = sys.stdin.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setraw(fd)
            return sys.stdin.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

    return msvcrt.getwch()


class ConsoleKeyPrompt(IContinuePrompt):
    """Waits for a single key; only the affirmative key continues the run."""

    def __init__(
        self,
        affirmative: str = "y",
        read_key: Callable[[], str] = read_single_key,
    ):
        self.affirmative = affirmative.lower()
        self._read_key = read_key

    async def confirm_continue(self) -> bool:
        key = await asyncio.to_thread(self._read_key)
        return (key or "").lower() == self.affirmative

"""
Prompted input with validation and bounded retries.

Every acquisition returns an ``Acquired`` result instead of raising:

- ``OK``        the value passed validation
- ``CANCELLED`` the user typed "0" (text prompts only)
- ``EXHAUSTED`` the retry budget ran out (too many attempts)

Callers branch on the status and abandon the current action for anything
other than ``OK``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from rich.console import Console

from ..utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

CANCEL_TOKEN = "0"
DEFAULT_MAX_ATTEMPTS = 3

_WHOLE_NUMBER = re.compile(r"\s*([0-9]+)\s*")
_AGE = re.compile(r"([0-9]+)\s*(years?|months?)")

Reader = Callable[[str], str]


class AcquireStatus(str, Enum):
    OK = "ok"
    CANCELLED = "cancelled"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Acquired(Generic[T]):
    status: AcquireStatus
    value: Optional[T] = None

    @property
    def ok(self) -> bool:
        return self.status is AcquireStatus.OK

    @classmethod
    def success(cls, value: T) -> "Acquired[T]":
        return cls(AcquireStatus.OK, value)

    @classmethod
    def cancelled(cls) -> "Acquired[T]":
        return cls(AcquireStatus.CANCELLED)

    @classmethod
    def exhausted(cls) -> "Acquired[T]":
        return cls(AcquireStatus.EXHAUSTED)


def parse_age(text: str) -> Optional[int]:
    """Parse '5', '3 years' or '18 months' into whole years; None if unparseable"""
    raw = text.strip()
    if raw.isascii() and raw.isdigit():
        return int(raw)
    match = _AGE.fullmatch(raw)
    if not match:
        return None
    value = int(match.group(1))
    if match.group(2).startswith("month"):
        # Truncates: "6 months" is 0 years
        return value // 12
    return value


class InputEngine:
    """Reads lines from the terminal (or any reader callable) and validates them"""

    def __init__(
        self,
        console: Optional[Console] = None,
        reader: Optional[Reader] = None,
        secret_reader: Optional[Reader] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.console = console or Console()
        self.reader = reader or self.console.input
        self.secret_reader = secret_reader or (lambda prompt: self.console.input(prompt, password=True))
        self.max_attempts = max_attempts

    def read_line(self, prompt: str) -> str:
        return self.reader(prompt)

    def read_secret(self, prompt: str) -> str:
        """Masked entry; terminal echo is handled by rich"""
        return self.secret_reader(prompt)

    def acquire(
        self,
        prompt: str,
        validator: Callable[[str], bool],
        error_message: str,
        max_attempts: Optional[int] = None,
    ) -> Acquired[str]:
        attempts = max_attempts or self.max_attempts
        for attempt in range(1, attempts + 1):
            # Leading whitespace is skipped, so " 0" still cancels
            value = self.reader(prompt).lstrip()
            if value == CANCEL_TOKEN:
                return Acquired.cancelled()
            if validator(value):
                return Acquired.success(value)
            remaining = attempts - attempt
            self.console.print(
                f"[red]{error_message}[/red] ({remaining} attempts remaining, or '0' to cancel)"
            )
        self.console.print("[yellow]Too many failed attempts. Returning to menu.[/yellow]")
        logger.info("Input attempts exhausted", prompt=prompt.strip(), attempts=attempts)
        return Acquired.exhausted()

    def acquire_int(
        self,
        prompt: str,
        minimum: int,
        maximum: int,
        max_attempts: Optional[int] = None,
    ) -> Acquired[int]:
        attempts = max_attempts or self.max_attempts
        for attempt in range(1, attempts + 1):
            raw = self.reader(prompt)
            match = _WHOLE_NUMBER.fullmatch(raw)
            if not match:
                self.console.print(
                    f"[red]Invalid input format.[/red] Please enter a whole number between {minimum} and {maximum}."
                )
                continue
            value = int(match.group(1))
            if minimum <= value <= maximum:
                return Acquired.success(value)
            remaining = attempts - attempt
            self.console.print(
                f"[red]Please enter between {minimum} and {maximum}[/red] ({remaining} attempts left)"
            )
        self.console.print("[yellow]Too many failed attempts. Operation cancelled.[/yellow]")
        logger.info("Numeric input attempts exhausted", prompt=prompt.strip(), attempts=attempts)
        return Acquired.exhausted()

    def acquire_age(self, prompt: str) -> int:
        """Keep asking until the answer parses; there is no attempt limit and no cancel"""
        while True:
            age = parse_age(self.reader(prompt))
            if age is not None:
                return age
            self.console.print(
                "[red]Invalid age format.[/red] Please enter like '2', '3 years', or '6 months'"
            )

"""
States of the inbound-call routing machine.

Attempting(n) rings the software client; Redirecting forwards to an external
number; Answered and Exhausted are terminal for the ring loop (Exhausted
hands the caller to voicemail).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from phonebridge.telephony.events import DialOutcome

MAX_ATTEMPTS = 10


@dataclass(frozen=True)
class Attempting:
    attempt: int

    def __post_init__(self) -> None:
        if not 1 <= self.attempt <= MAX_ATTEMPTS:
            raise ValueError(f"attempt must be within 1..{MAX_ATTEMPTS}, got {self.attempt}")

    @property
    def is_last(self) -> bool:
        return self.attempt >= MAX_ATTEMPTS

    def next(self) -> Attempting:
        return Attempting(self.attempt + 1)


@dataclass(frozen=True)
class Answered:
    pass


@dataclass(frozen=True)
class Exhausted:
    outcome: DialOutcome | None = None


@dataclass(frozen=True)
class Redirecting:
    number: str


RoutingState = Union[Attempting, Answered, Exhausted, Redirecting]


def parse_attempt(raw: str | None) -> Attempting:
    """Decode the attempt query parameter, clamping it into 1..MAX_ATTEMPTS.

    Missing or non-numeric values start the loop over at attempt 1.
    """
    try:
        attempt = int((raw or "").strip())
    except ValueError:
        attempt = 1
    return Attempting(min(max(attempt, 1), MAX_ATTEMPTS))

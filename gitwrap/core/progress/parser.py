"""Parsing of the progress lines git writes to stderr."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Sequence

# "Checking out files:  42% (420/1000)" or "Receiving objects: 100% (7/7), done."
_COUNT_RE = re.compile(r"^(?:(?P<percent>\S+)%\s*)?\((?P<value>[^/()]*)/(?P<total>[^/()]*)\)$")
# "Counting objects: 42" or "Enumerating objects: 12, done."
_VALUE_ONLY_RE = re.compile(r"^\d+$")
_PERCENT_ONLY_RE = re.compile(r"^(?P<percent>\d{1,3})%$")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
# Longer partial lines cannot be progress output and are dropped.
_MAX_PENDING_CHARS = 64 * 1024


@dataclass(frozen=True)
class Progress:
    """A line of git output that carried progress information."""

    text: str
    percent: float
    title: str
    value: int | None = None
    total: int | None = None
    done: bool = False
    kind: Literal["progress"] = "progress"


@dataclass(frozen=True)
class Unknown:
    """A line of git output that did not match any known progress shape."""

    text: str
    kind: Literal["unknown"] = "unknown"


ProgressRecord = Progress | Unknown


def _to_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.isdigit():
        return None
    return int(raw)


def _clamp(percent: float) -> float:
    return min(max(percent, 0.0), 1.0)


def _fraction(value: int | None, total: int | None, percent_token: str | None) -> float:
    """Compute completion in [0, 1] from whatever numbers the line offered.

    A usable count pair wins over the explicit percent token. A zero total or a
    non-numeric count is reported as no progress rather than an error.
    """
    if value is not None and total is not None:
        if total == 0:
            return 0.0
        return _clamp(value / total)
    if percent_token is not None and value is None and total is None:
        percent = _to_int(percent_token)
        if percent is not None:
            return _clamp(percent / 100)
    return 0.0


class ProgressParser:
    """Turn streamed git stderr text into progress records.

    Text may arrive in arbitrary chunks: a chunk can hold several lines, or end
    in the middle of one. The incomplete tail is kept until the rest of the line
    (or the end of the stream) arrives.
    """

    def __init__(self) -> None:
        self._pending: list[str] = []
        self._pending_chars = 0
        self._overflowed = False

    def parse_line(self, line: str) -> ProgressRecord:
        """Parse a single complete line of git output."""
        separator = line.rfind(": ")
        if separator <= 0:
            return Unknown(text=line)
        title = line[:separator].strip()
        parts = line[separator + 2 :].strip().split(", ")
        head = parts[0].strip()
        if not title or not head:
            return Unknown(text=line)
        done = "done." in parts[1:]

        match = _COUNT_RE.match(head)
        if match:
            value = _to_int(match.group("value"))
            total = _to_int(match.group("total"))
            if value is None or total is None:
                value = total = None
                percent = 0.0
            else:
                percent = _fraction(value, total, match.group("percent"))
            return Progress(text=line, percent=percent, title=title, value=value, total=total, done=done)

        match = _PERCENT_ONLY_RE.match(head)
        if match:
            percent = _fraction(None, None, match.group("percent"))
            return Progress(text=line, percent=percent, title=title, done=done)

        if _VALUE_ONLY_RE.match(head):
            return Progress(text=line, percent=0.0, title=title, value=int(head), done=done)

        return Unknown(text=line)

    def feed(self, chunk: str) -> list[Progress]:
        """Buffer a chunk of output and return the records of every line it completed."""
        if not chunk:
            return []
        if not _LINE_BREAK_RE.search(chunk):
            self._pending.append(chunk)
            self._pending_chars += len(chunk)
            if self._pending_chars > _MAX_PENDING_CHARS:
                self._pending, self._pending_chars = [], 0
                self._overflowed = True
            return []
        pieces = _LINE_BREAK_RE.split("".join(self._pending) + chunk)
        # A "\r\n" split across two chunks becomes two breaks around an empty
        # line, which yields nothing.
        tail = pieces.pop()
        if self._overflowed:
            pieces = pieces[1:]
            self._overflowed = False
        if len(tail) > _MAX_PENDING_CHARS:
            self._pending, self._pending_chars = [], 0
            self._overflowed = True
        else:
            self._pending, self._pending_chars = [tail], len(tail)
        return self._records(pieces)

    def flush(self) -> list[Progress]:
        """Parse whatever partial line is still buffered at the end of the stream."""
        remainder = "" if self._overflowed else "".join(self._pending)
        self._pending, self._pending_chars = [], 0
        self._overflowed = False
        return self._records([remainder])

    def _records(self, lines: Sequence[str]) -> list[Progress]:
        records: list[Progress] = []
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            record = self.parse_line(line)
            if isinstance(record, Progress):
                records.append(record)
        return records


@dataclass(frozen=True)
class ProgressStep:
    """A named phase of a git operation and its share of the overall work."""

    title: str
    weight: float = 1.0
    aliases: tuple[str, ...] = ()

    def matches(self, title: str) -> bool:
        return title == self.title or title in self.aliases


class StepProgressParser(ProgressParser):
    """A progress parser that only knows the phases of one git operation.

    Phases are expected in order. Each recognised line is translated into the
    completion of the whole operation, weighting earlier phases as finished.
    """

    def __init__(self, steps: Sequence[ProgressStep]) -> None:
        super().__init__()
        if not steps:
            msg = "At least one progress step is required"
            raise ValueError(msg)
        total_weight = sum(step.weight for step in steps)
        if total_weight <= 0:
            msg = "Progress step weights must add up to a positive number"
            raise ValueError(msg)
        self._steps = [ProgressStep(step.title, step.weight / total_weight, step.aliases) for step in steps]
        self._step_index = 0

    def parse_line(self, line: str) -> ProgressRecord:
        record = super().parse_line(line)
        if not isinstance(record, Progress):
            return record

        completed = sum(step.weight for step in self._steps[: self._step_index])
        for index in range(self._step_index, len(self._steps)):
            step = self._steps[index]
            if step.matches(record.title):
                self._step_index = index
                percent = _clamp(completed + step.weight * record.percent)
                return replace(record, percent=percent)
            completed += step.weight
        return Unknown(text=line)


class CheckoutProgressParser(StepProgressParser):
    """Progress parser for ``git checkout --progress``.

    Recent git versions report the same phase as "Updating files".
    """

    def __init__(self) -> None:
        super().__init__([ProgressStep("Checking out files", aliases=("Updating files",))])

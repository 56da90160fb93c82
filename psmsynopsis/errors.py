"""Exceptions, per-row results and the bounded error collector."""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .constants import MAX_ERROR_MESSAGE_COUNT, WARNING_ALWAYS_SHOW_COUNT

logger = logging.getLogger(__name__)


class PSMProcessingError(Exception):
    """Base class for psmsynopsis errors."""


class HeaderError(PSMProcessingError):
    """Header line is missing required columns or cannot be parsed."""


class RowParseError(PSMProcessingError, ValueError):
    """A single input row could not be converted to a match."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class ErrorCollector:
    """Bounded, deduplicated list of human-readable error messages.

    Messages are kept in insertion order. Once ``max_messages`` distinct
    messages have been stored, new ones are counted but dropped.

    Parameters
    ----------
    max_messages : int
        Maximum number of distinct messages to retain (default: 255)

    Examples
    --------
    >>> errors = ErrorCollector(max_messages=2)
    >>> errors.add("bad mass")
    >>> errors.add("bad mass")
    >>> errors.add("bad charge")
    >>> errors.add("bad scan")
    >>> list(errors)
    ['bad mass', 'bad charge']
    >>> errors.dropped_count
    1
    """

    def __init__(self, max_messages: int = MAX_ERROR_MESSAGE_COUNT):
        self.max_messages = max_messages
        self._messages = {}
        self.dropped_count = 0

    def add(self, message: str) -> None:
        if message in self._messages:
            self._messages[message] += 1
            return

        if len(self._messages) >= self.max_messages:
            self.dropped_count += 1
            return

        self._messages[message] = 1

    def occurrences(self, message: str) -> int:
        return self._messages.get(message, 0)

    def clear(self) -> None:
        self._messages.clear()
        self.dropped_count = 0

    def report(self, title: str = "Invalid lines") -> None:
        """Log all collected messages once, as a single warning."""
        if not self._messages:
            return

        lines = [f"{title}:"]
        lines.extend(f"  {message}" for message in self._messages)
        if self.dropped_count:
            lines.append(f"  ... {self.dropped_count:,} additional messages not shown")
        logger.warning("\n".join(lines))

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __bool__(self) -> bool:
        return bool(self._messages)


@dataclass
class RowResult:
    """Outcome of parsing one input line: either a match or an error."""

    match: Optional[object] = None
    error: Optional[RowParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.match is not None


class PeriodicWarning:
    """Rate-limited warning emitter.

    Every call increments a running counter. The message is logged for the
    first ``always_show`` occurrences, then every 100th below 1,000, every
    1,000th below 10,000, and so on.

    Parameters
    ----------
    always_show : int
        Number of initial occurrences that are always logged
    log : logging.Logger, optional
        Logger to emit through (default: this module's logger)
    """

    def __init__(self, always_show: int = WARNING_ALWAYS_SHOW_COUNT,
                 log: Optional[logging.Logger] = None):
        self.always_show = always_show
        self.count = 0
        self.emitted: List[str] = []
        self._log = log or logger

    def should_show(self, count: int) -> bool:
        if count <= self.always_show:
            return True

        interval = 100
        while interval <= 100000:
            if count < interval * 10:
                return count % interval == 0
            interval *= 10

        return count % 1000000 == 0

    def warn(self, message: str) -> bool:
        """Count an occurrence and log ``message`` if due. Returns True if logged."""
        self.count += 1
        if not self.should_show(self.count):
            return False

        self._log.warning(message)
        if len(self.emitted) < MAX_ERROR_MESSAGE_COUNT:
            self.emitted.append(message)
        return True

    def reset(self) -> None:
        self.count = 0
        self.emitted.clear()

"""Error and warning taxonomy for transient raw-file ingestion.

Fatal conditions are exceptions rooted at :class:`RawFileError`. Every variant
carries structured fields (path, channel, expected/actual counts, ...) so callers
can branch on the exception type and its attributes instead of parsing messages.
Each variant also derives from the closest builtin (``FileNotFoundError``,
``OSError``, ``ValueError``) so generic handlers keep working.

Recoverable conditions never raise. They are returned as :class:`ParseWarning`
records on the dataset and logged at WARNING level.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class RawFileError(Exception):
    """Base class for every fatal ingestion error."""


class RawFileNotFoundError(RawFileError, FileNotFoundError):
    def __init__(self, path: str | Path):
        self.path = Path(path)
        super().__init__(f"File not found: {self.path}")


class OpenFailedError(RawFileError, OSError):
    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot open file {self.path}: {reason}")


class UnsupportedFormatError(RawFileError, ValueError):
    """The container is not the binary variant (``variant`` is e.g. ``"ascii"``)."""

    def __init__(self, variant: str):
        self.variant = variant
        if variant == "ascii":
            msg = "ASCII format not supported. Only binary .raw files are supported."
        else:
            msg = f"Unsupported raw file format: {variant}"
        super().__init__(msg)


class MarkerNotFoundError(RawFileError, ValueError):
    """The header end marker was not found before the stream ended."""

    def __init__(self, marker: str, scanned_units: int, message: Optional[str] = None):
        self.marker = marker
        self.scanned_units = int(scanned_units)
        super().__init__(
            message
            or f"Binary marker '{marker}' not found after scanning {self.scanned_units} header units"
        )


class HeaderTooLongError(MarkerNotFoundError):
    """The header exceeded the scan ceiling without the end marker."""

    def __init__(self, marker: str, scanned_units: int, limit: int):
        self.limit = int(limit)
        super().__init__(
            marker,
            scanned_units,
            f"Header too long or Binary marker not found "
            f"(scanned {int(scanned_units)} units, limit {self.limit})",
        )


class MissingFieldError(RawFileError, ValueError):
    def __init__(self, field_name: str):
        self.field = field_name
        super().__init__(f"Could not parse required header field: {field_name}")


class MissingSectionError(RawFileError, ValueError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Could not find {section} section")


class UnsupportedSimulationTypeError(RawFileError, ValueError):
    def __init__(self, plot_name: str):
        self.plot_name = plot_name
        super().__init__(f"Only transient simulations are supported. Found: {plot_name}")


class ShortReadError(RawFileError, ValueError):
    """
    A channel delivered fewer samples than the header promised.

    channel:
      "time" or "variable".
    index:
      1-based variable channel index (None for the time channel).
    attempts:
      number of read attempts made before giving up.
    """

    def __init__(
        self,
        channel: str,
        expected: int,
        got: int,
        *,
        index: Optional[int] = None,
        attempts: int = 1,
    ):
        self.channel = channel
        self.index = index
        self.expected = int(expected)
        self.got = int(got)
        self.attempts = int(attempts)
        if channel == "time":
            msg = f"Failed to read time data: expected {self.expected} points, got {self.got}"
        else:
            msg = (
                f"Not enough points read for variable {index}: expected {self.expected}, "
                f"got {self.got} (after {self.attempts} attempts)"
            )
        super().__init__(msg)


class WarningKind(str, Enum):
    VARIABLE_COUNT_MISMATCH = "variable_count_mismatch"
    STEPPED_SIMULATION = "stepped_simulation"


@dataclass(frozen=True)
class ParseWarning:
    """A recoverable condition reported next to a complete dataset."""

    kind: WarningKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


def variable_count_mismatch(declared: int, parsed: int) -> ParseWarning:
    return ParseWarning(
        kind=WarningKind.VARIABLE_COUNT_MISMATCH,
        message=f"Variable count mismatch: expected {declared}, found {parsed}",
        details={"declared": int(declared), "parsed": int(parsed)},
    )


def stepped_simulation(flags: str) -> ParseWarning:
    return ParseWarning(
        kind=WarningKind.STEPPED_SIMULATION,
        message="Stepped simulation detected. Only first step will be loaded.",
        details={"flags": flags},
    )

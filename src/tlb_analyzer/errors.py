"""
Error types for the TLB analyzer.

CONFIGURATION ERRORS:
---------------------
Raised before any simulation runs when cache geometry or command-line
values are invalid (e.g. a way count that does not divide the cache size).

TRACE FILE ERRORS:
------------------
Raised when a trace file or the trace directory cannot be opened. These
abort the batch: skipping a file would shift every following result.

A truncated trace is NOT an error. Records are consumed up to the last
complete one and the run ends normally.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


class TLBAnalyzerError(Exception):
    """Base class for all analyzer errors."""


class ConfigurationError(TLBAnalyzerError, ValueError):
    """Invalid cache geometry or simulation configuration."""


@dataclass
class TraceFileError(TLBAnalyzerError):
    """
    A trace file could not be opened or read.

    Attributes:
        path: The offending file.
        message: Human-readable description.
    """

    path: Union[str, Path]
    message: str = ""

    def __post_init__(self) -> None:
        # Keep args populated so the error survives pickling from workers
        super().__init__(self.path, self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.path} - {self.message}"


@dataclass
class TraceCorpusError(TraceFileError):
    """The trace directory could not be listed."""

"""
Binary trace reader and writer.

TRACE FORMAT:
=============

A trace is a flat sequence of 16-byte records, four unsigned 32-bit words
each, in native byte order:

    +----------------+----------------+----------------+----------------+
    | flags | depth  |    l1_addr     |    l2_addr     |   final_addr   |
    +----------------+----------------+----------------+----------------+
      [31:4]  [3:0]

flags:
    Page-aligned virtual address that missed the first-level TLB. It is
    recorded by the capture tool and not interpreted here.
depth:
    Number of walk levels the translation needed (1-3).
l1_addr / l2_addr:
    Guest physical addresses of the L1 and L2 descriptors that were read.
final_addr:
    Guest physical frame produced by the walk.

A file may end in the middle of a record (the capture tool was stopped);
the trailing partial record is ignored.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Tuple, Union

from tlb_analyzer.errors import TraceFileError
from tlb_analyzer.models.event import TranslationEvent

logger = logging.getLogger(__name__)

RECORD = struct.Struct("=4I")
RECORD_SIZE = RECORD.size
CHUNK_RECORDS = 64 * 1024


class TraceReader:
    """
    Sequential reader of translation events.

    Usage:
        with TraceReader(path) as reader:
            for event in reader:
                ...

    Attributes:
        path: Trace file being read.
        events_read: Number of complete records decoded so far.
        discarded_bytes: Size of the trailing partial record (set at EOF).
    """

    def __init__(self, path: Union[str, Path], chunk_records: int = CHUNK_RECORDS):
        """
        Initialize the reader. The file is opened by open() or `with`.

        Args:
            path: Trace file path.
            chunk_records: Records fetched per read call.
        """
        self.path = Path(path)
        self.events_read = 0
        self.discarded_bytes = 0
        self._chunk_size = max(1, chunk_records) * RECORD_SIZE
        self._file: Optional[BinaryIO] = None
        self._records: Iterator[Tuple[int, ...]] = iter(())

    def open(self) -> "TraceReader":
        """
        Open the trace file.

        Raises:
            TraceFileError: If the file cannot be opened.
        """
        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise TraceFileError(self.path, e.strerror or str(e)) from e

        self.events_read = 0
        self.discarded_bytes = 0
        self._records = self._iter_records(self._file)
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
        self._records = iter(())

    def __enter__(self) -> "TraceReader":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def read_event(self) -> Optional[TranslationEvent]:
        """
        Decode the next event.

        Returns:
            The next TranslationEvent, or None at the end of the trace.
        """
        words = next(self._records, None)
        if words is None:
            return None
        self.events_read += 1
        return TranslationEvent.from_words(*words)

    def __iter__(self) -> Iterator[TranslationEvent]:
        while True:
            event = self.read_event()
            if event is None:
                return
            yield event

    def _iter_records(self, stream: BinaryIO) -> Iterator[Tuple[int, ...]]:
        leftover = b""
        while True:
            chunk = stream.read(self._chunk_size)
            if not chunk:
                break

            data = leftover + chunk
            usable = len(data) - len(data) % RECORD_SIZE
            yield from RECORD.iter_unpack(data[:usable])
            leftover = data[usable:]

        if leftover:
            self.discarded_bytes = len(leftover)
            logger.debug(
                "%s: ignoring %d trailing bytes of a partial record",
                self.path.name, len(leftover)
            )


def read_trace(path: Union[str, Path]) -> Iterator[TranslationEvent]:
    """
    Yield every event of a trace file.

    Args:
        path: Trace file path.

    Raises:
        TraceFileError: If the file cannot be opened.
    """
    with TraceReader(path) as reader:
        yield from reader


def write_trace(
    path: Union[str, Path],
    events: Iterable[TranslationEvent],
    page: int = 0
) -> int:
    """
    Write events in the trace format.

    Args:
        path: Destination file.
        events: Events to write.
        page: Virtual page stored in the flags word of every record.

    Returns:
        Number of records written.

    Raises:
        TraceFileError: If the file cannot be written.
    """
    path = Path(path)
    count = 0
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            for event in events:
                f.write(RECORD.pack(*event.to_words(page)))
                count += 1
    except OSError as e:
        raise TraceFileError(path, e.strerror or str(e)) from e

    return count

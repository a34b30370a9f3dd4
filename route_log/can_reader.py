"""
CAN CSV log reader.

Reads a whole log, shifts timestamps so the run starts at zero, drops
messages recorded before that origin and returns them in time order.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .can_message import CANLogError, CANMessage
from .logging_config import get_logger
from .params import DIRECTION_MARKERS

logger = get_logger(__name__)

_EMPTY = object()


class PeekableRows:
    """
    Iterator over CSV rows that can look at the next row without consuming it.

    Rows are yielded as ``(row_number, fields)`` with 1-based row numbers
    counting data rows only (the header is not row 1). Blank lines are
    skipped and not counted.

    An error raised while peeking (e.g. ``csv.Error``) is raised again by
    the following ``next()``, so the consumer still reports the bad row.
    """

    def __init__(self, rows: Iterable[List[str]]) -> None:
        self._rows = (row for row in rows if row)
        self._row_number = 0
        self._peeked: object = _EMPTY
        self._peek_error: Optional[Exception] = None

    def __iter__(self) -> "PeekableRows":
        return self

    def __next__(self) -> Tuple[int, List[str]]:
        if self._peek_error is not None:
            error, self._peek_error = self._peek_error, None
            self._row_number += 1
            raise error
        if self._peeked is not _EMPTY:
            row, self._peeked = self._peeked, _EMPTY
        else:
            try:
                row = next(self._rows)
            except StopIteration:
                raise
            except Exception:
                self._row_number += 1
                raise
        self._row_number += 1
        return self._row_number, row

    @property
    def row_number(self) -> int:
        """Number of the row most recently read (0 before the first)."""
        return self._row_number

    def peek(self) -> Optional[List[str]]:
        """Return the next row without consuming it, or None at the end."""
        if self._peek_error is not None:
            raise self._peek_error
        if self._peeked is _EMPTY:
            try:
                self._peeked = next(self._rows)
            except StopIteration:
                return None
            except Exception as exc:
                self._peek_error = exc
                raise
        return self._peeked


def resolve_ts_offset(
    rows: PeekableRows,
    can_ts_offs: Optional[int] = None,
    direction_markers: Sequence[str] = DIRECTION_MARKERS,
) -> int:
    """
    Pick the nanosecond offset subtracted from every row.

    An explicit offset wins. Otherwise the first data row is parsed with
    offset 0 so that it ends up at timestamp 0. If that row is missing or
    unreadable the offset is 0; the row itself is still reported by the
    main parse loop.
    """
    if can_ts_offs is not None:
        return can_ts_offs
    try:
        first = rows.peek()
        if first is None:
            return 0
        return CANMessage.parse_from(first, 0, direction_markers).timestamp
    except (CANLogError, csv.Error):
        return 0


def _has_undecodable(record: Sequence[str]) -> bool:
    """True if a field holds bytes that were not valid UTF-8 (surrogate escapes)."""
    return any("\udc80" <= ch <= "\udcff" for field in record for ch in field)


def read_can_log(
    csv_log_path: Union[str, Path],
    can_ts_offs: Optional[int] = None,
    direction_markers: Sequence[str] = DIRECTION_MARKERS,
) -> Tuple[List[CANMessage], int]:
    """
    Read every CAN message from a CSV log along with the offset applied.

    Args:
        csv_log_path: Path to the CSV log (header row required)
        can_ts_offs: Nanosecond timestamp offset. If None, the first row's
                     timestamp is used so the log starts at 0.
        direction_markers: Values of the optional Tx/Rx column

    Returns:
        (messages, ts_offs): messages with non-negative timestamps,
        stable-sorted by timestamp, and the nanosecond offset subtracted
        from every row

    Raises:
        CANLogError: If the file cannot be opened or any row is malformed
    """
    path = Path(csv_log_path)
    logger.info("Opening CAN log %s...", path)

    try:
        handle = path.open("r", encoding="utf-8", errors="surrogateescape", newline="")
    except OSError as exc:
        raise CANLogError(f"Failed to read CSV file {path}") from exc

    messages: List[CANMessage] = []
    dropped = 0

    with handle:
        reader = csv.reader(handle)
        try:
            next(reader, None)  # header
        except csv.Error as exc:
            raise CANLogError(f"Invalid CSV record in file {path}: {exc}") from exc

        rows = PeekableRows(reader)
        ts_offs = resolve_ts_offset(rows, can_ts_offs, direction_markers)
        logger.info("can_ts_offs %d", ts_offs)

        while True:
            try:
                row_number, record = next(rows)
            except StopIteration:
                break
            except csv.Error as exc:
                raise CANLogError(
                    f"Invalid CSV record in file {path} row {rows.row_number}: {exc}"
                ) from exc

            if _has_undecodable(record):
                raise CANLogError(f"Invalid UTF-8 in CSV {path} row {row_number}")

            try:
                message = CANMessage.parse_from(record, ts_offs, direction_markers)
            except CANLogError as exc:
                raise CANLogError(f"Invalid CAN data found in CSV {path} row {row_number}") from exc

            # Messages logged before the origin (e.g. before the video
            # started) are dropped rather than moving the origin earlier.
            if message.timestamp < 0:
                dropped += 1
                continue
            messages.append(message)

    if dropped:
        logger.debug("Dropped %d CAN messages before timestamp offset", dropped)

    # Logs holding more than one bus can be slightly out of order
    messages.sort(key=lambda m: m.timestamp)
    return messages, ts_offs


def read_can_messages(
    csv_log_path: Union[str, Path],
    can_ts_offs: Optional[int] = None,
    direction_markers: Sequence[str] = DIRECTION_MARKERS,
) -> List[CANMessage]:
    """Read every CAN message from a CSV log; see read_can_log."""
    return read_can_log(csv_log_path, can_ts_offs, direction_markers)[0]

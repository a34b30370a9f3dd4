"""
CAN message records parsed from CSV bus logs.

Each CSV row has a variable number of fields::

    Time Stamp,ID,Extended,[Dir,]Bus,LEN,D1,D2,D3,D4,D5,D6,D7,D8

The ``Dir`` column (``Tx``/``Rx``) is written by SavvyCAN and missing from
other loggers, so the parser detects and skips it. Timestamps are in
microseconds in the file and nanoseconds in memory.
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Iterator, Optional, Sequence

from .params import DIRECTION_MARKERS

MAX_DATA_BYTES = 8
MAX_CAN_ID = 0xFFFFFFFF
MAX_BUS_NO = 0xFF

# ASCII digits only: int() would also take "0x", "_" separators and Unicode digits
_DIGITS = {
    10: re.compile(r"[+-]?[0-9]+"),
    16: re.compile(r"[+]?[0-9A-Fa-f]+"),
}


class CANLogError(ValueError):
    """Raised when a CAN CSV log or one of its rows cannot be parsed."""


def _next_field(fields: Iterator[str], name: str) -> str:
    value = next(fields, None)
    if value is None:
        raise CANLogError(f"Missing {name} field")
    return value.strip()


def _parse_int(text: str, name: str, base: int = 10, lo: Optional[int] = None, hi: Optional[int] = None) -> int:
    if not _DIGITS[base].fullmatch(text):
        raise CANLogError(f"Invalid {name} field: {text!r}")
    try:
        value = int(text, base)
    except ValueError as exc:
        raise CANLogError(f"Invalid {name} field: {text!r}") from exc
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        raise CANLogError(f"Invalid {name} field: {text!r} out of range")
    return value


@total_ordering
@dataclass(frozen=True, eq=False)
class CANMessage:
    """
    One frame observed on the vehicle CAN bus.

    Ordering and equality use ``timestamp`` only: two messages with the
    same timestamp compare equal even when their payloads differ. Do not
    use ``==`` to deduplicate messages.

    Attributes:
        timestamp: Nanoseconds relative to the log's timestamp offset
        can_id: Arbitration ID (11 or 29 bit, stored as u32)
        is_extended_id: True for 29-bit IDs
        bus_no: Bus/channel number (u8)
        data: Payload, at most 8 bytes
    """
    timestamp: int
    can_id: int
    is_extended_id: bool
    bus_no: int
    data: bytes = b""

    def __post_init__(self):
        if len(self.data) > MAX_DATA_BYTES:
            raise ValueError(f"CAN payload has {len(self.data)} bytes, maximum is {MAX_DATA_BYTES}")

    def __eq__(self, other):
        if not isinstance(other, CANMessage):
            return NotImplemented
        return self.timestamp == other.timestamp

    def __lt__(self, other):
        if not isinstance(other, CANMessage):
            return NotImplemented
        return self.timestamp < other.timestamp

    __hash__ = None

    @classmethod
    def parse_from(
        cls,
        record: Sequence[str],
        ts_offs: int,
        direction_markers: Sequence[str] = DIRECTION_MARKERS,
    ) -> "CANMessage":
        """
        Parse one CSV record into a CANMessage.

        Args:
            record: Row fields in file order
            ts_offs: Nanosecond offset subtracted from the row timestamp
            direction_markers: Values of the optional direction column

        Returns:
            Parsed CANMessage

        Raises:
            CANLogError: If a required field is missing or malformed. The
                message names the field; row context is added by the caller.
        """
        fields = iter(record)

        ts_us = _parse_int(_next_field(fields, "ts"), "ts")
        can_id = _parse_int(_next_field(fields, "can id"), "can id", 16, 0, MAX_CAN_ID)
        is_extended_id = _next_field(fields, "is_extended_id") == "true"

        bus_field = next(fields, None)
        if bus_field is not None and bus_field.strip() in direction_markers:
            bus_field = next(fields, None)
        if bus_field is None:
            raise CANLogError("Missing bus field")
        bus_no = _parse_int(bus_field.strip(), "bus", 10, 0, MAX_BUS_NO)

        next(fields, None)  # dlen, not checked against the data fields

        data = bytearray()
        for index, text in enumerate(fields):
            if index == MAX_DATA_BYTES:
                break
            data.append(_parse_int(text.strip(), f"data byte D{index + 1}", 16, 0, 0xFF))

        return cls(
            timestamp=ts_us * 1000 - ts_offs,
            can_id=can_id,
            is_extended_id=is_extended_id,
            bus_no=bus_no,
            data=bytes(data),
        )

"""
Inputs to the route log.

CAN messages, video frames and alerts are produced separately, each
already in time order. LogInput wraps any of them behind one timestamp so
they can be merged into a single timeline for playback.

Comparison between LogInputs looks at the timestamp and nothing else:
``LogInput.can(a) == LogInput.alert(b)`` is True whenever both happen at
the same nanosecond. Equal-timestamp entries of different kinds keep the
order they had before sorting/merging.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from functools import total_ordering
from typing import Iterable, List, Optional, Protocol, Union

from .alerts import Alert
from .can_message import CANMessage


class TimestampedFrame(Protocol):
    """What the route log needs from a decoded video frame."""
    ts_ns: int


@dataclass(frozen=True)
class FrameMarker:
    """Position of one video frame on the route timeline."""
    ts_ns: int
    frame_index: Optional[int] = None


@total_ordering
class LogInput:
    """Tagged union over CAN messages, video frames and alerts."""

    CAN = "can"
    FRAME = "frame"
    ALERT = "alert"

    __slots__ = ("kind", "value")

    def __init__(self, kind: str, value: Union[CANMessage, TimestampedFrame, Alert]) -> None:
        if kind not in (self.CAN, self.FRAME, self.ALERT):
            raise ValueError(f"Invalid log input kind: {kind}")
        self.kind = kind
        self.value = value

    @classmethod
    def can(cls, message: CANMessage) -> "LogInput":
        return cls(cls.CAN, message)

    @classmethod
    def frame(cls, frame: TimestampedFrame) -> "LogInput":
        return cls(cls.FRAME, frame)

    @classmethod
    def alert(cls, alert: Alert) -> "LogInput":
        return cls(cls.ALERT, alert)

    @classmethod
    def wrap(cls, value: Union["LogInput", CANMessage, TimestampedFrame, Alert]) -> "LogInput":
        """Wrap a value according to its type; LogInputs pass through."""
        if isinstance(value, LogInput):
            return value
        if isinstance(value, CANMessage):
            return cls.can(value)
        if isinstance(value, Alert):
            return cls.alert(value)
        if hasattr(value, "ts_ns"):
            return cls.frame(value)
        raise TypeError(f"Cannot wrap {type(value).__name__} as a log input")

    def timestamp(self) -> int:
        """Return timestamp in nanoseconds."""
        if self.kind == self.FRAME:
            return self.value.ts_ns
        return self.value.timestamp

    def __eq__(self, other):
        if not isinstance(other, LogInput):
            return NotImplemented
        return self.timestamp() == other.timestamp()

    def __lt__(self, other):
        if not isinstance(other, LogInput):
            return NotImplemented
        return self.timestamp() < other.timestamp()

    __hash__ = None

    def __repr__(self) -> str:
        return f"LogInput({self.kind!r}, {self.value!r})"


def sort_inputs(inputs: Iterable[LogInput]) -> List[LogInput]:
    """Stable sort by timestamp."""
    return sorted(inputs, key=LogInput.timestamp)


def merge_inputs(*streams: Iterable[LogInput]) -> List[LogInput]:
    """
    Merge streams that are each already sorted by timestamp.

    Ties keep stream order (earlier stream first), so the result equals
    ``sort_inputs(chain(*streams))``.
    """
    return list(heapq.merge(*streams, key=LogInput.timestamp))


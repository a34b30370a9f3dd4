"""
Route Log Assembly

Builds a single time-ordered route log from the streams recorded during a
vehicle run: CAN bus frames from a CSV log, video frame markers and
operator/system alerts.

Key components:
- CANMessage: One CAN frame parsed from a CSV row
- read_can_messages: Reads a whole CSV log with timestamps starting at 0
- read_can_log: Same, also returning the timestamp offset that was applied
- find_missing_can_messages: Flags silences in the CAN log as alerts
- expand_alerts: Repeats alerts at a fixed cadence for sampling players
- LogInput: Timestamp-ordered wrapper over all event kinds

Usage:
    from route_log import read_can_messages, build_route_timeline, FrameMarker

    messages = read_can_messages('drive_can.csv')
    frames = [FrameMarker(ts_ns=i * 50_000_000, frame_index=i) for i in range(200)]

    for entry in build_route_timeline(messages, frames):
        print(entry.kind, entry.timestamp())
"""

from .alerts import Alert, AlertStatus, find_missing_can_messages, read_alerts
from .can_message import CANLogError, CANMessage
from .can_reader import PeekableRows, read_can_log, read_can_messages, resolve_ts_offset
from .densify import expand_alerts
from .log_input import FrameMarker, LogInput, TimestampedFrame, merge_inputs, sort_inputs
from .params import ALERT_INTERVAL_NS, MISSING_THRESHOLD_NS, load_params
from .timeline import build_route_timeline

__version__ = "1.0.0"
__all__ = [
    "Alert",
    "AlertStatus",
    "find_missing_can_messages",
    "read_alerts",
    "CANLogError",
    "CANMessage",
    "PeekableRows",
    "read_can_log",
    "read_can_messages",
    "resolve_ts_offset",
    "expand_alerts",
    "FrameMarker",
    "LogInput",
    "TimestampedFrame",
    "merge_inputs",
    "sort_inputs",
    "ALERT_INTERVAL_NS",
    "MISSING_THRESHOLD_NS",
    "load_params",
    "build_route_timeline",
]

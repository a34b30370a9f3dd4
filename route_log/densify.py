"""
Alert expansion for sampling players.

The player shows the most recent log entry at or before the playback
position, and only looks back a short distance. A single alert at the
start of a long fault would therefore disappear after a moment, so each
alert is repeated every ``interval_ns`` until the next alert takes over.
"""

from dataclasses import replace
from typing import List, Sequence

from .alerts import Alert
from .log_input import LogInput
from .params import ALERT_INTERVAL_NS


def expand_alerts(alerts: Sequence[Alert], interval_ns: int = ALERT_INTERVAL_NS) -> List[LogInput]:
    """
    Expand individual alerts to cover the span from the first to the last alert.

    The emission cursor starts at the first alert and is never reset: each
    alert is emitted at the current cursor position, advancing by
    ``interval_ns``, while the cursor is before the next alert's timestamp.
    The last alert's "next" timestamp is its own, so it is not emitted,
    and a single alert produces nothing.

    Example:
        [Critical@0, Normal@250ms] -> [Critical@0, Critical@100ms, Critical@200ms]

    Args:
        alerts: Alerts sorted by timestamp
        interval_ns: Spacing of repeated entries (must be positive)

    Returns:
        LogInput alerts in chronological order
    """
    if interval_ns <= 0:
        raise ValueError(f"interval_ns must be positive, got {interval_ns}")
    if not alerts:
        return []

    first_ts = alerts[0].timestamp
    last_ts = alerts[-1].timestamp

    result: List[LogInput] = []
    ts = first_ts
    for index, alert in enumerate(alerts):
        next_at = alerts[index + 1].timestamp if index + 1 < len(alerts) else last_ts
        while ts < next_at:
            result.append(LogInput.alert(replace(alert, timestamp=ts)))
            ts += interval_ns

    return result

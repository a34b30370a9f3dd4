"""
Alerts shown alongside the replayed route.

Alerts come from two places: operator/system alert files recorded with
the run, and gaps detected in the CAN log itself (which usually mean the
logger dropped frames).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from .can_message import CANMessage
from .params import MISSING_THRESHOLD_NS

NS_PER_SECOND = 1_000_000_000


class AlertStatus(Enum):
    NORMAL = "Normal"
    USER_PROMPT = "UserPrompt"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class Alert:
    """
    Alert state change.

    Attributes:
        timestamp: Nanoseconds on the route timeline
        status: Severity shown by the player
        message: Text for the onset of an alert; None for the entry that
                 clears it
    """
    timestamp: int
    status: AlertStatus
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Alert":
        """Build an Alert from ``{"timestamp", "status", "message"}``."""
        try:
            timestamp = data["timestamp"]
            status = data["status"]
        except KeyError as exc:
            raise ValueError(f"Alert missing required field: {exc.args[0]}") from exc
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise ValueError(f"Alert timestamp must be an integer, got {timestamp!r}")
        try:
            status = AlertStatus(status)
        except ValueError as exc:
            raise ValueError(f"Unknown alert status: {status!r}") from exc
        message = data.get("message")
        if message is not None and not isinstance(message, str):
            raise ValueError(f"Alert message must be a string or null, got {message!r}")
        return cls(timestamp=timestamp, status=status, message=message)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "status": self.status.value,
            "message": self.message,
        }


def read_alerts(path: Union[str, Path]) -> List[Alert]:
    """
    Load alerts from a JSON file holding a list of alert objects.

    Returns:
        Alerts stable-sorted by timestamp

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the content is not a list of valid alerts
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list of alerts")

    alerts = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"{path} alert {index} is not an object")
        try:
            alerts.append(Alert.from_dict(item))
        except ValueError as exc:
            raise ValueError(f"{path} alert {index}: {exc}") from exc

    alerts.sort(key=lambda a: a.timestamp)
    return alerts


def find_missing_can_messages(
    messages: Sequence[CANMessage],
    threshold_ns: int = MISSING_THRESHOLD_NS,
) -> List[Alert]:
    """
    Scan CAN messages for gaps that may indicate faults in the CAN logging.

    Every interval between consecutive messages longer than
    ``threshold_ns`` produces a Critical alert at the start of the gap and
    a Normal alert (no message) at the message that ends it.

    Args:
        messages: Messages sorted by timestamp
        threshold_ns: Longest silence that is not reported

    Returns:
        Alerts in chronological order
    """
    if len(messages) < 2:
        return []

    timestamps = np.fromiter(
        (m.timestamp for m in messages), dtype=np.int64, count=len(messages)
    )
    gap_starts = np.flatnonzero(np.diff(timestamps) > threshold_ns)

    result: List[Alert] = []
    for i in gap_starts:
        start = int(timestamps[i])
        end = int(timestamps[i + 1])
        result.append(Alert(
            timestamp=start,
            status=AlertStatus.CRITICAL,
            message=(
                "Possible lost CAN messages.\n"
                f"Gap of {(end - start) / NS_PER_SECOND:.3f}s with no message"
            ),
        ))
        result.append(Alert(timestamp=end, status=AlertStatus.NORMAL, message=None))
    return result

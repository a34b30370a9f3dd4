"""Assembly of the complete route timeline."""

from typing import Iterable, List, Optional, Sequence

from .alerts import Alert, find_missing_can_messages
from .can_message import CANMessage
from .densify import expand_alerts
from .log_input import LogInput, TimestampedFrame, merge_inputs, sort_inputs
from .logging_config import get_logger
from .params import default_params

logger = get_logger(__name__)


def build_route_timeline(
    can_messages: Sequence[CANMessage],
    frames: Iterable[TimestampedFrame] = (),
    alerts: Iterable[Alert] = (),
    params: Optional[dict] = None,
) -> List[LogInput]:
    """
    Merge CAN messages, video frames and alerts into one timeline.

    Gap alerts detected in ``can_messages`` are combined with ``alerts``
    before expansion, so a gap and an operator alert share one cursor.

    Args:
        can_messages: CAN messages sorted by timestamp
        frames: Video frames (any order)
        alerts: Operator/system alerts (any order)
        params: Pipeline parameters from ``load_params``; defaults if None

    Returns:
        All entries ordered by timestamp. Entries with equal timestamps
        keep the order CAN, frame, alert.
    """
    if params is None:
        params = default_params()

    gap_alerts = find_missing_can_messages(
        can_messages, params['gaps']['missing_threshold_ns']
    )
    all_alerts = sorted([*gap_alerts, *alerts], key=lambda a: a.timestamp)
    expanded = expand_alerts(all_alerts, params['alerts']['interval_ns'])

    can_inputs = [LogInput.can(m) for m in can_messages]
    frame_inputs = sort_inputs(LogInput.frame(f) for f in frames)

    logger.info(
        "Route timeline: %d CAN messages, %d frames, %d alerts (%d detected gaps) -> %d alert entries",
        len(can_inputs), len(frame_inputs), len(all_alerts), len(gap_alerts) // 2, len(expanded),
    )
    return merge_inputs(can_inputs, frame_inputs, expanded)

"""
Integration tests: CSV log + frames + alerts -> route timeline.
"""
import pytest

from route_log import (
    Alert,
    AlertStatus,
    CANMessage,
    FrameMarker,
    LogInput,
    build_route_timeline,
    load_params,
    read_alerts,
    read_can_messages,
)

GAP_MESSAGE = "Possible lost CAN messages.\nGap of 0.780s with no message"


def _kinds(timeline, kind):
    return [e for e in timeline if e.kind == kind]


@pytest.mark.integration
def test_timeline_from_savvycan_log(savvycan_log):
    messages = read_can_messages(savvycan_log)
    frames = [FrameMarker(ts_ns=i * 250_000_000, frame_index=i) for i in range(4)]

    timeline = build_route_timeline(messages, frames)

    stamps = [e.timestamp() for e in timeline]
    assert stamps == sorted(stamps)

    can_entries = _kinds(timeline, LogInput.CAN)
    assert [e.value for e in can_entries] == messages
    assert all(a.value is b for a, b in zip(can_entries, messages))

    assert [e.value.frame_index for e in _kinds(timeline, LogInput.FRAME)] == [0, 1, 2, 3]

    alerts = _kinds(timeline, LogInput.ALERT)
    assert [e.timestamp() for e in alerts] == [20_000_000 + i * 100_000_000 for i in range(8)]
    assert all(e.value.status is AlertStatus.CRITICAL for e in alerts)
    assert all(e.value.message == GAP_MESSAGE for e in alerts)

    assert len(timeline) == 5 + 4 + 8


@pytest.mark.integration
def test_equal_timestamps_order_can_frame_alert():
    can_msgs = [
        CANMessage(timestamp=0, can_id=1, is_extended_id=False, bus_no=0),
        CANMessage(timestamp=600_000_000, can_id=1, is_extended_id=False, bus_no=0),
    ]
    timeline = build_route_timeline(can_msgs, frames=[FrameMarker(ts_ns=0)])

    assert [e.kind for e in timeline[:3]] == [LogInput.CAN, LogInput.FRAME, LogInput.ALERT]


@pytest.mark.integration
def test_operator_alerts_share_cursor_with_gap_alerts(savvycan_log, fixtures_dir):
    messages = read_can_messages(savvycan_log)
    operator = read_alerts(fixtures_dir / "operator_alerts.json")

    timeline = build_route_timeline(messages, alerts=operator)

    alerts = [(e.timestamp(), e.value.status) for e in _kinds(timeline, LogInput.ALERT)]
    # gap Critical@20ms, UserPrompt@100ms, Normal@300ms, gap Normal@800ms
    assert alerts == [
        (20_000_000, AlertStatus.CRITICAL),
        (120_000_000, AlertStatus.USER_PROMPT),
        (220_000_000, AlertStatus.USER_PROMPT),
        (320_000_000, AlertStatus.NORMAL),
        (420_000_000, AlertStatus.NORMAL),
        (520_000_000, AlertStatus.NORMAL),
        (620_000_000, AlertStatus.NORMAL),
        (720_000_000, AlertStatus.NORMAL),
    ]


@pytest.mark.integration
def test_params_override_threshold(savvycan_log, fixtures_dir):
    params = load_params(str(fixtures_dir / "params_override.json"))
    messages = read_can_messages(savvycan_log, direction_markers=params['can_log']['direction_markers'])

    timeline = build_route_timeline(messages, params=params)

    # 5ms threshold: 5ms->10ms is not a gap, 10ms->20ms and 20ms->800ms are
    alerts = _kinds(timeline, LogInput.ALERT)
    assert [e.timestamp() for e in alerts][:2] == [10_000_000, 110_000_000]
    assert alerts[0].value.status is AlertStatus.CRITICAL


@pytest.mark.integration
def test_no_gaps_no_alerts(write_can_csv):
    path = write_can_csv([f"{1000 + i * 100_000},{i:X},false,Rx,0,1,{i:02X}" for i in range(10)])

    timeline = build_route_timeline(read_can_messages(path))

    assert _kinds(timeline, LogInput.ALERT) == []
    assert len(timeline) == 10


@pytest.mark.integration
def test_empty_inputs():
    assert build_route_timeline([]) == []


@pytest.mark.integration
def test_single_operator_alert_is_not_expanded():
    timeline = build_route_timeline([], alerts=[Alert(0, AlertStatus.CRITICAL, "only one")])

    assert timeline == []

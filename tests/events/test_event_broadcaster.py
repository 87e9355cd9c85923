from __future__ import annotations

from qr_attendance.core.enums import EventName
from qr_attendance.events.broadcaster import InMemoryEventBroadcaster, channel_for_session
from qr_attendance.events.controller import format_sse


def test_channel_name_is_session_id():
    assert channel_for_session(7) == "7"
    assert channel_for_session("7") == "7"


def test_callback_observer_receives_events_in_order(broadcaster):
    seen = []
    broadcaster.subscribe("1", seen.append)

    broadcaster.publish("1", EventName.CREDENTIAL_ISSUED, {"expiryTime": "x"})
    broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {"studentId": 10})

    assert [e.name for e in seen] == [EventName.CREDENTIAL_ISSUED, EventName.ATTENDANCE_COMMITTED]
    assert seen[1].payload == {"studentId": 10}
    assert seen[1].channel_id == "1"


def test_queued_subscription_reads_through_get(broadcaster):
    with broadcaster.subscribe("1") as sub:
        delivered = broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {"studentId": 10})
        event = sub.get(timeout=0)

    assert delivered == 1
    assert event.name == EventName.ATTENDANCE_COMMITTED
    assert event.payload["studentId"] == 10


def test_stream_yields_none_when_idle(broadcaster):
    sub = broadcaster.subscribe("1")
    stream = sub.stream(timeout=0.01)

    assert next(stream) is None
    broadcaster.publish("1", EventName.CREDENTIAL_ISSUED, {})
    assert next(stream).name == EventName.CREDENTIAL_ISSUED

    sub.close()
    assert list(stream) == []


def test_channels_are_isolated(broadcaster):
    a, b = [], []
    broadcaster.subscribe("1", a.append)
    broadcaster.subscribe("2", b.append)

    assert broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {}) == 1

    assert len(a) == 1
    assert b == []


def test_publish_without_subscribers_is_a_no_op(broadcaster):
    assert broadcaster.publish("404", EventName.ATTENDANCE_COMMITTED, {}) == 0


def test_closed_subscription_receives_nothing(broadcaster):
    seen = []
    sub = broadcaster.subscribe("1", seen.append)
    assert broadcaster.subscriber_count("1") == 1

    sub.close()
    sub.close()
    broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {})

    assert seen == []
    assert broadcaster.subscriber_count("1") == 0


def test_late_subscriber_gets_no_replay(broadcaster):
    broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {"studentId": 10})
    sub = broadcaster.subscribe("1")

    assert sub.get(timeout=0) is None


def test_failing_observer_is_detached_without_affecting_others(broadcaster):
    seen = []

    def boom(event):
        raise RuntimeError("socket closed")

    broadcaster.subscribe("1", boom)
    broadcaster.subscribe("1", seen.append)

    assert broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {}) == 1
    assert broadcaster.subscriber_count("1") == 1

    broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, {})
    assert len(seen) == 2


def test_full_queue_drops_only_for_slow_subscriber():
    events = InMemoryEventBroadcaster(max_queue=1)
    slow = events.subscribe("1")
    fast = []
    events.subscribe("1", fast.append)

    assert events.publish("1", EventName.ATTENDANCE_COMMITTED, {"n": 1}) == 2
    assert events.publish("1", EventName.ATTENDANCE_COMMITTED, {"n": 2}) == 1

    assert slow.get(timeout=0).payload == {"n": 1}
    assert slow.get(timeout=0) is None
    assert [e.payload["n"] for e in fast] == [1, 2]


def test_payload_is_copied_on_publish(broadcaster):
    seen = []
    broadcaster.subscribe("1", seen.append)
    payload = {"studentId": 10}

    broadcaster.publish("1", EventName.ATTENDANCE_COMMITTED, payload)
    payload["studentId"] = 11

    assert seen[0].payload == {"studentId": 10}


def test_format_sse():
    text = format_sse("attendance-committed", {"studentName": "Nguyễn Văn A"})

    assert text == 'event: attendance-committed\ndata: {"studentName": "Nguyễn Văn A"}\n\n'

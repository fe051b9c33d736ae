# [TESTER] v1

from __future__ import annotations

import pytest

from ammcore.state.events import EventLog, PoolEvent, PoolEventKind, PoolStats


def _swap(amount_in: int = 100, amount_out: int = 90) -> PoolEvent:
    return PoolEvent(seq=0, kind=PoolEventKind.SWAP, amount_in=amount_in, amount_out=amount_out, fee=1)


def test_record_assigns_increasing_sequence_numbers() -> None:
    log = EventLog(capacity=3)
    stored = [log.record(_swap(amount_in=i + 1)) for i in range(5)]

    assert [e.seq for e in stored] == [0, 1, 2, 3, 4]
    assert len(log) == 3
    assert [e.seq for e in log.recent()] == [2, 3, 4]
    assert [e.amount_in for e in log.recent()] == [3, 4, 5]
    assert log.next_seq == 5


def test_recent_limit() -> None:
    log = EventLog()
    for _ in range(4):
        log.record(_swap())

    assert [e.seq for e in log.recent(2)] == [2, 3]
    assert [e.seq for e in log.recent(10)] == [0, 1, 2, 3]
    assert log.recent(0) == []
    with pytest.raises(ValueError):
        log.recent(-1)


def test_loaded_log_continues_after_evicted_events() -> None:
    events = [PoolEvent(seq=s, kind=PoolEventKind.SWAP, amount_in=1, amount_out=1) for s in (7, 8)]
    log = EventLog(2, events, next_seq=9)
    assert log.record(_swap()).seq == 9
    assert [e.seq for e in log.recent()] == [8, 9]

    with pytest.raises(ValueError, match="out of order"):
        EventLog(2, list(reversed(events)))
    with pytest.raises(ValueError, match="precedes"):
        EventLog(2, events, next_seq=8)
    with pytest.raises(ValueError, match="capacity"):
        EventLog(0)


def test_event_dict_form() -> None:
    event = PoolEvent(
        seq=4,
        kind=PoolEventKind.LIQUIDITY_ADDED,
        amount_in=10,
        amount_out=20,
        shares=14,
        position="bob",
    )
    data = event.to_dict()
    assert data["kind"] == "LiquidityAdded"
    assert PoolEvent.from_dict(data) == event


@pytest.mark.parametrize(
    ("field", "value", "exc"),
    [
        ("seq", -1, ValueError),
        ("amount_in", "10", ValueError),
        ("fee", True, ValueError),
        ("in_to_out", 1, TypeError),
        ("position", 5, TypeError),
        ("kind", "Mint", ValueError),
    ],
)
def test_event_from_dict_rejects_bad_fields(field: str, value: object, exc: type) -> None:
    data = _swap().to_dict()
    data[field] = value
    with pytest.raises(exc):
        PoolEvent.from_dict(data)


def test_stats_with_swap_counts_each_direction() -> None:
    stats = PoolStats().with_swap(True, 1_000, 3).with_swap(False, 2_000, 6).with_swap(True, 500, 2)
    assert stats == PoolStats(swap_count=3, volume_in=1_500, volume_out=2_000, fees_in=5, fees_out=6)
    assert stats.to_dict()["volume_out"] == 2_000

    with pytest.raises(ValueError):
        PoolStats(volume_in=-1)

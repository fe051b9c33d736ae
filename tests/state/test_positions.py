# [TESTER] v1

from __future__ import annotations

import pytest

from ammcore.errors import InsufficientShares
from ammcore.state.positions import PositionTable


def test_credit_and_debit() -> None:
    table = PositionTable()
    table.credit("alice", 100)
    table.credit("bob", 50)
    table.debit("alice", 40)

    assert table.get("alice") == 60
    assert table.get("carol") == 0
    assert table.total() == 110
    assert len(table) == 2


def test_zero_balances_are_dropped() -> None:
    table = PositionTable()
    table.credit("alice", 10)
    table.debit("alice", 10)
    assert table.get_all() == {}
    assert len(table) == 0


def test_overdraw_fails_without_change() -> None:
    table = PositionTable()
    table.credit("alice", 10)
    with pytest.raises(InsufficientShares):
        table.debit("alice", 11)
    assert table.get("alice") == 10


def test_negative_amounts_are_rejected() -> None:
    table = PositionTable()
    with pytest.raises(ValueError):
        table.credit("alice", -1)
    with pytest.raises(ValueError):
        table.set("alice", -1)


def test_get_all_returns_a_copy() -> None:
    table = PositionTable()
    table.credit("alice", 10)
    snapshot = table.get_all()
    snapshot["alice"] = 999
    assert table.get("alice") == 10

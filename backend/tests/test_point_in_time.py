from __future__ import annotations

from datetime import date, datetime

import pytest

from wac_engine import (
    Disposal,
    Lot,
    UnknownRecordError,
    build_events,
    replay,
    replay_until,
    state_before_sale,
    wac_at,
)


def build_history():
    lots = [
        Lot(id="b1", instrument_id=1, timestamp=datetime(2024, 1, 2), shares=10, price=100),
        Lot(id="b2", instrument_id=1, timestamp=datetime(2024, 2, 1), shares=10, price=200),
        Lot(id="b3", instrument_id=1, timestamp=datetime(2024, 4, 1), shares=5, price=90),
    ]
    disposals = [
        Disposal(id="s1", instrument_id=1, timestamp=datetime(2024, 2, 1), shares=5, price=180),
        Disposal(id="s2", instrument_id=1, timestamp=datetime(2024, 3, 1), shares=15, price=160),
    ]
    return build_events(lots, disposals)


def test_cutting_at_last_event_equals_full_replay():
    events = build_history()
    last = max(event.timestamp for event in events)
    assert replay_until(events, last) == replay(events)


def test_cutoff_inclusive_and_exclusive():
    events = build_history()
    inclusive = replay_until(events, datetime(2024, 2, 1))
    exclusive = replay_until(events, datetime(2024, 2, 1), inclusive=False)
    assert inclusive.state.shares == 15
    assert [s.disposal_id for s in inclusive.sales] == ["s1"]
    assert exclusive.state.shares == 10
    assert exclusive.sales == []


def test_date_cutoff_is_midnight():
    events = build_history()
    assert replay_until(events, date(2024, 2, 1)).state.shares == 15
    assert replay_until(events, date(2024, 1, 1)).state.shares == 0


def test_state_before_sale_includes_same_instant_buy():
    state, outcome = state_before_sale(build_history(), "s1")
    assert state.shares == 20
    assert state.capital == pytest.approx(3000)
    assert outcome.wac_at_sale == pytest.approx(150)
    assert outcome.realized_profit == pytest.approx(150)


def test_state_before_later_sale():
    state, outcome = state_before_sale(build_history(), "s2")
    assert state.shares == 15
    assert state.wac == pytest.approx(150)
    assert outcome.realized_profit == pytest.approx((160 - 150) * 15)


def test_state_before_unknown_sale_raises():
    with pytest.raises(UnknownRecordError):
        state_before_sale(build_history(), "missing")


def test_wac_restarts_after_liquidation():
    events = build_history()
    assert wac_at(events, datetime(2024, 3, 15)) == 0.0
    assert wac_at(events, datetime(2024, 4, 1)) == pytest.approx(90)


def test_state_before_sale_net_proceeds_deduct_costs_and_taxes():
    disposal = Disposal(
        id="s1",
        instrument_id=1,
        timestamp=datetime(2024, 2, 1),
        shares=5,
        price=180,
        operation_cost=2.5,
        withheld_tax=10,
    )
    events = build_events(
        [Lot(id="b1", instrument_id=1, timestamp=datetime(2024, 1, 2), shares=10, price=150)],
        [disposal],
    )
    disposals = {disposal.id: disposal}

    state, outcome = state_before_sale(events, "s1", disposals=disposals)

    assert state.shares == pytest.approx(10)
    assert outcome.total_sale_value == pytest.approx(900)
    assert outcome.net_proceeds == pytest.approx(887.5)
    assert outcome == replay(events, disposals=disposals).sale("s1")

from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from wac_engine import Disposal, EventKind, InvalidRecordError, Lot, build_events, group_by_instrument, order_events


def test_build_events_copies_values_and_ids():
    lot = Lot(id=11, instrument_id=3, timestamp=datetime(2024, 5, 1, 9, 30), shares=2.5, price=40.0, operation_cost=1.2)
    disposal = Disposal(id=21, instrument_id=3, timestamp=datetime(2024, 6, 1), shares=1.0, price=45.0)
    buy_event, sell_event = build_events([lot], [disposal])
    assert buy_event.kind is EventKind.BUY
    assert (buy_event.instrument_id, buy_event.shares, buy_event.price, buy_event.source_id) == (3, 2.5, 40.0, 11)
    assert buy_event.timestamp == datetime(2024, 5, 1, 9, 30)
    assert sell_event.kind is EventKind.SELL
    assert sell_event.source_id == 21


def test_plain_dates_become_midnight():
    lot = Lot(id=1, instrument_id=1, timestamp=date(2024, 5, 1), shares=1, price=1)
    (event,) = build_events([lot], [])
    assert event.timestamp == datetime(2024, 5, 1)


@pytest.mark.parametrize("shares", [0, -3, math.nan])
def test_non_positive_shares_rejected(shares):
    lot = Lot(id="bad", instrument_id=1, timestamp=datetime(2024, 1, 1), shares=shares, price=10)
    with pytest.raises(InvalidRecordError) as excinfo:
        build_events([lot], [])
    assert excinfo.value.record_id == "bad"


def test_order_puts_buys_before_sells_on_ties():
    when = datetime(2024, 3, 1, 12)
    events = build_events(
        [Lot(id="b", instrument_id=1, timestamp=when, shares=1, price=1)],
        [
            Disposal(id="s", instrument_id=1, timestamp=when, shares=1, price=1),
            Disposal(id="early", instrument_id=1, timestamp=datetime(2024, 2, 1), shares=1, price=1),
        ],
    )
    assert [e.source_id for e in order_events(events)] == ["early", "b", "s"]
    assert [e.source_id for e in order_events(reversed(events))] == ["early", "b", "s"]


def test_numeric_ids_tie_break_in_numeric_order():
    when = datetime(2024, 3, 1)
    events = build_events(
        [
            Lot(id=10, instrument_id=1, timestamp=when, shares=1, price=1),
            Lot(id=9, instrument_id=1, timestamp=when, shares=1, price=1),
            Lot(id=100, instrument_id=1, timestamp=when, shares=1, price=1),
        ],
        [],
    )
    assert [e.source_id for e in order_events(events)] == [9, 10, 100]


def test_group_by_instrument():
    lots = [
        Lot(id=1, instrument_id="A", timestamp=datetime(2024, 1, 1), shares=1, price=1),
        Lot(id=2, instrument_id="B", timestamp=datetime(2024, 1, 1), shares=1, price=1),
        Lot(id=3, instrument_id="A", timestamp=datetime(2024, 1, 2), shares=1, price=1),
    ]
    grouped = group_by_instrument(lots)
    assert [lot.id for lot in grouped["A"]] == [1, 3]
    assert [lot.id for lot in grouped["B"]] == [2]


def test_lot_and_disposal_totals_exclude_costs():
    lot = Lot(id=1, instrument_id=1, timestamp=datetime(2024, 1, 1), shares=4, price=25, operation_cost=3)
    disposal = Disposal(id=2, instrument_id=1, timestamp=datetime(2024, 1, 2), shares=2, price=30, withheld_tax=1)
    assert lot.total_cost == 100
    assert disposal.total_sale_value == 60

from __future__ import annotations

from datetime import datetime

import pytest

from wac_engine import (
    Disposal,
    Lot,
    PortfolioSnapshot,
    SnapshotPrices,
    build_events,
    build_utility_series,
    group_by_instrument,
    group_snapshots,
    series_to_frame,
    summarize_series,
)


def build_events_by_instrument():
    lots = [
        Lot(id=1, instrument_id="A", timestamp=datetime(2024, 1, 1), shares=10, price=10),
        Lot(id=2, instrument_id="B", timestamp=datetime(2024, 2, 1), shares=5, price=20),
    ]
    disposals = [Disposal(id=3, instrument_id="A", timestamp=datetime(2024, 3, 1), shares=10, price=12)]
    return group_by_instrument(build_events(lots, disposals))


def build_snapshot_rows():
    return [
        PortfolioSnapshot(snapshot_id="s3", timestamp=datetime(2024, 3, 1), instrument_id="A", price=12),
        PortfolioSnapshot(snapshot_id="s3", timestamp=datetime(2024, 3, 1), instrument_id="B", price=25),
        PortfolioSnapshot(snapshot_id="s1", timestamp=datetime(2024, 1, 15), instrument_id="A", price=11),
        PortfolioSnapshot(snapshot_id="s2", timestamp=datetime(2024, 2, 1), instrument_id="A", price=9),
        PortfolioSnapshot(snapshot_id="s2", timestamp=datetime(2024, 2, 1), instrument_id="B", price=22),
    ]


def test_group_snapshots_orders_by_timestamp():
    grouped = group_snapshots(build_snapshot_rows())
    assert [s.snapshot_id for s in grouped] == ["s1", "s2", "s3"]
    assert grouped[1].prices == {"A": 9.0, "B": 22.0}


def test_group_snapshots_rejects_inconsistent_timestamps():
    rows = [
        PortfolioSnapshot(snapshot_id=1, timestamp=datetime(2024, 1, 1), instrument_id="A", price=1),
        PortfolioSnapshot(snapshot_id=1, timestamp=datetime(2024, 1, 2), instrument_id="B", price=1),
    ]
    with pytest.raises(ValueError):
        group_snapshots(rows)


def test_utility_series_replays_each_snapshot():
    points = build_utility_series(build_events_by_instrument(), build_snapshot_rows())
    assert [p.snapshot_id for p in points] == ["s1", "s2", "s3"]
    assert [p.timestamp for p in points] == [datetime(2024, 1, 15), datetime(2024, 2, 1), datetime(2024, 3, 1)]
    # s1: A 10 @ wac 10 valued at 11
    assert points[0].utility == pytest.approx(10)
    # s2: A at 9 and B bought the same instant at 20, valued at 22
    assert points[1].utility == pytest.approx(-10 + 10)
    # s3: A fully sold, only B remains
    assert points[2].utility == pytest.approx(25)


def test_missing_snapshot_price_contributes_nothing():
    snapshots = [SnapshotPrices(snapshot_id="x", timestamp=datetime(2024, 2, 15), prices={"A": 15})]
    points = build_utility_series(build_events_by_instrument(), snapshots)
    assert points[0].utility == pytest.approx(50)


def test_series_summary_and_frame():
    points = build_utility_series(build_events_by_instrument(), build_snapshot_rows())
    summary = summarize_series(points)
    assert summary.best_value == pytest.approx(25)
    assert summary.worst_value == pytest.approx(0)
    assert summary.latest_timestamp == datetime(2024, 3, 1)
    assert summary.max_drawdown_pct == pytest.approx(-100)

    frame = series_to_frame(points)
    assert list(frame.columns) == ["snapshot_id", "utility"]
    assert frame.loc[datetime(2024, 3, 1), "utility"] == pytest.approx(25)


def test_empty_series():
    assert build_utility_series(build_events_by_instrument(), []) == []
    assert summarize_series([]).latest_value is None

"""Unrealized utility over historical price snapshots."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Union

import pandas as pd
from opentelemetry import trace

from .aggregate import quote_in_base
from .config import OversellPolicy
from .fx import FXRateProvider
from .models import (
    Event,
    Instrument,
    PortfolioSnapshot,
    RecordId,
    SeriesSummary,
    SnapshotPrices,
    UtilityPoint,
    as_datetime,
)
from .point_in_time import replay_until

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def group_snapshots(rows: Iterable[PortfolioSnapshot]) -> List[SnapshotPrices]:
    """Collect per-instrument price rows into one entry per snapshot id."""

    grouped: Dict[RecordId, SnapshotPrices] = {}
    for row in rows:
        timestamp = as_datetime(row.timestamp)
        snapshot = grouped.get(row.snapshot_id)
        if snapshot is None:
            snapshot = SnapshotPrices(snapshot_id=row.snapshot_id, timestamp=timestamp, prices={})
            grouped[row.snapshot_id] = snapshot
        elif snapshot.timestamp != timestamp:
            raise ValueError(
                f"Snapshot {row.snapshot_id!r} has rows at {snapshot.timestamp} and {timestamp}"
            )
        snapshot.prices[row.instrument_id] = float(row.price)
    return sorted(grouped.values(), key=lambda s: (s.timestamp, str(s.snapshot_id)))


def _normalize_snapshots(
    snapshots: Iterable[Union[SnapshotPrices, PortfolioSnapshot]],
) -> List[SnapshotPrices]:
    items = list(snapshots)
    rows = [item for item in items if isinstance(item, PortfolioSnapshot)]
    grouped = [item for item in items if isinstance(item, SnapshotPrices)]
    grouped.extend(group_snapshots(rows))
    return sorted(grouped, key=lambda s: (as_datetime(s.timestamp), str(s.snapshot_id)))


def build_utility_series(
    events_by_instrument: Mapping[RecordId, Iterable[Event]],
    snapshots: Iterable[Union[SnapshotPrices, PortfolioSnapshot]],
    *,
    instruments: Mapping[RecordId, Instrument] | None = None,
    fx_provider: FXRateProvider | None = None,
    policy: OversellPolicy | None = None,
    share_epsilon: float | None = None,
    base_currency: str | None = None,
) -> List[UtilityPoint]:
    """Return the portfolio's unrealized utility at every snapshot.

    Each instrument is replayed up to the snapshot instant and valued at the
    snapshot price. Instruments held at that instant without a snapshot
    price contribute nothing. Points keep the snapshots' own timestamps.
    """

    histories = {key: list(events) for key, events in events_by_instrument.items()}
    points: List[UtilityPoint] = []
    with tracer.start_as_current_span("wac.utility_series") as span:
        ordered = _normalize_snapshots(snapshots)
        span.set_attribute("wac.snapshot_count", len(ordered))
        for snapshot in ordered:
            cutoff = as_datetime(snapshot.timestamp)
            utility = 0.0
            for instrument_id, events in histories.items():
                state = replay_until(
                    events, cutoff, policy=policy, share_epsilon=share_epsilon
                ).state
                if state.shares <= 0:
                    continue
                if instrument_id not in snapshot.prices:
                    logger.debug(
                        "Snapshot %s has no price for held instrument %s",
                        snapshot.snapshot_id,
                        instrument_id,
                    )
                    continue
                currency = None
                if instruments and instrument_id in instruments:
                    currency = instruments[instrument_id].currency
                price = quote_in_base(
                    snapshot.prices[instrument_id], currency, fx_provider, cutoff, base_currency
                )
                utility += (price - state.wac) * state.shares
            points.append(UtilityPoint(timestamp=cutoff, utility=utility, snapshot_id=snapshot.snapshot_id))
    return points


def summarize_series(points: Sequence[UtilityPoint]) -> SeriesSummary:
    if not points:
        return SeriesSummary()
    best = max(points, key=lambda p: p.utility)
    worst = min(points, key=lambda p: p.utility)
    latest = max(points, key=lambda p: p.timestamp)
    peak = float("-inf")
    max_drawdown = 0.0
    for point in sorted(points, key=lambda p: p.timestamp):
        peak = max(peak, point.utility)
        if peak != 0:
            drawdown = (point.utility - peak) / peak * 100
            max_drawdown = min(max_drawdown, drawdown)
    return SeriesSummary(
        best_timestamp=best.timestamp,
        best_value=best.utility,
        worst_timestamp=worst.timestamp,
        worst_value=worst.utility,
        latest_timestamp=latest.timestamp,
        latest_value=latest.utility,
        max_drawdown_pct=max_drawdown,
    )


def series_to_frame(points: Sequence[UtilityPoint]) -> pd.DataFrame:
    """Return the series as a DataFrame indexed by timestamp."""

    frame = pd.DataFrame(
        {
            "timestamp": [p.timestamp for p in points],
            "snapshot_id": [p.snapshot_id for p in points],
            "utility": [p.utility for p in points],
        }
    )
    return frame.set_index("timestamp")


__all__ = [
    "group_snapshots",
    "build_utility_series",
    "summarize_series",
    "series_to_frame",
]

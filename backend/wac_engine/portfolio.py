"""Portfolio report service built on the replay engine.

This is the single entry point reporting code calls: it groups raw lots,
disposals and snapshot rows by instrument, replays each instrument, values
the final states and optionally builds the historical utility series.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Union

from opentelemetry import trace

from .aggregate import aggregate_positions
from .config import EngineSettings, get_settings
from .events import build_events, group_by_instrument
from .fx import FXRateProvider
from .models import (
    Disposal,
    Event,
    Instrument,
    Lot,
    PortfolioSnapshot,
    PortfolioTotals,
    PositionSummary,
    RecordId,
    ReplayResult,
    SaleOutcome,
    SeriesSummary,
    SnapshotPrices,
    UtilityPoint,
)
from .replay import replay
from .schemas import PortfolioReportSchema
from .timeseries import build_utility_series, summarize_series

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class PortfolioReport:
    positions: List[PositionSummary]
    totals: PortfolioTotals
    sales: Dict[RecordId, SaleOutcome] = field(default_factory=dict)
    replays: Dict[RecordId, ReplayResult] = field(default_factory=dict)
    series: List[UtilityPoint] = field(default_factory=list)
    series_summary: SeriesSummary = field(default_factory=SeriesSummary)

    def position(self, instrument_id: RecordId) -> PositionSummary | None:
        for summary in self.positions:
            if summary.instrument_id == instrument_id:
                return summary
        return None

    def open_positions(self) -> List[PositionSummary]:
        return [summary for summary in self.positions if summary.shares > 0]

    def to_schema(self) -> PortfolioReportSchema:
        return PortfolioReportSchema.model_validate(
            {
                "positions": [asdict(p) for p in self.positions],
                "sales": [asdict(s) for s in self.sales.values()],
                "totals": asdict(self.totals),
                "series": [asdict(p) for p in self.series],
                "series_summary": asdict(self.series_summary),
            }
        )


def build_portfolio_report(
    instruments: Iterable[Instrument],
    lots: Iterable[Lot],
    disposals: Iterable[Disposal],
    snapshots: Iterable[Union[PortfolioSnapshot, SnapshotPrices]] = (),
    *,
    fx_provider: FXRateProvider | None = None,
    as_of: Union[date, datetime, None] = None,
    settings: EngineSettings | None = None,
) -> PortfolioReport:
    """Replay every instrument and assemble positions, sales and totals."""

    settings = settings or get_settings()
    instruments_by_id = {instrument.id: instrument for instrument in instruments}
    disposals = list(disposals)
    disposals_by_id = {disposal.id: disposal for disposal in disposals}

    with tracer.start_as_current_span("wac.portfolio_report") as span:
        events_by_instrument: Dict[RecordId, List[Event]] = group_by_instrument(
            build_events(lots, disposals)
        )
        span.set_attribute("wac.instrument_count", len(instruments_by_id))

        replays = {
            instrument_id: replay(
                events,
                disposals=disposals_by_id,
                policy=settings.oversell_policy,
                share_epsilon=settings.share_epsilon,
            )
            for instrument_id, events in events_by_instrument.items()
        }
        positions, totals = aggregate_positions(
            replays,
            instruments_by_id,
            fx_provider=fx_provider,
            as_of=as_of,
            base_currency=settings.base_currency,
        )
        sales = {
            outcome.disposal_id: outcome
            for result in replays.values()
            for outcome in result.sales
        }

        series: List[UtilityPoint] = []
        snapshots = list(snapshots)
        if snapshots:
            series = build_utility_series(
                events_by_instrument,
                snapshots,
                instruments=instruments_by_id,
                fx_provider=fx_provider,
                policy=settings.oversell_policy,
                share_epsilon=settings.share_epsilon,
                base_currency=settings.base_currency,
            )

    logger.info(
        "Portfolio report: %d positions open, %d sales, %d snapshot points",
        totals.num_positions,
        len(sales),
        len(series),
    )
    return PortfolioReport(
        positions=positions,
        totals=totals,
        sales=sales,
        replays=replays,
        series=series,
        series_summary=summarize_series(series),
    )


__all__ = ["PortfolioReport", "build_portfolio_report"]

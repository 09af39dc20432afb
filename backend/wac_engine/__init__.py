"""Weighted-average-cost position replay engine."""

from .aggregate import aggregate_positions, compute_totals, summarize_position
from .config import EngineSettings, OversellPolicy, get_settings
from .errors import (
    InvalidRecordError,
    MissingRateError,
    OverDisposalError,
    ReplayError,
    UnknownRecordError,
)
from .events import build_events, group_by_instrument
from .fx import FXRateProvider
from .models import (
    Disposal,
    Event,
    EventKind,
    Instrument,
    Lot,
    PortfolioSnapshot,
    PortfolioTotals,
    PositionSummary,
    ReplayResult,
    ReplayState,
    ReplayStep,
    SaleOutcome,
    SeriesSummary,
    SnapshotPrices,
    UtilityPoint,
)
from .ordering import order_events
from .point_in_time import replay_until, state_before_sale, wac_at
from .portfolio import PortfolioReport, build_portfolio_report
from .replay import replay, replay_all
from .timeseries import build_utility_series, group_snapshots, series_to_frame, summarize_series

__all__ = [
    "Disposal",
    "EngineSettings",
    "Event",
    "EventKind",
    "FXRateProvider",
    "Instrument",
    "InvalidRecordError",
    "Lot",
    "MissingRateError",
    "OverDisposalError",
    "OversellPolicy",
    "PortfolioReport",
    "PortfolioSnapshot",
    "PortfolioTotals",
    "PositionSummary",
    "ReplayError",
    "ReplayResult",
    "ReplayState",
    "ReplayStep",
    "SaleOutcome",
    "SeriesSummary",
    "SnapshotPrices",
    "UnknownRecordError",
    "UtilityPoint",
    "aggregate_positions",
    "build_events",
    "build_portfolio_report",
    "build_utility_series",
    "compute_totals",
    "get_settings",
    "group_by_instrument",
    "group_snapshots",
    "order_events",
    "replay",
    "replay_all",
    "replay_until",
    "series_to_frame",
    "state_before_sale",
    "summarize_position",
    "summarize_series",
    "wac_at",
]

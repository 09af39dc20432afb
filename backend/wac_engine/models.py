"""Domain models consumed and produced by the WAC replay engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Union

RecordId = Union[int, str]


class EventKind(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Instrument:
    """A tradable ticker with its current reference price."""

    id: RecordId
    name: str
    current_price: float
    currency: Optional[str] = None


@dataclass(frozen=True)
class Lot:
    """A purchase of shares of one instrument."""

    id: RecordId
    instrument_id: RecordId
    timestamp: datetime
    shares: float
    price: float
    operation_cost: float = 0.0

    @property
    def total_cost(self) -> float:
        """Cost-basis contribution of the lot; operation cost is excluded."""

        return self.shares * self.price


@dataclass(frozen=True)
class Disposal:
    """A sale of shares of one instrument."""

    id: RecordId
    instrument_id: RecordId
    timestamp: datetime
    shares: float
    price: float
    operation_cost: float = 0.0
    withheld_tax: float = 0.0

    @property
    def total_sale_value(self) -> float:
        return self.shares * self.price


@dataclass(frozen=True)
class Event:
    """Normalized buy or sell used by the replay."""

    instrument_id: RecordId
    timestamp: datetime
    kind: EventKind
    shares: float
    price: float
    source_id: RecordId

    @property
    def is_buy(self) -> bool:
        return self.kind is EventKind.BUY


@dataclass(frozen=True)
class ReplayState:
    """Running position of one instrument."""

    shares: float = 0.0
    capital: float = 0.0

    @property
    def wac(self) -> float:
        return self.capital / self.shares if self.shares > 0 else 0.0


@dataclass(frozen=True)
class SaleOutcome:
    """Cost basis and realized result captured when a disposal is replayed."""

    disposal_id: RecordId
    instrument_id: RecordId
    timestamp: datetime
    shares: float
    sale_price: float
    wac_at_sale: float
    realized_profit: float
    realized_performance_pct: float
    total_sale_value: float = 0.0
    net_proceeds: float = 0.0


@dataclass(frozen=True)
class ReplayStep:
    """One row of the replay trail: an event and the state right after it."""

    event: Event
    shares: float
    capital: float
    wac: float


@dataclass(frozen=True)
class ReplayResult:
    """Output of replaying one instrument's event stream."""

    instrument_id: Optional[RecordId]
    state: ReplayState
    sales: List[SaleOutcome] = field(default_factory=list)
    steps: List[ReplayStep] = field(default_factory=list)

    @property
    def realized_profit(self) -> float:
        return sum(sale.realized_profit for sale in self.sales)

    def sale(self, disposal_id: RecordId) -> Optional[SaleOutcome]:
        for outcome in self.sales:
            if outcome.disposal_id == disposal_id:
                return outcome
        return None


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Historical price of one instrument recorded under a snapshot id."""

    snapshot_id: RecordId
    timestamp: datetime
    instrument_id: RecordId
    price: float


@dataclass(frozen=True)
class SnapshotPrices:
    """All instrument prices recorded at one historical instant."""

    snapshot_id: RecordId
    timestamp: datetime
    prices: Dict[RecordId, float]


@dataclass(frozen=True)
class PositionSummary:
    """Per-instrument view of a final replay state valued at a price."""

    instrument_id: RecordId
    name: str
    shares: float
    capital: float
    final_wac: float
    current_price: float
    unrealized_value: float
    unrealized_utility: float
    unrealized_performance_pct: float
    realized_profit: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.shares > 0


@dataclass(frozen=True)
class PortfolioTotals:
    total_capital: float
    total_value: float
    total_unrealized_utility: float
    total_realized_profit: float
    total_performance_pct: float
    num_positions: int


@dataclass(frozen=True)
class UtilityPoint:
    timestamp: datetime
    utility: float
    snapshot_id: Optional[RecordId] = None


@dataclass(frozen=True)
class SeriesSummary:
    best_timestamp: Optional[datetime] = None
    best_value: Optional[float] = None
    worst_timestamp: Optional[datetime] = None
    worst_value: Optional[float] = None
    latest_timestamp: Optional[datetime] = None
    latest_value: Optional[float] = None
    max_drawdown_pct: Optional[float] = None


def as_datetime(value: Union[date, datetime]) -> datetime:
    """Return ``value`` as a datetime, mapping plain dates to midnight."""

    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


__all__ = [
    "RecordId",
    "EventKind",
    "Instrument",
    "Lot",
    "Disposal",
    "Event",
    "ReplayState",
    "SaleOutcome",
    "ReplayStep",
    "ReplayResult",
    "PortfolioSnapshot",
    "SnapshotPrices",
    "PositionSummary",
    "PortfolioTotals",
    "UtilityPoint",
    "SeriesSummary",
    "as_datetime",
]

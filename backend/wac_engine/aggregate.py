"""Portfolio-level reduction of per-instrument replay results."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Tuple, Union

from .errors import UnknownRecordError
from .fx import FXRateProvider
from .models import (
    Instrument,
    PortfolioTotals,
    PositionSummary,
    RecordId,
    ReplayResult,
    ReplayState,
)

logger = logging.getLogger(__name__)


def quote_in_base(
    price: float,
    currency: str | None,
    fx_provider: FXRateProvider | None = None,
    as_of: Union[date, datetime, None] = None,
    base_currency: str | None = None,
) -> float:
    """Return ``price`` in ``base_currency`` when a provider is available.

    ``base_currency`` defaults to the provider's own base currency.
    """

    if fx_provider is None or not currency:
        return price
    return fx_provider.convert(price, currency, as_of, to_currency=base_currency)


def summarize_position(
    state: ReplayState,
    instrument: Instrument,
    *,
    price: float | None = None,
    realized_profit: float = 0.0,
    fx_provider: FXRateProvider | None = None,
    as_of: Union[date, datetime, None] = None,
    base_currency: str | None = None,
) -> PositionSummary:
    """Value a replay state at the instrument's (or the given) price."""

    quote = instrument.current_price if price is None else price
    current_price = quote_in_base(quote, instrument.currency, fx_provider, as_of, base_currency)
    final_wac = state.wac
    unrealized_value = state.shares * current_price
    if final_wac > 0:
        performance = (current_price - final_wac) / final_wac * 100
    else:
        performance = 0.0
    return PositionSummary(
        instrument_id=instrument.id,
        name=instrument.name,
        shares=state.shares,
        capital=state.capital,
        final_wac=final_wac,
        current_price=current_price,
        unrealized_value=unrealized_value,
        unrealized_utility=unrealized_value - state.capital,
        unrealized_performance_pct=performance,
        realized_profit=realized_profit,
    )


def compute_totals(
    positions: Iterable[PositionSummary],
    realized_profit: float | None = None,
) -> PortfolioTotals:
    """Reduce position summaries into portfolio totals.

    Only open positions (``shares > 0``) count towards capital, value and
    unrealized utility. Realized profit defaults to the sum over all
    positions, open or closed.
    """

    positions = list(positions)
    open_positions = [p for p in positions if p.shares > 0]
    total_capital = sum(p.capital for p in open_positions)
    total_utility = sum(p.unrealized_utility for p in open_positions)
    if realized_profit is None:
        realized_profit = sum(p.realized_profit for p in positions)
    return PortfolioTotals(
        total_capital=total_capital,
        total_value=sum(p.unrealized_value for p in open_positions),
        total_unrealized_utility=total_utility,
        total_realized_profit=realized_profit,
        total_performance_pct=total_utility / total_capital * 100 if total_capital > 0 else 0.0,
        num_positions=len(open_positions),
    )


def _index_instruments(
    instruments: Union[Mapping[RecordId, Instrument], Iterable[Instrument]],
) -> Dict[RecordId, Instrument]:
    if isinstance(instruments, Mapping):
        return dict(instruments)
    return {instrument.id: instrument for instrument in instruments}


def aggregate_positions(
    replays: Mapping[RecordId, ReplayResult],
    instruments: Union[Mapping[RecordId, Instrument], Iterable[Instrument]],
    *,
    fx_provider: FXRateProvider | None = None,
    as_of: Union[date, datetime, None] = None,
    base_currency: str | None = None,
) -> Tuple[List[PositionSummary], PortfolioTotals]:
    """Summarize every instrument and compute portfolio totals.

    Instruments without any replayed events are reported as closed
    positions. A replay for an instrument that is not supplied raises
    :class:`UnknownRecordError`.
    """

    by_id = _index_instruments(instruments)
    unknown = [instrument_id for instrument_id in replays if instrument_id not in by_id]
    if unknown:
        raise UnknownRecordError(f"Unknown instrument ids: {unknown!r}")

    positions: List[PositionSummary] = []
    for instrument_id, instrument in by_id.items():
        result = replays.get(instrument_id)
        state = result.state if result is not None else ReplayState()
        positions.append(
            summarize_position(
                state,
                instrument,
                realized_profit=result.realized_profit if result is not None else 0.0,
                fx_provider=fx_provider,
                as_of=as_of,
                base_currency=base_currency,
            )
        )
    totals = compute_totals(positions)
    logger.debug(
        "Aggregated %d instruments into %d open positions", len(positions), totals.num_positions
    )
    return positions, totals


__all__ = ["aggregate_positions", "compute_totals", "summarize_position", "quote_in_base"]

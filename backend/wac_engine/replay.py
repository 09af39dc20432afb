"""Weighted-average-cost replay of a position's buy and sell events.

Every sale draws from the pool at its current blended average cost, so lot
identity is irrelevant once events are built. The fold is pure: the same
events always yield the same states, sale outcomes and trail.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from opentelemetry import trace

from .config import OversellPolicy, get_settings
from .errors import OverDisposalError
from .events import group_by_instrument
from .models import (
    Disposal,
    Event,
    RecordId,
    ReplayResult,
    ReplayState,
    ReplayStep,
    SaleOutcome,
)
from .ordering import order_events

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def realized_performance_pct(sale_price: float, wac: float) -> float:
    if wac > 0:
        return (sale_price - wac) / wac * 100
    return 0.0


def _resolve_options(
    policy: Optional[OversellPolicy],
    share_epsilon: Optional[float],
) -> tuple[OversellPolicy, float]:
    if policy is None or share_epsilon is None:
        settings = get_settings()
        policy = policy or settings.oversell_policy
        share_epsilon = settings.share_epsilon if share_epsilon is None else share_epsilon
    return OversellPolicy(policy), float(share_epsilon)


def _single_instrument(events: List[Event]) -> Optional[RecordId]:
    ids = {event.instrument_id for event in events}
    if len(ids) > 1:
        raise ValueError(f"replay expects events of a single instrument, got {sorted(map(str, ids))}")
    return next(iter(ids)) if ids else None


def replay(
    events: Iterable[Event],
    *,
    disposals: Mapping[RecordId, Disposal] | None = None,
    policy: OversellPolicy | None = None,
    share_epsilon: float | None = None,
) -> ReplayResult:
    """Replay one instrument's events in chronological order.

    ``disposals`` optionally maps disposal ids to their records so sale
    outcomes can report net proceeds; costs and taxes never touch the cost
    basis. ``policy`` and ``share_epsilon`` default to the engine settings.
    """

    ordered = order_events(events)
    instrument_id = _single_instrument(ordered)
    policy, epsilon = _resolve_options(policy, share_epsilon)
    disposals = disposals or {}

    shares = 0.0
    capital = 0.0
    sales: List[SaleOutcome] = []
    steps: List[ReplayStep] = []

    with tracer.start_as_current_span("wac.replay") as span:
        span.set_attribute("wac.instrument_id", str(instrument_id))
        span.set_attribute("wac.event_count", len(ordered))
        for event in ordered:
            if event.is_buy:
                shares += event.shares
                capital += event.shares * event.price
            else:
                wac = capital / shares if shares > 0 else 0.0
                sold = event.shares
                if sold > shares + epsilon:
                    if policy is OversellPolicy.REJECT:
                        raise OverDisposalError(event.source_id, sold, shares)
                    if policy is OversellPolicy.CLAMP:
                        logger.warning(
                            "Clamping disposal %s from %g to %g shares",
                            event.source_id,
                            sold,
                            max(shares, 0.0),
                        )
                        sold = max(shares, 0.0)
                capital -= sold * wac
                shares -= sold
                if abs(shares) <= epsilon:
                    shares = 0.0
                    capital = 0.0
                sales.append(_sale_outcome(event, sold, wac, disposals.get(event.source_id)))
            steps.append(
                ReplayStep(
                    event=event,
                    shares=shares,
                    capital=capital,
                    wac=capital / shares if shares > 0 else 0.0,
                )
            )
        span.set_attribute("wac.sale_count", len(sales))

    logger.debug(
        "Replayed %d events for %s: shares=%.6f capital=%.4f",
        len(ordered),
        instrument_id,
        shares,
        capital,
    )
    return ReplayResult(
        instrument_id=instrument_id,
        state=ReplayState(shares=shares, capital=capital),
        sales=sales,
        steps=steps,
    )


def _sale_outcome(
    event: Event,
    sold: float,
    wac: float,
    disposal: Disposal | None,
) -> SaleOutcome:
    total_sale_value = sold * event.price
    costs = 0.0
    if disposal is not None:
        costs = (disposal.operation_cost or 0.0) + (disposal.withheld_tax or 0.0)
    return SaleOutcome(
        disposal_id=event.source_id,
        instrument_id=event.instrument_id,
        timestamp=event.timestamp,
        shares=sold,
        sale_price=event.price,
        wac_at_sale=wac,
        realized_profit=(event.price - wac) * sold,
        realized_performance_pct=realized_performance_pct(event.price, wac),
        total_sale_value=total_sale_value,
        net_proceeds=total_sale_value - costs,
    )


def replay_all(
    events: Iterable[Event],
    *,
    disposals: Mapping[RecordId, Disposal] | None = None,
    policy: OversellPolicy | None = None,
    share_epsilon: float | None = None,
) -> Dict[RecordId, ReplayResult]:
    """Replay every instrument found in ``events`` independently."""

    return {
        instrument_id: replay(
            instrument_events,
            disposals=disposals,
            policy=policy,
            share_epsilon=share_epsilon,
        )
        for instrument_id, instrument_events in group_by_instrument(events).items()
    }


__all__ = ["replay", "replay_all", "realized_performance_pct"]

"""Normalization of lots and disposals into replayable events."""

from __future__ import annotations

from typing import Dict, Iterable, List, TypeVar

from .errors import InvalidRecordError
from .models import Disposal, Event, EventKind, Lot, RecordId, as_datetime

T = TypeVar("T")


def _check_shares(record_id: RecordId, shares: float) -> None:
    # NaN fails the comparison as well
    if not shares > 0:
        raise InvalidRecordError(record_id, f"shares must be > 0, got {shares!r}")


def lot_event(lot: Lot) -> Event:
    _check_shares(lot.id, lot.shares)
    return Event(
        instrument_id=lot.instrument_id,
        timestamp=as_datetime(lot.timestamp),
        kind=EventKind.BUY,
        shares=float(lot.shares),
        price=float(lot.price),
        source_id=lot.id,
    )


def disposal_event(disposal: Disposal) -> Event:
    _check_shares(disposal.id, disposal.shares)
    return Event(
        instrument_id=disposal.instrument_id,
        timestamp=as_datetime(disposal.timestamp),
        kind=EventKind.SELL,
        shares=float(disposal.shares),
        price=float(disposal.price),
        source_id=disposal.id,
    )


def build_events(lots: Iterable[Lot], disposals: Iterable[Disposal]) -> List[Event]:
    """Return unordered events for the given buys and sells.

    Values are copied verbatim; the originating record id is kept in
    ``source_id`` so results can be mapped back to lots and disposals.
    """

    events = [lot_event(lot) for lot in lots]
    events.extend(disposal_event(disposal) for disposal in disposals)
    return events


def group_by_instrument(items: Iterable[T]) -> Dict[RecordId, List[T]]:
    """Partition records carrying an ``instrument_id`` attribute."""

    grouped: Dict[RecordId, List[T]] = {}
    for item in items:
        grouped.setdefault(item.instrument_id, []).append(item)  # type: ignore[attr-defined]
    return grouped


__all__ = ["build_events", "lot_event", "disposal_event", "group_by_instrument"]

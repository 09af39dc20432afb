"""Chronological ordering of replay events."""

from __future__ import annotations

from datetime import datetime
from numbers import Real
from typing import Iterable, List, Tuple, Union

from .models import Event, EventKind, RecordId

# Buys sort ahead of sells recorded at the same instant
_KIND_RANK = {EventKind.BUY: 0, EventKind.SELL: 1}


def _record_id_key(source_id: RecordId) -> Tuple[int, Union[float, str]]:
    # Numeric ids keep numeric order and sort ahead of string ids
    if isinstance(source_id, Real):
        return (0, source_id)
    return (1, str(source_id))


def event_sort_key(event: Event) -> Tuple[datetime, int, Tuple[int, Union[float, str]]]:
    return (event.timestamp, _KIND_RANK[event.kind], _record_id_key(event.source_id))


def order_events(events: Iterable[Event]) -> List[Event]:
    """Return events by timestamp, buys before sells on ties, then by record id."""

    return sorted(events, key=event_sort_key)


__all__ = ["event_sort_key", "order_events"]

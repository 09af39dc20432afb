"""Point-in-time reconstruction of replay state."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping, Tuple, Union

from .config import OversellPolicy
from .errors import UnknownRecordError
from .models import (
    Disposal,
    Event,
    EventKind,
    RecordId,
    ReplayResult,
    ReplayState,
    SaleOutcome,
    as_datetime,
)
from .ordering import order_events
from .replay import replay


def replay_until(
    events: Iterable[Event],
    cutoff: Union[date, datetime],
    *,
    inclusive: bool = True,
    disposals: Mapping[RecordId, Disposal] | None = None,
    policy: OversellPolicy | None = None,
    share_epsilon: float | None = None,
) -> ReplayResult:
    """Replay the events recorded at or before ``cutoff``.

    With ``inclusive=False`` events stamped exactly at the cutoff are left out.
    Every call replays from the start of the history.
    """

    limit = as_datetime(cutoff)
    if inclusive:
        selected = [event for event in events if event.timestamp <= limit]
    else:
        selected = [event for event in events if event.timestamp < limit]
    return replay(
        selected,
        disposals=disposals,
        policy=policy,
        share_epsilon=share_epsilon,
    )


def state_before_sale(
    events: Iterable[Event],
    disposal_id: RecordId,
    *,
    disposals: Mapping[RecordId, Disposal] | None = None,
    policy: OversellPolicy | None = None,
    share_epsilon: float | None = None,
) -> Tuple[ReplayState, SaleOutcome]:
    """Return the position just before a disposal and that disposal's outcome.

    The prefix is every event ordered ahead of the sale, so a buy stamped at
    the same instant is already included.
    """

    ordered = order_events(events)
    for index, event in enumerate(ordered):
        if event.kind is EventKind.SELL and event.source_id == disposal_id:
            break
    else:
        raise UnknownRecordError(f"Unknown disposal {disposal_id!r}")

    prior = replay(
        ordered[:index], disposals=disposals, policy=policy, share_epsilon=share_epsilon
    )
    through_sale = replay(
        ordered[: index + 1], disposals=disposals, policy=policy, share_epsilon=share_epsilon
    )
    return prior.state, through_sale.sales[-1]


def wac_at(
    events: Iterable[Event],
    cutoff: Union[date, datetime],
    *,
    policy: OversellPolicy | None = None,
) -> float:
    """Average cost of the position as of ``cutoff``."""

    return replay_until(events, cutoff, policy=policy).state.wac


__all__ = ["replay_until", "state_before_sale", "wac_at"]

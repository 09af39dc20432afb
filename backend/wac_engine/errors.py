"""Exception types raised by the replay engine."""

from __future__ import annotations


class ReplayError(Exception):
    """Base class for every error raised by :mod:`wac_engine`."""


class InvalidRecordError(ReplayError, ValueError):
    """A lot or disposal carries values the engine cannot replay."""

    def __init__(self, record_id: object, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Record {record_id!r} is invalid: {reason}")


class OverDisposalError(ReplayError, ValueError):
    """A disposal sells more shares than the position holds."""

    def __init__(self, disposal_id: object, requested: float, held: float):
        self.disposal_id = disposal_id
        self.requested = requested
        self.held = held
        super().__init__(
            f"Disposal {disposal_id!r} sells {requested:g} shares but only {held:g} are held"
        )


class UnknownRecordError(ReplayError, KeyError):
    """A disposal or instrument id is not present in the supplied data."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class MissingRateError(ReplayError, KeyError):
    """No FX rate is available for the requested currency pair."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


__all__ = [
    "ReplayError",
    "InvalidRecordError",
    "OverDisposalError",
    "UnknownRecordError",
    "MissingRateError",
]

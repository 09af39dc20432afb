"""FX conversion helpers."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional, Tuple, Union

from .errors import MissingRateError


@dataclass
class FXRateProvider:
    """Look up FX conversion rates to the base currency."""

    rates: Dict[Tuple[date, str, str], float]
    base_currency: str = "EUR"

    def rate(self, d: Union[date, datetime], from_currency: str, to_currency: str | None = None) -> float:
        """Return the conversion rate from ``from_currency`` to ``to_currency``."""

        target = to_currency or self.base_currency
        if from_currency.upper() == target.upper():
            return 1.0
        day = d.date() if isinstance(d, datetime) else d
        key = (day, from_currency.upper(), target.upper())
        if key not in self.rates:
            raise MissingRateError(
                f"Missing FX rate for {from_currency}->{target} on {day.isoformat()}"
            )
        return self.rates[key]

    def latest_rate(
        self,
        from_currency: str,
        to_currency: str | None = None,
        as_of: Union[date, datetime, None] = None,
    ) -> float:
        """Return the most recent rate on or before ``as_of`` (any date when omitted)."""

        target = (to_currency or self.base_currency).upper()
        source = from_currency.upper()
        if source == target:
            return 1.0
        limit: Optional[date] = as_of.date() if isinstance(as_of, datetime) else as_of
        candidates = [
            d
            for (d, src, dst) in self.rates
            if src == source and dst == target and (limit is None or d <= limit)
        ]
        if not candidates:
            suffix = f" on or before {limit.isoformat()}" if limit else ""
            raise MissingRateError(f"Missing FX rate for {source}->{target}{suffix}")
        return self.rates[(max(candidates), source, target)]

    def convert(
        self,
        amount: float,
        currency: str | None,
        as_of: Union[date, datetime, None] = None,
        to_currency: str | None = None,
    ) -> float:
        """Convert ``amount`` quoted in ``currency`` into ``to_currency`` (base by default)."""

        if not currency:
            return amount
        return amount * self.latest_rate(currency, to_currency or self.base_currency, as_of)


__all__ = ["FXRateProvider"]

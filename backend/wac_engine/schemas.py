"""Pydantic schemas for serializing replay outputs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

RecordIdField = Union[int, str]


class SaleOutcomeSchema(BaseModel):
    disposal_id: RecordIdField
    instrument_id: RecordIdField
    timestamp: datetime
    shares: float
    sale_price: float
    wac_at_sale: float
    realized_profit: float
    realized_performance_pct: float
    total_sale_value: float
    net_proceeds: float

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "disposal_id": 7,
                "instrument_id": 18,
                "timestamp": "2024-09-15T00:00:00",
                "shares": 5,
                "sale_price": 180.0,
                "wac_at_sale": 150.0,
                "realized_profit": 150.0,
                "realized_performance_pct": 20.0,
                "total_sale_value": 900.0,
                "net_proceeds": 897.5,
            }
        }


class PositionSummarySchema(BaseModel):
    instrument_id: RecordIdField
    name: str
    shares: float
    capital: float
    final_wac: float
    current_price: float
    unrealized_value: float
    unrealized_utility: float
    unrealized_performance_pct: float
    realized_profit: float = 0.0

    class Config:
        from_attributes = True


class PortfolioTotalsSchema(BaseModel):
    total_capital: float
    total_value: float
    total_unrealized_utility: float
    total_realized_profit: float
    total_performance_pct: float
    num_positions: int = Field(..., ge=0)

    class Config:
        from_attributes = True


class UtilityPointSchema(BaseModel):
    timestamp: datetime
    utility: float
    snapshot_id: Optional[RecordIdField] = None

    class Config:
        from_attributes = True


class SeriesSummarySchema(BaseModel):
    best_timestamp: Optional[datetime] = None
    best_value: Optional[float] = None
    worst_timestamp: Optional[datetime] = None
    worst_value: Optional[float] = None
    latest_timestamp: Optional[datetime] = None
    latest_value: Optional[float] = None
    max_drawdown_pct: Optional[float] = None

    class Config:
        from_attributes = True


class PortfolioReportSchema(BaseModel):
    positions: list[PositionSummarySchema]
    sales: list[SaleOutcomeSchema]
    totals: PortfolioTotalsSchema
    series: list[UtilityPointSchema] = Field(default_factory=list)
    series_summary: SeriesSummarySchema = Field(default_factory=SeriesSummarySchema)


__all__ = [
    "SaleOutcomeSchema",
    "PositionSummarySchema",
    "PortfolioTotalsSchema",
    "UtilityPointSchema",
    "SeriesSummarySchema",
    "PortfolioReportSchema",
]

"""Pydantic models for trade endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TradePreviewRequest(BaseModel):
    """User input for a new trade, before it is stored."""

    ticker: str = Field(..., description="Ticker symbol")
    direction: str = Field(..., description="long or short")
    quantity: int = Field(..., description="Shares/units")
    entry_price: float = Field(..., description="Entry fill price")
    exit_price: float = Field(..., description="Exit fill price")
    timestamp: datetime = Field(..., description="Trade time")
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "ticker": "tsla",
                "direction": "short",
                "quantity": 10,
                "entry_price": 50.0,
                "exit_price": 40.0,
                "timestamp": "2024-03-04T10:30:00",
                "notes": "Faded the open",
            }
        }


class TradeRecord(BaseModel):
    """A valid trade as analytics see it."""

    id: Optional[str] = None
    ticker: str
    direction: Optional[str] = None
    quantity: Optional[float] = None
    entry_price: Optional[float] = None
    exit_price: Optional[float] = None
    timestamp: datetime
    realized_pl: float
    notes: Optional[str] = None


class TradeList(BaseModel):
    """Stored trades plus how many of them analytics can use."""

    trades: List[TradeRecord]
    total_records: int = Field(..., description="Records in the store")
    valid_records: int = Field(..., description="Records with a valid timestamp and realized P&L")


class TradesResponse(BaseModel):
    status: str = "success"
    data: TradeList

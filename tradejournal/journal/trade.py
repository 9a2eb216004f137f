"""Trade record model and creation rules."""
import re
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tradejournal.core.constants import TradeLimits


class Direction(str, Enum):
    """Side of a closed round-trip trade."""

    LONG = 'long'
    SHORT = 'short'


class TradeValidationError(ValueError):
    """Raised when user input cannot be turned into a valid Trade."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def generate_trade_id() -> str:
    """Time plus randomness: trade_<epoch ms>_<9 chars>."""
    return f"trade_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def sanitize_ticker(ticker: str) -> str:
    """Upper-case a ticker and strip everything but letters, digits and dots."""
    return re.sub(r'[^A-Z0-9.]', '', str(ticker).upper().strip())


def compute_realized_pl(direction: str | Direction, entry_price: float, exit_price: float, quantity: int) -> float:
    """
    Realized P&L of a closed round trip.

    Args:
        direction: 'long' or 'short'
        entry_price: Fill price when the position was opened
        exit_price: Fill price when the position was closed
        quantity: Number of shares/units

    Returns:
        (exit - entry) * quantity for long, (entry - exit) * quantity for short

    Example:
        >>> compute_realized_pl('short', entry_price=50, exit_price=40, quantity=10)
        100.0
    """
    direction = Direction(direction)
    if direction is Direction.LONG:
        return float((exit_price - entry_price) * quantity)
    return float((entry_price - exit_price) * quantity)


class Trade(BaseModel):
    """A closed trade as stored in the journal.

    ``realized_pl`` is computed once when the trade is created and is
    authoritative afterwards; analytics never recompute it from prices.
    Field aliases match the stored document shape (camelCase).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=generate_trade_id, description="Unique trade identifier")
    ticker: str = Field(..., description="Upper-case ticker symbol")
    direction: Direction = Field(..., description="long or short")
    quantity: int = Field(..., gt=0, le=TradeLimits.MAX_QUANTITY, description="Shares/units")
    entry_price: float = Field(..., alias='entryPrice', gt=0, le=TradeLimits.MAX_PRICE)
    exit_price: float = Field(..., alias='exitPrice', gt=0, le=TradeLimits.MAX_PRICE)
    timestamp: datetime = Field(..., description="When the trade happened")
    realized_pl: float = Field(..., alias='realizedPL', description="Realized profit and loss")
    notes: Optional[str] = Field(None, description="Free-text notes")

    @field_validator('ticker', mode='before')
    @classmethod
    def _check_ticker(cls, value):
        sanitized = sanitize_ticker(value)
        if not sanitized:
            raise ValueError('Ticker symbol is required')
        if len(sanitized) > TradeLimits.MAX_TICKER_LENGTH:
            raise ValueError(f'Ticker symbol must be {TradeLimits.MAX_TICKER_LENGTH} characters or less')
        if not sanitized[0].isalpha():
            raise ValueError('Ticker symbol must start with a letter')
        return sanitized

    @field_validator('notes', mode='before')
    @classmethod
    def _blank_notes_to_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None


def create_trade(
    ticker: str,
    direction: str | Direction,
    quantity: int,
    entry_price: float,
    exit_price: float,
    timestamp: datetime | str,
    notes: str | None = None,
    trade_id: str | None = None,
) -> Trade:
    """
    Build a validated Trade and derive its realized P&L.

    Args:
        ticker: Ticker symbol (any case)
        direction: 'long' or 'short'
        quantity: Positive integer quantity
        entry_price: Entry fill price
        exit_price: Exit fill price
        timestamp: Trade time (datetime or ISO string)
        notes: Optional notes
        trade_id: Optional id; generated when omitted

    Returns:
        Frozen Trade

    Raises:
        TradeValidationError: listing every invalid field
    """
    errors: list[str] = []

    try:
        direction = Direction(direction)
    except ValueError:
        errors.append('Direction must be either "long" or "short"')

    for name, price in (('Entry price', entry_price), ('Exit price', exit_price)):
        if not isinstance(price, (int, float)) or isinstance(price, bool):
            errors.append(f'{name} must be a number')
        elif not 0 < price <= TradeLimits.MAX_PRICE:
            errors.append(f'{name} must be between $0.000001 and ${TradeLimits.MAX_PRICE:,.0f}')

    if isinstance(quantity, bool) or not isinstance(quantity, int):
        errors.append('Quantity must be a positive integer')
    elif not 0 < quantity <= TradeLimits.MAX_QUANTITY:
        errors.append(f'Quantity must be a positive integer up to {TradeLimits.MAX_QUANTITY:,}')

    if errors:
        raise TradeValidationError(errors)

    fields = {
        'ticker': ticker,
        'direction': direction,
        'quantity': quantity,
        'entry_price': entry_price,
        'exit_price': exit_price,
        'timestamp': timestamp,
        'realized_pl': compute_realized_pl(direction, entry_price, exit_price, quantity),
        'notes': notes,
    }
    if trade_id is not None:
        fields['id'] = trade_id

    try:
        return Trade(**fields)
    except ValidationError as e:
        raise TradeValidationError([err['msg'] for err in e.errors()]) from e

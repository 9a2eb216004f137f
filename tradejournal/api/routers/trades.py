"""API endpoints for the trade store."""

from fastapi import APIRouter, HTTPException

from tradejournal.api.models import TradePreviewRequest, TradesResponse
from tradejournal.api.services.analytics_service import AnalyticsService
from tradejournal.core.logger import get_logger
from tradejournal.journal.trade import TradeValidationError, create_trade

logger = get_logger(__name__)
router = APIRouter()
analytics_service = AnalyticsService()


@router.get("/", response_model=TradesResponse)
async def get_trades():
    """
    List the stored trades analytics can use.

    Records with an unparseable timestamp or non-numeric realized P&L are
    left out; the counts show how many were dropped.
    """
    try:
        return {
            "status": "success",
            "data": analytics_service.list_trades(),
        }
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing trades: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/preview")
async def preview_trade(request: TradePreviewRequest):
    """
    Validate a new trade and compute its realized P&L without storing it.

    Returns 400 with every validation problem when the input is invalid.
    """
    try:
        trade = create_trade(
            ticker=request.ticker,
            direction=request.direction,
            quantity=request.quantity,
            entry_price=request.entry_price,
            exit_price=request.exit_price,
            timestamp=request.timestamp,
            notes=request.notes,
        )
    except TradeValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)

    return {
        "status": "success",
        "data": trade.model_dump(),
    }

"""Compounding projections of portfolio value and dividend income."""
import math
from typing import Any

from tradejournal.analytics.metrics import clamp_capital
from tradejournal.core.constants import AnalyticsConstants, ProjectionConstants
from tradejournal.core.error_decorator import return_on_error
from tradejournal.core.logger import get_logger


logger = get_logger(__name__)


def _finite_or_zero(value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def effective_annual_rate(annual_return_rate: float, conservative: bool = False) -> float:
    """
    Annual rate used for compounding, as a fraction.

    The percentage rate is scaled by 0.6 in conservative mode and floored
    at -100% so a projection can wipe a portfolio out but never go negative.

    Example:
        >>> effective_annual_rate(10.0, conservative=True)
        0.06
    """
    rate = _finite_or_zero(annual_return_rate) / 100
    if conservative:
        rate *= ProjectionConstants.CONSERVATIVE_FACTOR
    return max(rate, ProjectionConstants.MIN_ANNUAL_RATE)


def _cagr(value: float, contributions: float, years: int) -> float:
    if contributions <= 0:
        return 0.0
    ratio = value / contributions
    if ratio <= 0:
        return -100.0
    return (ratio ** (1 / years) - 1) * 100


def compound_monthly(
    initial_capital: float,
    monthly_contribution: float,
    annual_rate: float,
    months: int
) -> tuple[float, float]:
    """
    Month-by-month compounding with a recurring contribution.

    Each month the contribution is added first, then the whole value grows
    by annual_rate / 12.

    Returns:
        (portfolio_value, total_contributions)
    """
    monthly_rate = annual_rate / ProjectionConstants.MONTHS_PER_YEAR
    value = contributions = initial_capital
    for _ in range(months):
        value += monthly_contribution
        contributions += monthly_contribution
        value *= 1 + monthly_rate
    return value, contributions


@return_on_error(list)
def project_portfolio(
    annual_return_rate: float,
    initial_capital: float,
    monthly_contribution: float = 0.0,
    conservative: bool = False
) -> list[dict[str, Any]]:
    """
    Project the portfolio forward over the 1, 3, 5, 10 and 15 year horizons.

    Args:
        annual_return_rate: Historical rate in percent (compute_metrics'
                            annual_return_rate)
        initial_capital: Starting value, clamped to [0, 1e9]
        monthly_contribution: Added every month, clamped to [0, 1e9 / 12]
        conservative: Scale the rate by 0.6

    Returns:
        One dictionary per horizon:
            - period: label, e.g. '5 Years'
            - years
            - projected_value
            - total_contributions: capital + all contributions
            - total_growth: projected_value - total_contributions
            - growth_percentage: total_growth / total_contributions * 100
            - cagr: ((value / contributions) ** (1 / years) - 1) * 100
            - monthly_contribution
            - effective_annual_rate: rate used, in percent

    Notes:
        - A zero rate gives no growth: projected_value == total_contributions
          and cagr == 0 for every horizon
    """
    capital = clamp_capital(initial_capital)
    contribution = min(
        max(_finite_or_zero(monthly_contribution), 0.0),
        AnalyticsConstants.MAX_MONTHLY_CONTRIBUTION,
    )
    rate = effective_annual_rate(annual_return_rate, conservative)

    periods = []
    for years in ProjectionConstants.HORIZONS_YEARS:
        value, contributions = compound_monthly(
            capital, contribution, rate, years * ProjectionConstants.MONTHS_PER_YEAR
        )
        growth = value - contributions
        periods.append({
            'period': f"{years} Year{'s' if years > 1 else ''}",
            'years': years,
            'projected_value': value,
            'total_contributions': contributions,
            'total_growth': growth,
            'growth_percentage': growth / contributions * 100 if contributions > 0 else 0.0,
            'cagr': _cagr(value, contributions, years),
            'monthly_contribution': contribution,
            'effective_annual_rate': rate * 100,
        })

    logger.debug(f"Projected {len(periods)} horizons at {rate * 100:.2f}%/yr "
                 f"(conservative={conservative})")

    return periods


def _empty_dividends() -> dict[str, float]:
    return {
        'annual_income': 0.0,
        'monthly_income': 0.0,
        'fifteen_year_income': 0.0,
        'yield_on_cost_10y': 0.0,
    }


@return_on_error(_empty_dividends)
def project_dividends(
    total_pl: float,
    dividend_yield: float = ProjectionConstants.DEFAULT_DIVIDEND_YIELD,
    dividend_growth_rate: float = ProjectionConstants.DEFAULT_DIVIDEND_GROWTH_RATE
) -> dict[str, float]:
    """
    Dividend income if realized profits were invested in dividend payers.

    Args:
        total_pl: Realized trading profit; losses count as nothing invested
        dividend_yield: Current yield in percent
        dividend_growth_rate: Yearly dividend growth in percent

    Returns:
        Dictionary with annual_income, monthly_income, fifteen_year_income
        (flat, no growth) and yield_on_cost_10y (percent)
    """
    invested = max(_finite_or_zero(total_pl), 0.0)
    yield_pct = max(_finite_or_zero(dividend_yield), 0.0)
    growth = _finite_or_zero(dividend_growth_rate)

    annual_income = invested * yield_pct / 100
    yield_on_cost = yield_pct * (1 + growth / 100) ** ProjectionConstants.YIELD_ON_COST_YEARS

    return {
        'annual_income': annual_income,
        'monthly_income': annual_income / ProjectionConstants.MONTHS_PER_YEAR,
        'fifteen_year_income': annual_income * ProjectionConstants.DIVIDEND_INCOME_YEARS,
        'yield_on_cost_10y': yield_on_cost if math.isfinite(yield_on_cost) else 0.0,
    }

"""Human-readable formatting for insight texts and reports."""


def format_currency(value: float) -> str:
    """
    Format a dollar amount with thousands separators and two decimals.

    Example:
        >>> format_currency(-1234.5)
        '-$1,234.50'
    """
    sign = '-' if value < 0 else ''
    return f"{sign}${abs(value):,.2f}"


def format_hour(hour: int) -> str:
    """12-hour clock label for an hour of day, e.g. 14 -> '2:00 PM'."""
    suffix = 'AM' if hour < 12 else 'PM'
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"

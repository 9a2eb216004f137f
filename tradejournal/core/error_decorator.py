"""Error logging decorators for the analytics engine and the API services."""

import functools
import inspect
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from tradejournal.core.constants import Paths
from tradejournal.core.logger import get_logger


logger = get_logger(__name__)


class OptionError(ValueError):
    """Raised when a caller passes an unknown option name to an analytics function."""


def log_errors_to_file(log_file: str | Path = Paths.API_ERROR_LOG):
    """
    Decorator that logs detailed error information to a file when a function fails.

    Logs include:
    - Timestamp of error
    - Function name and module
    - Full stack trace
    - Error type and message
    - Function arguments (with sanitization for sensitive data)

    The exception is re-raised so the API layer can turn it into an HTTP error.

    Args:
        log_file: Path to the log file (default: logs/api_errors.log)

    Usage:
        @log_errors_to_file()
        def load_trades(self):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                _log_error_details(func, e, args, kwargs, log_file)
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log_error_details(func, e, args, kwargs, log_file)
                raise

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def return_on_error(default_factory: Callable[[], Any]):
    """
    Decorator that turns any unexpected exception into a well-formed default result.

    Analytics functions must hand back a structurally valid result for any
    structurally valid input. ``OptionError`` raised for an unknown option
    (granularity, time range, mode, sort key) is a caller bug and propagates;
    everything else is logged with its stack trace and replaced by
    ``default_factory()``.

    Args:
        default_factory: Zero-argument callable building the fallback result

    Usage:
        @return_on_error(empty_metrics)
        def compute_metrics(trades, initial_capital=0.0):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except OptionError:
                raise
            except Exception as e:
                _log_fallback(func, e, args, kwargs)
                return default_factory()

        return wrapper

    return decorator


def _log_fallback(func: Callable, error: Exception, args: tuple, kwargs: dict) -> None:
    logger.opt(exception=error).error(
        f"{func.__module__}.{func.__name__} failed ({type(error).__name__}: {error}); "
        f"returning default result. Arguments:\n{_format_args(args, kwargs)}"
    )


def _log_error_details(func: Callable, error: Exception, args: tuple, kwargs: dict, log_file: str | Path):
    """Append one error block to ``log_file`` and log the stack trace."""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    rule = '=' * 100
    log_entry = "\n".join([
        "",
        rule,
        f"TIMESTAMP:  {datetime.now():%Y-%m-%d %H:%M:%S}",
        f"FUNCTION:   {func.__module__}.{func.__name__}",
        f"ERROR:      {type(error).__name__}: {error}",
        "ARGUMENTS:",
        _format_args(args, kwargs),
        rule,
        "",
    ])

    logger.opt(exception=error).error(f"{func.__name__} failed: {error}")

    try:
        with open(log_path, 'a', encoding='utf-8') as f:
            f.write(log_entry)
    except OSError as log_error:
        logger.warning(f"Failed to write to error log {log_path}: {log_error}")


SENSITIVE_KEYS = ('password', 'token', 'secret', 'api_key')


def _format_args(args: tuple, kwargs: dict) -> str:
    """One line per argument; sensitive keyword values are redacted."""
    lines = [f"  arg[{i}]: {_describe_value(arg)}" for i, arg in enumerate(args)]
    for key, value in kwargs.items():
        shown = "***REDACTED***" if any(s in key.lower() for s in SENSITIVE_KEYS) else _describe_value(value)
        lines.append(f"  {key}: {shown}")
    return '\n'.join(lines) or "  (no arguments)"


def _describe_value(value: Any, max_length: int = 200) -> str:
    """
    Short description of an argument.

    Trade frames and long trade lists are summarized by size and time span
    instead of being dumped; services show their store path.
    """
    if isinstance(value, pd.DataFrame):
        if 'timestamp' in value.columns and not value.empty:
            return (f"<DataFrame {len(value)} trades, "
                    f"{value['timestamp'].min()} .. {value['timestamp'].max()}>")
        return f"<DataFrame shape={value.shape}>"

    if isinstance(value, (list, tuple)) and len(value) > 10:
        return f"<{type(value).__name__} of {len(value)} trade records>"

    if isinstance(value, dict) and len(value) > 10:
        return f"<dict with {len(value)} keys: {list(value)[:3]}...>"

    store_path = getattr(value, 'store_path', None)
    if store_path is not None:
        return f"<{type(value).__name__} store={store_path}>"

    text = repr(value) if isinstance(value, (str, list, tuple, dict)) else str(value)
    if len(text) > max_length:
        return f"{text[:max_length]}... (truncated, {len(text)} chars)"
    return text

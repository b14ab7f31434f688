import asyncio
import inspect
import time
import logging
from functools import wraps

logger = logging.getLogger(__name__)


def retry(times: int = 3, delay: float = 3):
    """
    Retry decorator for collaborator calls.

    Works on plain functions and on coroutine functions; the async
    variant waits with asyncio.sleep so the event loop keeps running.

    Args:
        times (int): Number of attempts
        delay (float): Delay in seconds between attempts
    """
    times = max(1, int(times))

    def _log_attempt(func, attempt):
        logger.debug("Attempt %s/%s for %s", attempt, times, func.__name__)

    def _log_failure(func, attempt, exc):
        logger.warning(
            "Error on attempt %s for %s: %s",
            attempt,
            func.__name__,
            exc,
        )

    def _log_exhausted(func):
        logger.error("All %s attempts failed for %s", times, func.__name__)

    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                last_exception = None
                for attempt in range(1, times + 1):
                    try:
                        _log_attempt(func, attempt)
                        return await func(*args, **kwargs)
                    except Exception as exc:
                        last_exception = exc
                        _log_failure(func, attempt, exc)
                        if attempt < times and delay:
                            await asyncio.sleep(delay)

                _log_exhausted(func)
                raise last_exception

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None
            for attempt in range(1, times + 1):
                try:
                    _log_attempt(func, attempt)
                    return func(*args, **kwargs)
                except Exception as exc:
                    last_exception = exc
                    _log_failure(func, attempt, exc)
                    if attempt < times and delay:
                        time.sleep(delay)

            _log_exhausted(func)
            raise last_exception

        return wrapper

    return decorator

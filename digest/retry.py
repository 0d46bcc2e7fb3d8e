"""Exponential backoff retry decorator."""

import functools
import time

from .errors import RateLimitError, TransportError
from .log import get_logger


def with_retry(max_retries: int = 3, base_delay: float = 2.0, retry_on=(Exception,), give_up_on=()):
    """Decorator: retry with exponential backoff on exception.

    Delays: base_delay * 2^attempt (2s -> 4s -> 8s by default).
    Only exceptions matching ``retry_on`` are retried; anything matching
    ``give_up_on`` is re-raised on the spot even if it also matches ``retry_on``.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            last_exc = None
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except give_up_on:
                    raise
                except retry_on as e:
                    last_exc = e
                    if attempt < max_retries:
                        delay = base_delay * (2 ** attempt)
                        logger.warning(
                            "%s failed (attempt %d/%d): %s — retrying in %.1fs",
                            func.__name__, attempt + 1, max_retries + 1, e, delay
                        )
                        time.sleep(delay)
                    else:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            func.__name__, max_retries + 1, e
                        )
            raise last_exc
        return wrapper
    return decorator


def retry_transport(max_retries: int = 2, base_delay: float = 2.0):
    """Retry network failures only; rate limits and bad payloads surface immediately."""
    return with_retry(
        max_retries=max_retries,
        base_delay=base_delay,
        retry_on=(TransportError,),
        give_up_on=(RateLimitError,),
    )

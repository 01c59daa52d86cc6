import logging
import time
from typing import Any, Callable

import httpx

_log = logging.getLogger(__name__)


def call_with_retry(
    fn: Callable[..., Any],
    *args: Any,
    retry_on: tuple[type[BaseException], ...] = (httpx.TransportError,),
    max_retries: int = 4,
    **kwargs: Any,
) -> Any:
    """Call an API function with exponential backoff on the ``retry_on`` errors.

    Waits 5, 10, 20 seconds between attempts and re-raises after the last one.
    """
    for attempt in range(max_retries):
        try:
            return fn(*args, **kwargs)
        except retry_on as exc:
            if attempt == max_retries - 1:
                raise
            wait = 5 * (2 ** attempt)
            _log.warning("%s failed (%s); retrying in %ds", getattr(fn, "__name__", "call"), exc, wait)
            time.sleep(wait)

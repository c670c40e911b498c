"""Retry with exponential backoff and jitter.

The engine knows nothing about HTTP. Callers compose it with the client by
passing one of the predicates below, for example::

    await retry_with_backoff(
        lambda: client.get("/lists"),
        should_retry=should_retry_mailchimp_auth,
    )
"""

import asyncio
import contextlib
import dataclasses
import logging
import math
import random
import time
from collections.abc import Awaitable, Mapping
from typing import Any, Callable, TypeVar, Union

from .constants import MAILCHIMP_RETRYABLE_STATUSES
from .types import RetryOptions

T = TypeVar("T")

SERVER_ERROR_MIN_STATUS = 500

logger = logging.getLogger("chimpfetch.retry")


def _resolve_options(options: Union[RetryOptions, None], overrides: dict) -> RetryOptions:
    base = options if options is not None else RetryOptions()
    return dataclasses.replace(base, **overrides) if overrides else base


def calculate_delay(attempt: int, options: RetryOptions, rand: Callable[[], float] = random.random) -> int:
    """Delay in ms before retry number `attempt` (1-based).

    min(initial * multiplier ** (attempt - 1), max) plus up to jitter_factor of that.
    """
    exponential = options.initial_delay_ms * math.pow(options.backoff_multiplier, attempt - 1)
    capped = min(exponential, options.max_delay_ms)
    jitter = rand() * capped * options.jitter_factor
    return int(math.floor(capped + jitter))


def _next_delay(error: BaseException, attempt: int, options: RetryOptions) -> Union[int, None]:
    """Return the backoff for another attempt, or None when the caller must re-raise."""
    if attempt >= options.max_attempts:
        return None
    if not options.should_retry(error, attempt):
        return None
    delay_ms = calculate_delay(attempt, options)
    with contextlib.suppress(Exception):
        logger.warning(
            f"attempt {attempt}/{options.max_attempts} failed ({type(error).__name__}: {error}); "
            f"retrying in {delay_ms}ms"
        )
    options.on_retry(error, attempt, delay_ms)
    return delay_ms


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    options: Union[RetryOptions, None] = None,
    **overrides: Any,
) -> T:
    """Await `operation()` until it succeeds, retrying failures per `options`.

    Keyword overrides are applied on top of `options` (or the defaults). The
    last exception is re-raised as-is once retries run out or `should_retry`
    declines. Cancelling the caller during a backoff sleep stops immediately.
    """
    config = _resolve_options(options, overrides)
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as error:
            delay_ms = _next_delay(error, attempt, config)
            if delay_ms is None:
                raise
        await asyncio.sleep(delay_ms / 1000)
        attempt += 1


def retry_with_backoff_sync(
    operation: Callable[[], T],
    options: Union[RetryOptions, None] = None,
    **overrides: Any,
) -> T:
    """Blocking twin of retry_with_backoff for plain callables."""
    config = _resolve_options(options, overrides)
    attempt = 1
    while True:
        try:
            return operation()
        except Exception as error:
            delay_ms = _next_delay(error, attempt, config)
            if delay_ms is None:
                raise
        time.sleep(delay_ms / 1000)
        attempt += 1


# ---------- predicates ----------


def _status_of(error: object) -> Union[int, None]:
    try:
        if isinstance(error, Mapping):
            status = error.get("status")
        else:
            status = getattr(error, "status", None)
    except Exception:
        return None
    # bool is an int subclass but never a status code
    if isinstance(status, int) and not isinstance(status, bool):
        return status
    return None


def has_status_code(error: object) -> bool:
    """True when `error` carries an integer `status` (attribute or mapping key)."""
    return _status_of(error) is not None


def should_retry_server_errors(error: object, attempt: Union[int, None] = None) -> bool:
    """Retry network failures (no status) and 5xx; never 4xx."""
    status = _status_of(error)
    if status is None:
        return True
    return status >= SERVER_ERROR_MIN_STATUS


def should_retry_mailchimp_auth(error: object, attempt: Union[int, None] = None) -> bool:
    """Retry network failures, 429 and the transient 5xx family; never 400/401/403/404."""
    status = _status_of(error)
    if status is None:
        return True
    return status in MAILCHIMP_RETRYABLE_STATUSES

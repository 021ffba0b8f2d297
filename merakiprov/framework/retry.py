"""Retry helpers for eventually-consistent Dashboard operations."""

from __future__ import annotations

import time
from typing import Any, Callable, TypeVar

from loguru import logger

from merakiprov.exceptions import APIError, NotFoundError

T = TypeVar("T")


def delete_with_polling(
    call: Callable[[], Any],
    attempts: int = 100,
    initial_wait: float = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Repeat a delete until the API answers 204 No Content.

    ``call`` returns the ``requests.Response`` of one delete attempt. Between
    attempts the helper sleeps ``wait`` seconds, growing ``wait`` by one
    second each time. A 404 means the object is already gone and counts as
    deleted; other errors raised by ``call`` count as failed attempts.

    Returns:
        True once a 204 (or 404) is seen, False when every attempt failed.
    """
    wait = initial_wait
    for attempt in range(1, attempts + 1):
        status: int | None
        try:
            response = call()
            status = getattr(response, "status_code", None)
        except NotFoundError:
            logger.debug(f"delete attempt {attempt}/{attempts}: object already gone")
            return True
        except APIError as e:
            status = e.status_code
            logger.debug(f"delete attempt {attempt}/{attempts} failed: {e}")
        if status == 204:
            return True
        if attempt < attempts:
            logger.debug(f"delete returned {status}, retrying in {wait}s")
            sleep(wait)
            wait += 1
    return False


def retry_on_4xx(
    call: Callable[[], T],
    max_retries: int = 3,
    delay: float = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Retry ``call`` while it fails with an HTTP error status.

    The Dashboard backend occasionally answers 4xx while a just-created object
    propagates. The delay doubles after every attempt; once ``max_retries``
    retries are used up the last ``APIError`` is re-raised.
    """
    for attempt in range(max_retries + 1):
        try:
            return call()
        except APIError as e:
            if e.status_code is None or not 400 <= e.status_code < 600 or attempt == max_retries:
                raise
            logger.debug(f"request failed with {e.status_code}, retry {attempt + 1}/{max_retries} in {delay}s")
            sleep(delay)
            delay *= 2
    raise AssertionError("unreachable")

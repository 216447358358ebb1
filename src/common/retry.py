from __future__ import annotations

import random
import time
from typing import Mapping, Optional, Sequence

import requests

TRANSIENT_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)


def _backoff_seconds(attempt: int, *, backoff_base: float, backoff_max: float) -> float:
    # Exponential backoff with jitter
    base = backoff_base * (2 ** max(0, attempt - 1))
    return min(backoff_max, base + random.uniform(0, backoff_base))


def _retry_after_seconds(resp: requests.Response) -> Optional[float]:
    value = resp.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def http_get_with_retries(
    url: str,
    *,
    params: Optional[Mapping[str, str | int]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: int = 60,
    max_attempts: int = 4,
    backoff_base: float = 0.5,
    backoff_max: float = 8.0,
    status_forcelist: Sequence[int] = (429, 500, 502, 503, 504),
    sleep=time.sleep,
) -> requests.Response:
    """
    GET a URL, retrying transient failures.

    Connection errors, timeouts and statuses in `status_forcelist` are
    retried with exponential backoff (or `Retry-After` when the server
    sends one). The last response is returned as-is once attempts run
    out, so callers still call raise_for_status(). Any other exception
    propagates immediately.
    """
    last_exc: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            resp = requests.get(url, params=params, headers=headers, timeout=timeout)
        except TRANSIENT_EXCEPTIONS as exc:
            last_exc = exc
            if attempt >= max_attempts:
                break
            sleep(_backoff_seconds(attempt, backoff_base=backoff_base, backoff_max=backoff_max))
            continue

        if resp.status_code in status_forcelist and attempt < max_attempts:
            delay = _retry_after_seconds(resp)
            if delay is None:
                delay = _backoff_seconds(attempt, backoff_base=backoff_base, backoff_max=backoff_max)
            sleep(min(delay, backoff_max))
            continue
        return resp

    assert last_exc is not None
    raise last_exc


def download_bytes(url: str, **kwargs) -> bytes:
    """GET `url` with retries and return the body, raising on HTTP errors."""
    resp = http_get_with_retries(url, **kwargs)
    resp.raise_for_status()
    return resp.content


__all__ = ["http_get_with_retries", "download_bytes"]

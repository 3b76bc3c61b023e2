"""Loading of the geometry and observation datasets (local files or http)."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Union

import requests

from ..errors import DataLoadFailure

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 20  # seconds

Source = Union[str, Path]

_TRANSIENT = (requests.ConnectionError, requests.Timeout)


def download(
    url: str,
    timeout: float = _DEFAULT_TIMEOUT,
    attempts: int = 3,
    backoff: float = 2.0,
) -> str:
    """Download one dataset and return its body as text.

    Dropped connections, timeouts and 5xx answers are tried again after
    ``backoff * n`` seconds; a 4xx answer raises ``requests.HTTPError``
    on the spot.
    """
    error: Optional[requests.RequestException] = None
    for n in range(1, attempts + 1):
        try:
            resp = requests.get(url, timeout=timeout)
        except _TRANSIENT as exc:
            error = exc
        else:
            if resp.status_code < 500:
                resp.raise_for_status()
                log.debug("Downloaded %s (%d bytes)", url, len(resp.text))
                return resp.text
            error = requests.HTTPError(
                f"{url} answered HTTP {resp.status_code}", response=resp,
            )

        log.warning("Download of %s failed (%d/%d): %s", url, n, attempts, error)
        if n < attempts:
            time.sleep(backoff * n)

    raise error


def is_url(source: Source) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def read_text(source: Source, timeout: float = _DEFAULT_TIMEOUT) -> str:
    """Read a whole dataset from a local path or an http(s) URL."""
    try:
        if is_url(source):
            return download(str(source), timeout=timeout)
        return Path(source).read_text(encoding="utf-8")
    except (OSError, requests.RequestException) as exc:
        raise DataLoadFailure(str(source), str(exc)) from exc

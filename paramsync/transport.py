"""
HTTP side of a save: one JSON POST, and the result types a save resolves to.

A save always ends in exactly one of:
  - Saved        the server answered with a 2xx status
  - Rejected     the server answered with any other status
  - Unreachable  no response at all (DNS, refused connection, TLS, timeout)
"""
from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Callable, Optional, Union

import config

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    status: int
    reason: str = ""
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class Saved:
    def message(self) -> str:
        return config.SAVED_MESSAGE


@dataclass
class Rejected:
    status: int
    reason: str
    body: str

    def message(self) -> str:
        return f"{config.FAILED_PREFIX} {self.status} {self.reason} {self.body}"


@dataclass
class Unreachable:
    error: str

    def message(self) -> str:
        return f"{config.FAILED_PREFIX} no response ({self.error})"


SaveResult = Union[Saved, Rejected, Unreachable]

# (url, payload) -> HttpResponse; raises OSError when there is no response
Transport = Callable[[str, dict], HttpResponse]


def post_json(url: str, payload: dict, timeout: Optional[float] = config.SAVE_TIMEOUT_S) -> HttpResponse:
    """POST `payload` as JSON. Non-2xx statuses are returned, not raised."""
    data = json.dumps(payload).encode("utf-8")
    request = urllib.request.Request(url, data=data, method="POST")
    request.add_header("Content-Type", "application/json")

    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read().decode("utf-8", errors="replace")
            return HttpResponse(response.status, response.reason or "", body)
    except urllib.error.HTTPError as e:
        try:
            body = e.read().decode("utf-8", errors="replace")
        finally:
            e.close()
        return HttpResponse(e.code, str(e.reason or ""), body)


def run_save(transport: Transport, url: str, payload: dict) -> SaveResult:
    """Send one save and fold every possible outcome into a SaveResult."""
    logger.debug(f"POST {url} ({len(payload.get('params', {}))} params)")
    try:
        response = transport(url, payload)
    except Exception as e:
        # urllib wraps most network failures in URLError (an OSError)
        reason = getattr(e, "reason", None) or e
        logger.warning(f"Save to {url} got no response: {reason}")
        return Unreachable(str(reason))

    if response.ok:
        logger.info(f"Save to {url} succeeded ({response.status})")
        return Saved()

    logger.warning(f"Save to {url} rejected: {response.status} {response.reason}")
    return Rejected(response.status, response.reason, response.body)

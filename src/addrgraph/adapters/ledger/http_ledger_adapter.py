from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import requests
import structlog

from addrgraph.adapters.ledger.rate_limiter import RateLimiter
from addrgraph.config.settings import LEDGER_TIMEOUT_SEC
from addrgraph.core.errors import LedgerTimeoutError, UpstreamError
from addrgraph.ports.ledger_port import LedgerPort

logger = structlog.get_logger(__name__)


class HttpLedgerAdapter(LedgerPort):
    """
    Shared request path for JSON ledger APIs: rate limit, GET, decode.
    Subclasses build the URL and normalize the payload.
    """

    provider = "http"

    def __init__(
        self,
        rate_limiter: RateLimiter,
        base_url: str,
        page_size: int,
        timeout_sec: float = LEDGER_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._rl = rate_limiter
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size
        self._timeout = timeout_sec
        self._session = session or requests.Session()

    @property
    def page_size(self) -> int:
        return self._page_size

    # ---------- internal ----------

    async def _call(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        await self._rl.acquire()

        log = logger.bind(provider=self.provider, url=url)
        log.debug("ledger_request", params=params)
        try:
            resp = await asyncio.wait_for(
                asyncio.to_thread(self._session.get, url, params=params, timeout=self._timeout),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, requests.Timeout) as e:
            log.warning("ledger_timeout", timeout_sec=self._timeout)
            raise LedgerTimeoutError(f"No response from {self.provider} within {self._timeout:g}s") from e
        except requests.RequestException as e:
            log.warning("ledger_network_error", error=str(e))
            raise UpstreamError(f"{self.provider} request failed: {e}") from e

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            log.warning("ledger_bad_status", status=resp.status_code)
            raise UpstreamError(f"{self.provider} returned HTTP {resp.status_code}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(f"{self.provider} returned malformed JSON") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Invalid {self.provider} response: expected object, got {type(data).__name__}")
        return data

    @staticmethod
    def _int(val: Any, default: int = 0) -> int:
        if val is None:
            return default
        try:
            return int(val)
        except (TypeError, ValueError) as e:
            raise UpstreamError(f"Expected integer, got {val!r}") from e

    @classmethod
    def _opt_int(cls, val: Any) -> Optional[int]:
        return None if val is None else cls._int(val)

    @staticmethod
    def _list(data: Dict[str, Any], key: str) -> list:
        res = data.get(key)
        if res is None:
            return []
        if not isinstance(res, list):
            raise UpstreamError(f"Expected list under {key!r}, got {type(res).__name__}")
        return res

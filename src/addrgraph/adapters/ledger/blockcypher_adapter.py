from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

import requests

from addrgraph.adapters.ledger.http_ledger_adapter import HttpLedgerAdapter
from addrgraph.adapters.ledger.rate_limiter import RateLimiter
from addrgraph.config.settings import (
    BLOCKCYPHER_BASE_URL,
    BLOCKCYPHER_PAGE_SIZE,
    BLOCKCYPHER_TOKEN,
    LEDGER_TIMEOUT_SEC,
)
from addrgraph.core.dto import AddressSummary, Transaction, TransactionInput, TransactionOutput
from addrgraph.core.errors import UpstreamError


class BlockCypherAdapter(HttpLedgerAdapter):
    """
    BlockCypher `addrs/{address}/full` endpoint.

    BlockCypher pages by block height (`before=`), not by offset, so an
    offset is emulated: request `page_size + offset` transactions and keep
    the slice `[offset, offset + page_size)`.
    """

    provider = "blockcypher"

    def __init__(
        self,
        rate_limiter: RateLimiter,
        base_url: str = BLOCKCYPHER_BASE_URL,
        page_size: int = BLOCKCYPHER_PAGE_SIZE,
        timeout_sec: float = LEDGER_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
        token: Optional[str] = BLOCKCYPHER_TOKEN,
    ) -> None:
        super().__init__(rate_limiter, base_url, page_size, timeout_sec, session)
        self._token = token

    async def fetch_address_summary(self, address: str, page_offset: int = 0) -> AddressSummary:
        offset = max(0, int(page_offset))
        params: Dict[str, Any] = {"limit": self._page_size + offset}
        if self._token:
            params["token"] = self._token

        data = await self._call(f"{self._base_url}/{address}/full", params=params)
        try:
            raw_txs = self._list(data, "txs")[offset:offset + self._page_size]
            txs = [self._to_transaction(address, t) for t in raw_txs]
            return AddressSummary(
                address=data.get("address") or address,
                transaction_count=self._int(data.get("n_tx"), len(txs)),
                total_received=self._int(data.get("total_received")),
                total_sent=self._int(data.get("total_sent")),
                final_balance=self._int(data.get("balance")),
                transactions=txs,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Unexpected {self.provider} response shape: {e}") from e

    def _to_transaction(self, address: str, raw: Dict[str, Any]) -> Transaction:
        raw_inputs = raw.get("inputs") or []
        raw_outputs = raw.get("outputs") or []

        inputs = [
            TransactionInput(address=self._first(self._addresses(i)), value=self._opt_int(i.get("output_value")))
            for i in raw_inputs
        ]
        outputs = [
            TransactionOutput(address=self._first(self._addresses(o)), value=self._opt_int(o.get("value")))
            for o in raw_outputs
        ]

        # multisig outputs list several addresses; the subject counts if it is any of them
        received = sum(self._int(o.get("value")) for o in raw_outputs if address in self._addresses(o))
        spent = sum(self._int(i.get("output_value")) for i in raw_inputs if address in self._addresses(i))

        return Transaction(
            hash=raw["hash"],
            inputs=inputs,
            outputs=outputs,
            net_result=received - spent,
            time=self._confirmed_ts(raw.get("confirmed")),
        )

    @staticmethod
    def _addresses(entry: Dict[str, Any]) -> List[str]:
        addresses = entry.get("addresses")
        if addresses is None:
            return []
        if not isinstance(addresses, list):
            raise UpstreamError(f"Expected list of addresses, got {type(addresses).__name__}")
        return addresses

    @staticmethod
    def _first(addresses: List[str]) -> Optional[str]:
        return addresses[0] if addresses else None

    @staticmethod
    def _confirmed_ts(confirmed: Optional[str]) -> Optional[int]:
        # unconfirmed transactions carry no `confirmed` field
        if not confirmed:
            return None
        try:
            parsed = dt.datetime.fromisoformat(str(confirmed).replace("Z", "+00:00"))
        except ValueError as e:
            raise UpstreamError(f"Invalid confirmation time: {confirmed!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=dt.timezone.utc)
        return int(parsed.timestamp())

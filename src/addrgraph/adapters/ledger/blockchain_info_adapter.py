from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from addrgraph.adapters.ledger.http_ledger_adapter import HttpLedgerAdapter
from addrgraph.adapters.ledger.rate_limiter import RateLimiter
from addrgraph.config.settings import (
    BLOCKCHAIN_INFO_BASE_URL,
    BLOCKCHAIN_INFO_PAGE_SIZE,
    LEDGER_TIMEOUT_SEC,
)
from addrgraph.core.dto import (
    AddressSummary,
    Transaction,
    TransactionInput,
    TransactionOutput,
    net_result_for,
)
from addrgraph.core.errors import UpstreamError


class BlockchainInfoAdapter(HttpLedgerAdapter):
    """
    Blockchain.com `rawaddr` endpoint; supports limit/offset paging natively.
    """

    provider = "blockchain.info"

    def __init__(
        self,
        rate_limiter: RateLimiter,
        base_url: str = BLOCKCHAIN_INFO_BASE_URL,
        page_size: int = BLOCKCHAIN_INFO_PAGE_SIZE,
        timeout_sec: float = LEDGER_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(rate_limiter, base_url, page_size, timeout_sec, session)

    async def fetch_address_summary(self, address: str, page_offset: int = 0) -> AddressSummary:
        data = await self._call(
            f"{self._base_url}/rawaddr/{address}",
            params={"limit": self._page_size, "offset": int(page_offset), "cors": "true"},
        )
        try:
            txs = [self._to_transaction(address, t) for t in self._list(data, "txs")]
            return AddressSummary(
                address=data.get("address") or address,
                transaction_count=self._int(data.get("n_tx"), len(txs)),
                total_received=self._int(data.get("total_received")),
                total_sent=self._int(data.get("total_sent")),
                final_balance=self._int(data.get("final_balance")),
                transactions=txs,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Unexpected {self.provider} response shape: {e}") from e

    def _to_transaction(self, address: str, raw: Dict[str, Any]) -> Transaction:
        inputs: List[TransactionInput] = []
        for i in raw.get("inputs") or []:
            prev = i.get("prev_out") or {}
            inputs.append(TransactionInput(address=prev.get("addr"), value=self._opt_int(prev.get("value"))))

        outputs = [
            TransactionOutput(address=o.get("addr"), value=self._opt_int(o.get("value")))
            for o in raw.get("out") or []
        ]

        # the API's `result` field is ignored, net is always taken relative to `address`
        ts = self._opt_int(raw.get("time"))
        confirmed = raw.get("block_height", 0) is not None
        return Transaction(
            hash=raw["hash"],
            inputs=inputs,
            outputs=outputs,
            net_result=net_result_for(address, inputs, outputs),
            time=ts if ts and confirmed else None,
        )
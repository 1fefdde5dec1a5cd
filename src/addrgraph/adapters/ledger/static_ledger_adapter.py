from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Tuple

from addrgraph.adapters.ledger.rate_limiter import RateLimiter
from addrgraph.core.dto import AddressSummary, Transaction, net_result_for
from addrgraph.ports.ledger_port import LedgerPort


class StaticLedgerAdapter(LedgerPort):
    """
    In-memory ledger for dev/testing. Transactions are shared across all
    addresses; each fetch returns those touching the address, newest first.
    """

    def __init__(self,
                 rate_limiter: RateLimiter,
                 transactions: Optional[List[Transaction]] = None,
                 page_size: int = 10,
                 ):
        self._txs = list(transactions or [])
        self._page_size = page_size
        self._rl = rate_limiter
        self.calls: List[Tuple[str, int]] = []

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch_address_summary(self, address, page_offset=0):
        await self._rl.acquire()
        self.calls.append((address, page_offset))

        touching = [
            t for t in self._txs
            if any(i.address == address for i in t.inputs)
            or any(o.address == address for o in t.outputs)
        ]
        touching.sort(key=lambda t: (t.time is None, t.time or 0), reverse=True)

        received = sent = 0
        for t in touching:
            received += sum(o.value or 0 for o in t.outputs if o.address == address)
            sent += sum(i.value or 0 for i in t.inputs if i.address == address)

        page = touching[page_offset:page_offset + self._page_size]
        return AddressSummary(
            address=address,
            transaction_count=len(touching),
            total_received=received,
            total_sent=sent,
            final_balance=received - sent,
            transactions=[replace(t, net_result=net_result_for(address, t.inputs, t.outputs)) for t in page],
        )

from __future__ import annotations

from addrgraph.adapters.ledger.blockchain_info_adapter import BlockchainInfoAdapter
from addrgraph.adapters.ledger.blockcypher_adapter import BlockCypherAdapter
from addrgraph.adapters.ledger.http_ledger_adapter import HttpLedgerAdapter
from addrgraph.adapters.ledger.rate_limiter import RateLimiter
from addrgraph.config.settings import LEDGER_MIN_INTERVAL_SEC


PROVIDERS = {
    "blockchain_info": BlockchainInfoAdapter,
    "blockcypher": BlockCypherAdapter,
}


def make_ledger(provider: str, rate_limiter: RateLimiter | None = None) -> HttpLedgerAdapter:
    key = provider.lower().replace(".", "_").replace("-", "_")
    try:
        cls = PROVIDERS[key]
    except KeyError:
        raise ValueError(
            f"Unknown ledger provider {provider!r}; expected one of {', '.join(sorted(PROVIDERS))}"
        ) from None
    return cls(rate_limiter or RateLimiter(LEDGER_MIN_INTERVAL_SEC))

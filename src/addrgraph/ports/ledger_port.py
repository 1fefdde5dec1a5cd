from __future__ import annotations

from abc import ABC, abstractmethod

from addrgraph.core.dto import AddressSummary


class LedgerPort(ABC):
    """
    Abstract Class for fetching one page of an address's transaction history.
    """

    # --- fixed number of transactions per page ---

    @property
    @abstractmethod
    def page_size(self) -> int:
        raise NotImplementedError

    # --- one page, starting at an opaque caller-supplied offset ---

    @abstractmethod
    async def fetch_address_summary(self, address: str, page_offset: int = 0) -> AddressSummary:
        raise NotImplementedError

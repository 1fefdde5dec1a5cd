from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import structlog

from addrgraph.core.dto import AddressSummary
from addrgraph.core.errors import ExplorerError
from addrgraph.core.models import AddressState, AddressStatus, GraphSnapshot, NodeStats
from addrgraph.core.validation import validate_address
from addrgraph.ports.ledger_port import LedgerPort
from addrgraph.services.graph_builder import build_graph
from addrgraph.services.graph_store import GraphStore

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[str, Dict[str, Any]], None]


class ExplorationService:
    """
    Incremental exploration of an address neighbourhood.

    Every address moves through UNSEEN -> LOADING -> LOADED | ERRORED.
    ERRORED can be retried at the offset that failed; LOADED only goes back
    to LOADING to fetch the next page. A failed fetch never touches the
    graph.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        store: Optional[GraphStore] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.ledger = ledger
        self.store = store or GraphStore()
        self._on_progress = on_progress
        self._states: Dict[str, AddressState] = {}
        self._summaries: Dict[str, AddressSummary] = {}
        self._root: Optional[str] = None
        # bumped on every new root so late results from the old one are dropped
        self._generation = 0

    # ---------- queries ----------

    @property
    def root(self) -> Optional[str]:
        return self._root

    @property
    def snapshot(self) -> GraphSnapshot:
        return self.store.snapshot

    def state(self, address: str) -> AddressState:
        return self._states.get(address) or AddressState(address=address)

    def status(self, address: str) -> AddressStatus:
        return self.state(address).status

    def summary(self, address: str) -> Optional[AddressSummary]:
        return self._summaries.get(address)

    def has_more(self, address: str) -> bool:
        summary = self._summaries.get(address)
        nxt = self.store.next_offset(address)
        if summary is None or nxt is None:
            return False
        return nxt < summary.transaction_count

    def stats_for(self, address: str) -> NodeStats:
        return self.store.stats_for(address)

    def errored(self) -> List[AddressState]:
        return [s for s in self._states.values() if s.status == AddressStatus.ERRORED]

    # ---------- operations ----------

    async def set_root_address(self, address: str) -> AddressState:
        addr = validate_address(address)

        self._generation += 1
        self.store.reset()
        self._states.clear()
        self._summaries.clear()
        self._root = addr

        logger.info("root_address_set", address=addr)
        self._emit("start", {"address": addr})
        return await self._run_pipeline(addr, 0)

    async def expand_node(self, address: str) -> AddressState:
        current = self.state(address)
        if current.status == AddressStatus.LOADING or self.store.has_been_expanded(address):
            logger.debug("expand_skipped", address=address, status=current.status.value)
            return current
        return await self._run_pipeline(address, 0)

    async def load_more(self, address: str) -> AddressState:
        current = self.state(address)
        if not self.store.has_been_expanded(address) or current.status == AddressStatus.LOADING:
            logger.debug("load_more_skipped", address=address, status=current.status.value)
            return current
        return await self._run_pipeline(address, self.store.next_offset(address) or 0)

    async def retry(self, address: str) -> AddressState:
        current = self.state(address)
        if current.status != AddressStatus.ERRORED:
            return current
        return await self._run_pipeline(address, current.failed_offset or 0)

    # -------------------------
    # Fetch pipeline
    # -------------------------

    async def _run_pipeline(self, address: str, offset: int) -> AddressState:
        generation = self._generation
        previous = self._states.get(address)
        state = AddressState(
            address=address,
            status=AddressStatus.LOADING,
            pages_loaded=previous.pages_loaded if previous else 0,
        )
        self._states[address] = state

        log = logger.bind(address=address, offset=offset)
        log.info("fetch_started")
        self._emit("fetch", {"address": address, "offset": offset})

        try:
            summary = await self.ledger.fetch_address_summary(address, offset)
            fragment = build_graph(address, summary.transactions)
        except ExplorerError as e:
            return self._fail(state, offset, e, generation)
        except Exception as e:
            self._fail(state, offset, e, generation)
            raise

        if generation != self._generation:
            log.info("fetch_discarded_stale_root")
            return state

        merged = self.store.merge(fragment)
        if offset == 0:
            self.store.mark_expanded(address)
        self.store.advance_offset(address, self.ledger.page_size)
        self._summaries[address] = summary

        state.status = AddressStatus.LOADED
        state.pages_loaded += 1
        log.info("fetch_done", transactions=len(summary.transactions), edges=len(fragment.edges))
        self._emit("fetch_done", {
            "address": address,
            "offset": offset,
            "count": len(summary.transactions),
            "nodes": len(merged.nodes),
            "edges": len(merged.edges),
        })
        return state

    def _fail(self, state: AddressState, offset: int, exc: Exception, generation: int) -> AddressState:
        if generation != self._generation:
            return state
        state.status = AddressStatus.ERRORED
        state.failed_offset = offset
        state.error = f"{exc.__class__.__name__}: {exc}"
        logger.warning("fetch_failed", address=state.address, offset=offset, error=state.error)
        self._emit("error", {"address": state.address, "offset": offset, "message": state.error})
        return state

    def _emit(self, event: str, data: Dict[str, Any]) -> None:
        if self._on_progress is not None:
            self._on_progress(event, data)

from __future__ import annotations

from typing import List, Optional, Set

import structlog

from addrgraph.core.models import ExpansionState, GraphSnapshot, NodeStats

logger = structlog.get_logger(__name__)


def merge_snapshots(current: GraphSnapshot, incoming: GraphSnapshot) -> GraphSnapshot:
    """
    Keyed union of two snapshots. First occurrence of a node id or edge key
    wins; later duplicates are dropped, never used to update attributes.
    Neither argument is modified.
    """
    merged = current.copy()
    for node in incoming.nodes.values():
        merged.add_node(node)
    for edge in incoming.edges.values():
        merged.add_edge(edge)
    return merged


def node_stats(address: str, graph: GraphSnapshot) -> NodeStats:
    incoming = outgoing = total = 0
    neighbors: Set[str] = set()
    for e in graph.edges.values():
        if e.source != address and e.target != address:
            continue
        total += 1
        if e.target == address:
            incoming += 1
            neighbors.add(e.source)
        if e.source == address:
            outgoing += 1
            neighbors.add(e.target)
    return NodeStats(
        address=address,
        total_edges=total,
        neighbor_count=len(neighbors),
        incoming_count=incoming,
        outgoing_count=outgoing,
        neighbors=sorted(neighbors),
    )


class GraphStore:
    """
    Owns the running graph and the per-address pagination state. Only
    `merge`, `mark_expanded` and `advance_offset` change either of them.
    """

    def __init__(self) -> None:
        self._graph = GraphSnapshot()
        self._expansion = ExpansionState()

    @property
    def snapshot(self) -> GraphSnapshot:
        return self._graph.copy()

    def reset(self) -> None:
        self._graph = GraphSnapshot()
        self._expansion.clear()

    def merge(self, incoming: GraphSnapshot) -> GraphSnapshot:
        before_nodes, before_edges = len(self._graph.nodes), len(self._graph.edges)
        # swap in one assignment; readers see either the old or the new graph
        self._graph = merge_snapshots(self._graph, incoming)
        logger.debug(
            "graph_merged",
            new_nodes=len(self._graph.nodes) - before_nodes,
            new_edges=len(self._graph.edges) - before_edges,
        )
        return self.snapshot

    # ---------- expansion state ----------

    def mark_expanded(self, address: str) -> None:
        self._expansion.expanded.add(address)

    def advance_offset(self, address: str, page_size: int) -> int:
        nxt = self._expansion.next_offset.get(address, 0) + int(page_size)
        self._expansion.next_offset[address] = nxt
        return nxt

    def has_been_expanded(self, address: str) -> bool:
        return address in self._expansion.expanded

    def next_offset(self, address: str) -> Optional[int]:
        return self._expansion.next_offset.get(address)

    @property
    def expanded(self) -> List[str]:
        return sorted(self._expansion.expanded)

    # ---------- derived views ----------

    def stats_for(self, address: str) -> NodeStats:
        return node_stats(address, self._graph)

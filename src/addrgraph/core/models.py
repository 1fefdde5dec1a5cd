from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple


EdgeKey = Tuple[str, str, str]


# Graph models

@dataclass(frozen=True)
class GraphNode:

    id: str
    display_name: str
    weight: float = 3


@dataclass(frozen=True)
class GraphEdge:

    source: str
    target: str

    value: Decimal             # BTC
    tx_hash: str
    direction_color: str

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target, self.tx_hash)


@dataclass
class GraphSnapshot:
    """
    Nodes keyed by address, edges keyed by (source, target, tx_hash).
    """

    nodes: Dict[str, GraphNode] = field(default_factory=dict)
    edges: Dict[EdgeKey, GraphEdge] = field(default_factory=dict)

    def add_node(self, node: GraphNode) -> None:
        self.nodes.setdefault(node.id, node)

    def add_edge(self, edge: GraphEdge) -> None:
        self.edges.setdefault(edge.key, edge)

    def copy(self) -> "GraphSnapshot":
        return GraphSnapshot(nodes=dict(self.nodes), edges=dict(self.edges))


# Expansion / exploration state

@dataclass
class ExpansionState:

    next_offset: Dict[str, int] = field(default_factory=dict)
    expanded: Set[str] = field(default_factory=set)

    def clear(self) -> None:
        self.next_offset.clear()
        self.expanded.clear()


class AddressStatus(str, Enum):
    UNSEEN = "unseen"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass
class AddressState:

    address: str
    status: AddressStatus = AddressStatus.UNSEEN
    pages_loaded: int = 0

    # set while ERRORED: what to retry
    failed_offset: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class NodeStats:

    address: str
    total_edges: int
    neighbor_count: int
    incoming_count: int
    outgoing_count: int
    neighbors: List[str] = field(default_factory=list)

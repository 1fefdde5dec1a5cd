from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List

from addrgraph.config.settings import INCOMING_COLOR, NODE_WEIGHT, OUTGOING_COLOR
from addrgraph.core.dto import Transaction
from addrgraph.core.models import GraphEdge, GraphNode, GraphSnapshot


SATS_PER_BTC = Decimal("100000000")


def build_graph(subject: str, transactions: Iterable[Transaction]) -> GraphSnapshot:
    """
    Turns one page of `subject`'s transactions into a graph fragment.

    - Subject spent in the tx: one outgoing edge per paid output
      (self-change and zero-value outputs skipped), valued per output.
    - Subject only received: one incoming edge per distinct input address,
      each valued at |net_result|. The net amount is not split between
      inputs, so multi-input transactions repeat it on every edge.
    - Anything else contributes nothing.

    The subject is always a node, even with no edges.
    """
    graph = GraphSnapshot()
    _ensure_node(graph, subject)

    for tx in transactions:
        input_addrs = _distinct(i.address for i in tx.inputs)
        output_addrs = _distinct(o.address for o in tx.outputs)

        is_sender = subject in input_addrs
        is_receiver = subject in output_addrs

        if is_sender:
            for out in tx.outputs:
                if not out.address or out.address == subject:
                    continue
                if not out.value or out.value <= 0:
                    continue
                _add_edge(graph, subject, out.address, Decimal(out.value) / SATS_PER_BTC, tx.hash, OUTGOING_COLOR)

        elif is_receiver:
            value = Decimal(abs(tx.net_result)) / SATS_PER_BTC
            for in_addr in input_addrs:
                _add_edge(graph, in_addr, subject, value, tx.hash, INCOMING_COLOR)

    return graph


# -------------------------
# Helpers
# -------------------------

def _distinct(addresses: Iterable[str | None]) -> List[str]:
    out: List[str] = []
    for a in addresses:
        if a and a not in out:
            out.append(a)
    return out


def _ensure_node(graph: GraphSnapshot, address: str) -> None:
    graph.add_node(GraphNode(id=address, display_name=address, weight=NODE_WEIGHT))


def _add_edge(graph: GraphSnapshot, source: str, target: str, value: Decimal, tx_hash: str, color: str) -> None:
    _ensure_node(graph, source)
    _ensure_node(graph, target)
    graph.add_edge(
        GraphEdge(
            source=source,
            target=target,
            value=value,
            tx_hash=tx_hash,
            direction_color=color,
        )
    )

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from addrgraph.core.dto import Transaction, TransactionInput, TransactionOutput
from addrgraph.core.models import GraphSnapshot, NodeStats


def _btc(x: Decimal) -> float:
    # the force-graph widget sizes links from a JS number
    return float(x)


def snapshot_to_dict(g: GraphSnapshot) -> Dict[str, Any]:
    """
    Shape consumed by the force-graph renderer: {nodes, links}.
    """
    return {
        "nodes": [
            {
                "id": n.id,
                "name": n.display_name,
                "val": n.weight,
            }
            for n in g.nodes.values()
        ],
        "links": [
            {
                "source": e.source,
                "target": e.target,
                "value": _btc(e.value),
                "txHash": e.tx_hash,
                "color": e.direction_color,
            }
            for e in g.edges.values()
        ],
    }


def node_stats_to_dict(s: NodeStats) -> Dict[str, Any]:
    return {
        "address": s.address,
        "totalEdges": s.total_edges,
        "neighborCount": s.neighbor_count,
        "incomingCount": s.incoming_count,
        "outgoingCount": s.outgoing_count,
        "neighbors": list(s.neighbors),
    }


def transactions_from_dicts(rows: List[Dict[str, Any]]) -> List[Transaction]:
    """
    Fixture format: [{hash, time?, inputs: [{address?, value?}], outputs: [...]}].
    `net_result` is left at 0; ledgers recompute it per subject.
    """
    return [
        Transaction(
            hash=r["hash"],
            inputs=[TransactionInput(address=i.get("address"), value=i.get("value")) for i in r.get("inputs") or []],
            outputs=[TransactionOutput(address=o.get("address"), value=o.get("value")) for o in r.get("outputs") or []],
            time=r.get("time"),
        )
        for r in rows
    ]

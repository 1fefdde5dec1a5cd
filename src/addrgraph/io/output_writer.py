from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from addrgraph.core.dto import AddressSummary
from addrgraph.core.models import GraphSnapshot
from addrgraph.io.schemas import snapshot_to_dict
from addrgraph.services.graph_builder import SATS_PER_BTC
from addrgraph.services.graph_store import node_stats


def write_graph_json(graph: GraphSnapshot, out_dir: str, filename: str = "graph.json") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(snapshot_to_dict(graph), f, indent=2)

    return str(out_path)


def write_summary_md(
    graph: GraphSnapshot,
    out_dir: str,
    filename: str = "summary.md",
    root_address: Optional[str] = None,
    root_summary: Optional[AddressSummary] = None,
    expanded: Iterable[str] = (),
) -> str:
    """
    Minimal exploration summary for the root address.
    """
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename

    root = root_address or ""
    explored = [a for a in expanded if a != root]

    def sum_by_address(edges, key):
        totals = {}
        for e in edges:
            addr = key(e)
            totals[addr] = totals.get(addr, Decimal("0")) + e.value
        return totals

    inflow_totals = sum_by_address(
        [e for e in graph.edges.values() if root and e.target == root], lambda e: e.source
    )
    outflow_totals = sum_by_address(
        [e for e in graph.edges.values() if root and e.source == root], lambda e: e.target
    )

    def top_n(totals, n=10):
        return sorted(totals.items(), key=lambda x: x[1], reverse=True)[:n]

    def fmt_btc(x: Decimal) -> str:
        return f"{x:.8f}"

    lines = []
    lines.append("# Exploration Summary\n")
    lines.append(f"- Nodes: **{len(graph.nodes)}**\n")
    lines.append(f"- Edges: **{len(graph.edges)}**\n")
    if root:
        stats = node_stats(root, graph)
        lines.append(f"- Root: **{root}**\n")
        lines.append(
            f"- Root edges: {stats.total_edges} "
            f"({stats.incoming_count} in / {stats.outgoing_count} out, "
            f"{stats.neighbor_count} counterparties)\n"
        )
    if root_summary is not None:
        lines.append(f"- Transactions on record: {root_summary.transaction_count}\n")
        lines.append(f"- Total received: {fmt_btc(Decimal(root_summary.total_received) / SATS_PER_BTC)} BTC\n")
        lines.append(f"- Total sent: {fmt_btc(Decimal(root_summary.total_sent) / SATS_PER_BTC)} BTC\n")
        lines.append(f"- Final balance: {fmt_btc(Decimal(root_summary.final_balance) / SATS_PER_BTC)} BTC\n")
    lines.append("\n")

    lines.append("## Top 10 Senders to Root (by BTC)\n\n")
    if not inflow_totals:
        lines.append("_No incoming transactions loaded._\n\n")
    else:
        for addr, btc in top_n(inflow_totals):
            lines.append(f"- **{fmt_btc(btc)} BTC** | {addr}\n")
        lines.append("\n")

    lines.append("## Top 10 Recipients from Root (by BTC)\n\n")
    if not outflow_totals:
        lines.append("_No outgoing transactions loaded._\n\n")
    else:
        for addr, btc in top_n(outflow_totals):
            lines.append(f"- **{fmt_btc(btc)} BTC** | {addr}\n")
        lines.append("\n")

    lines.append("## Explored Addresses\n\n")
    if not explored:
        lines.append("_Only the root address was expanded._\n\n")
    else:
        for addr in explored:
            lines.append(f"- {addr}\n")
        lines.append("\n")

    lines.append("## Limitations\n\n")
    lines.append("- Only the pages fetched so far are shown; older history needs load-more.\n")
    lines.append("- Incoming values are the root's net gain, repeated on each sender edge.\n")

    with out_path.open("w", encoding="utf-8") as f:
        f.writelines(lines)

    return str(out_path)


def write_graph_html(graph: GraphSnapshot, out_dir: str, filename: str = "index.html") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename

    html = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Address Graph</title>
  <style>
    :root {
      --bg: #0f1115;
      --panel: #151824;
      --text: #e6e8ef;
      --muted: #9aa3b2;
      --edge-out: #ff6666;
      --edge-in: #00ff88;
    }
    body {
      margin: 0;
      font-family: "SF Mono", "Menlo", "Consolas", monospace;
      background: var(--bg);
      color: var(--text);
    }
    header {
      padding: 16px 20px;
      border-bottom: 1px solid #23283a;
      background: var(--panel);
    }
    header h1 { margin: 0; font-size: 18px; }
    header p { margin: 6px 0 0 0; font-size: 12px; color: var(--muted); }
    #wrap {
      display: grid;
      grid-template-columns: 280px 1fr;
      height: calc(100vh - 64px);
    }
    #sidebar {
      padding: 14px;
      border-right: 1px solid #23283a;
      background: var(--panel);
      font-size: 13px;
      overflow-wrap: anywhere;
    }
    #sidebar h2 {
      font-size: 13px;
      margin: 10px 0 6px 0;
      color: var(--muted);
      text-transform: uppercase;
    }
    #graph { width: 100%; height: 100%; }
    .legend { font-size: 12px; color: var(--muted); }
    .legend span {
      display: inline-block;
      width: 10px;
      height: 10px;
      margin-right: 6px;
      border-radius: 2px;
    }
  </style>
</head>
<body>
  <header>
    <h1>Address Graph</h1>
    <p>Force-directed view of graph.json</p>
  </header>
  <div id="wrap">
    <div id="sidebar">
      <div id="stats">Loading...</div>
      <h2>Selected</h2>
      <div id="selected">Click a node</div>
      <h2>Legend</h2>
      <div class="legend"><span style="background: var(--edge-out);"></span>Red arrows = outgoing</div>
      <div class="legend"><span style="background: var(--edge-in);"></span>Green arrows = incoming</div>
    </div>
    <div id="graph"></div>
  </div>

  <script src="https://unpkg.com/force-graph"></script>
  <script>
    const nodeStats = (links, id) => {
      const id_ = (x) => (typeof x === "object" ? x.id : x);
      const touching = links.filter((l) => id_(l.source) === id || id_(l.target) === id);
      const neighbors = new Set();
      touching.forEach((l) => {
        if (id_(l.source) === id) neighbors.add(id_(l.target));
        if (id_(l.target) === id) neighbors.add(id_(l.source));
      });
      return {
        total: touching.length,
        neighbors: neighbors.size,
        incoming: touching.filter((l) => id_(l.target) === id).length,
        outgoing: touching.filter((l) => id_(l.source) === id).length,
      };
    };

    fetch("./graph.json")
      .then((r) => r.json())
      .then((data) => {
        if (!window.ForceGraph) {
          document.getElementById("stats").textContent = "Graph library failed to load.";
          return;
        }
        document.getElementById("stats").textContent =
          `Nodes: ${data.nodes.length} • Edges: ${data.links.length}`;

        ForceGraph()(document.getElementById("graph"))
          .graphData(data)
          .backgroundColor("#0b0d12")
          .nodeLabel("name")
          .nodeVal("val")
          .nodeColor(() => "#5bd1d7")
          .linkColor("color")
          .linkLabel((l) => `${l.value} BTC | ${l.txHash}`)
          .linkDirectionalArrowLength(4)
          .linkDirectionalArrowRelPos(1)
          .onNodeClick((node) => {
            const s = nodeStats(data.links, node.id);
            document.getElementById("selected").textContent =
              `${node.id} • ${s.total} edges • ${s.neighbors} neighbors • ${s.incoming} in • ${s.outgoing} out`;
          });
      })
      .catch((err) => {
        document.getElementById("stats").textContent = "Failed to load graph.json";
        console.error(err);
      });
  </script>
</body>
</html>
"""

    with out_path.open("w", encoding="utf-8") as f:
        f.write(html)

    return str(out_path)

import json
import sys
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest import mock

from addrgraph.adapters.ledger.static_ledger_adapter import StaticLedgerAdapter
from addrgraph.cli import main as cli
from addrgraph.core.dto import AddressSummary
from addrgraph.core.errors import UpstreamError
from addrgraph.core.models import GraphEdge, GraphNode, GraphSnapshot
from addrgraph.io.output_writer import write_graph_html, write_graph_json, write_summary_md
from addrgraph.io.schemas import node_stats_to_dict, snapshot_to_dict
from addrgraph.services.graph_store import node_stats


A = "1" + "A" * 33
B = "1" + "B" * 33
C = "3" + "C" * 33


def _graph():
    g = GraphSnapshot()
    for addr in (A, B, C):
        g.add_node(GraphNode(id=addr, display_name=addr, weight=3))
    g.add_edge(GraphEdge(A, B, Decimal("0.5"), "t1", "#ff6666"))
    g.add_edge(GraphEdge(C, A, Decimal("1.25"), "t2", "#00ff88"))
    return g


class SchemaTests(unittest.TestCase):
    def test_snapshot_to_dict_matches_renderer_contract(self) -> None:
        data = snapshot_to_dict(_graph())

        self.assertEqual(data["nodes"][0], {"id": A, "name": A, "val": 3})
        self.assertEqual(
            data["links"][0],
            {"source": A, "target": B, "value": 0.5, "txHash": "t1", "color": "#ff6666"},
        )

    def test_node_stats_to_dict(self) -> None:
        data = node_stats_to_dict(node_stats(A, _graph()))

        self.assertEqual(data["totalEdges"], 2)
        self.assertEqual(data["neighborCount"], 2)
        self.assertEqual((data["incomingCount"], data["outgoingCount"]), (1, 1))


class OutputWriterTests(unittest.TestCase):
    def test_writes_graph_summary_and_html(self) -> None:
        summary = AddressSummary(
            address=A, transaction_count=2, total_received=125_000_000,
            total_sent=50_000_000, final_balance=75_000_000,
        )
        with tempfile.TemporaryDirectory() as tmp:
            graph_path = write_graph_json(_graph(), tmp)
            summary_path = write_summary_md(_graph(), tmp, root_address=A, root_summary=summary, expanded=[A, B])
            html_path = write_graph_html(_graph(), tmp)

            data = json.loads(Path(graph_path).read_text(encoding="utf-8"))
            text = Path(summary_path).read_text(encoding="utf-8")
            html = Path(html_path).read_text(encoding="utf-8")

        self.assertEqual(len(data["links"]), 2)
        self.assertIn(f"- Root: **{A}**", text)
        self.assertIn(f"**1.25000000 BTC** | {C}", text)
        self.assertIn(f"**0.50000000 BTC** | {B}", text)
        self.assertIn("Final balance: 0.75000000 BTC", text)
        self.assertIn(f"- {B}\n", text)
        self.assertIn("graph.json", html)


FIXTURES = [
    {
        "hash": "t1",
        "time": 100,
        "inputs": [{"address": A, "value": 60_000_000}],
        "outputs": [{"address": B, "value": 50_000_000}],
    },
    {
        "hash": "t2",
        "time": 50,
        "inputs": [{"address": B, "value": 10_000}],
        "outputs": [{"address": C, "value": 9_000}],
    },
]


class _FailingForB(StaticLedgerAdapter):
    async def fetch_address_summary(self, address, page_offset=0):
        if address == B:
            raise UpstreamError("HTTP 503")
        return await super().fetch_address_summary(address, page_offset)


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.object(cli.settings, "LEDGER_MIN_INTERVAL_SEC", 0)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, tmp, *extra):
        fixtures_path = Path(tmp) / "txs.json"
        fixtures_path.write_text(json.dumps(FIXTURES), encoding="utf-8")
        argv = [
            "addrgraph", "--address", A, "--use-static",
            "--fixtures", str(fixtures_path), "--out", str(Path(tmp) / "out"), *extra,
        ]
        with mock.patch.object(sys, "argv", argv), mock.patch("sys.stdout"), mock.patch("sys.stderr"):
            return cli.main()

    def test_static_run_writes_outputs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            code = self._run(tmp, "--expand", B, "--html")

            out_dir = Path(tmp) / "out"
            data = json.loads((out_dir / "graph.json").read_text(encoding="utf-8"))
            self.assertTrue((out_dir / "summary.md").exists())
            self.assertTrue((out_dir / "index.html").exists())

        self.assertEqual(code, 0)
        self.assertEqual({n["id"] for n in data["nodes"]}, {A, B, C})
        self.assertEqual({(l["source"], l["target"]) for l in data["links"]}, {(A, B), (B, C)})

    def test_static_ledger_shares_rate_limiter(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, \
                mock.patch.object(cli.RateLimiter, "acquire", autospec=True) as acquire:
            code = self._run(tmp, "--expand", B)

        self.assertEqual(code, 0)
        self.assertEqual(acquire.call_count, 2)
        self.assertIs(acquire.call_args_list[0].args[0], acquire.call_args_list[1].args[0])

    def test_failed_expansion_exit_code(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, \
                mock.patch.object(cli, "StaticLedgerAdapter", _FailingForB):
            code = self._run(tmp, "--expand", B)

            data = json.loads((Path(tmp) / "out" / "graph.json").read_text(encoding="utf-8"))

        self.assertEqual(code, 1)
        self.assertEqual({(l["source"], l["target"]) for l in data["links"]}, {(A, B)})

    def test_invalid_address_exit_code(self) -> None:
        with mock.patch.object(sys, "argv", ["addrgraph", "--address", "nope", "--use-static"]), \
                mock.patch("sys.stdout"), mock.patch("sys.stderr"):
            self.assertEqual(cli.main(), 2)


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import json
import sys
import time

from addrgraph.config import settings
from addrgraph.core.errors import ValidationError
from addrgraph.io.output_writer import write_graph_html, write_graph_json, write_summary_md
from addrgraph.io.schemas import transactions_from_dicts
from addrgraph.services.exploration_service import ExplorationService
from addrgraph.utils.logging import setup_logging

from addrgraph.adapters.ledger.factory import PROVIDERS, make_ledger
from addrgraph.adapters.ledger.rate_limiter import RateLimiter
from addrgraph.adapters.ledger.static_ledger_adapter import StaticLedgerAdapter


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="addrgraph", description="Incremental Bitcoin address-graph explorer")
    p.add_argument("--address", required=True, help="Root address to explore")
    p.add_argument("--expand", action="append", default=[], metavar="ADDR", help="Expand this node after the root (repeatable)")
    p.add_argument("--load-more", action="append", default=[], metavar="ADDR", help="Fetch the next page for this address (repeatable)")
    p.add_argument("--retries", type=int, default=0, help="Retry failed fetches this many times")
    p.add_argument("--provider", choices=sorted(PROVIDERS), default=settings.LEDGER_PROVIDER, help="Upstream ledger API")
    p.add_argument("--use-static", action="store_true", help="Use static ledger (dev/testing)")
    p.add_argument("--fixtures", help="JSON transactions for --use-static")
    p.add_argument("--out", default="out", help="Output folder")
    p.add_argument("--html", action="store_true", help="Write a force-graph HTML page alongside graph.json")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Log level (DEBUG, INFO, WARNING...)")
    return p


def _make_progress_reporter():
    start_time = time.time()

    def _short_addr(addr: str) -> str:
        if not addr:
            return ""
        if len(addr) <= 12:
            return addr
        return f"{addr[:6]}...{addr[-4:]}"

    def _ts() -> str:
        return dt.datetime.now().strftime("%H:%M:%S")

    def progress(event: str, data: dict) -> None:
        if event == "start":
            print(f"[{_ts()}] Exploring {data['address']}")
            return
        if event == "fetch":
            addr = _short_addr(str(data.get("address", "")))
            print(f"[{_ts()}] Fetching {addr} (offset {data.get('offset', 0)})...")
            return
        if event == "fetch_done":
            print(
                f"[{_ts()}] Fetched {data.get('count', 0)} tx(s) • "
                f"{data['nodes']} nodes • {data['edges']} edges"
            )
            return
        if event == "done":
            elapsed = time.time() - start_time
            print(
                f"[{_ts()}] Done in {elapsed:.1f}s • "
                f"{data['nodes']} nodes • {data['edges']} edges"
            )
            return
        if event == "error":
            addr = _short_addr(str(data.get("address", "")))
            print(f"[{_ts()}] Error for {addr}: {data.get('message', 'Unknown error')}", file=sys.stderr)

    return progress


async def _explore(svc: ExplorationService, args: argparse.Namespace) -> None:
    await svc.set_root_address(args.address)
    for addr in args.expand:
        await svc.expand_node(addr.strip())
    for addr in args.load_more:
        await svc.load_more(addr.strip())

    for _ in range(max(0, args.retries)):
        failed = svc.errored()
        if not failed:
            break
        for s in failed:
            await svc.retry(s.address)


def main() -> int:
    args = build_arg_parser().parse_args()
    setup_logging(level=args.log_level)
    progress = _make_progress_reporter()

    rl = RateLimiter(settings.LEDGER_MIN_INTERVAL_SEC)
    if args.use_static:
        txs = []
        if args.fixtures:
            with open(args.fixtures, encoding="utf-8") as f:
                txs = transactions_from_dicts(json.load(f))
        ledger = StaticLedgerAdapter(rl, transactions=txs)
        adapter_label = f"StaticLedgerAdapter (dev/testing, min {rl.min_interval:g}s between calls)"
    else:
        ledger = make_ledger(args.provider, rl)
        adapter_label = f"{ledger.__class__.__name__} (min {rl.min_interval:g}s between calls)"

    svc = ExplorationService(ledger=ledger, on_progress=progress)
    print(f"Adapter: {adapter_label}")
    try:
        asyncio.run(_explore(svc, args))
    except ValidationError as exc:
        print(f"Invalid address: {exc}", file=sys.stderr)
        return 2

    graph = svc.snapshot
    progress("done", {"nodes": len(graph.nodes), "edges": len(graph.edges)})

    # Outputs
    print("Writing outputs...")
    graph_path = write_graph_json(graph, args.out)
    summary_path = write_summary_md(
        graph,
        args.out,
        root_address=svc.root,
        root_summary=svc.summary(svc.root) if svc.root else None,
        expanded=svc.store.expanded,
    )
    html_path = None
    if args.html:
        html_path = write_graph_html(graph, args.out)

    print(f"Wrote: {graph_path}")
    print(f"Wrote: {summary_path}")
    if html_path:
        print(f"Wrote: {html_path}")

    return 1 if svc.errored() else 0


if __name__ == "__main__":
    raise SystemExit(main())

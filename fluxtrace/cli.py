"""Command-line interface for fluxtrace."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from time import perf_counter
from typing import Any, List, Optional

from fluxtrace.algorithms.base import (
    EmitMode,
    InvalidThresholdError,
    MalformedWeightError,
    NodeNotFoundError,
)
from fluxtrace.algorithms.diagnostics import PathLogger
from fluxtrace.algorithms.traversal import traverse
from fluxtrace.config import DEFAULT_CONFIG
from fluxtrace.graph.io import load_graph
from fluxtrace.graph.view import LedgerView
from fluxtrace.logging import get_logger, set_global_log_level
from fluxtrace.results import TraversalSummary

logger = get_logger(__name__)


def _format_table(
    headers: List[str],
    rows: List[List[str]],
    min_width: int = 6,
    max_col_width: Optional[int] = 40,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers.
        rows: Data rows.
        min_width: Minimum column width.
        max_col_width: Cells longer than this are clipped with ``...``.

    Returns:
        Formatted table string, or an empty string for no rows.
    """
    if not rows:
        return ""

    def clip(val: Any) -> str:
        s = str(val)
        if max_col_width is not None and len(s) > max_col_width:
            return s[: max_col_width - 3] + "..."
        return s

    all_data = [[clip(h) for h in headers]] + [[clip(v) for v in row] for row in rows]
    col_widths = [
        max(min_width, max(len(row[idx]) for row in all_data))
        for idx in range(len(headers))
    ]

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{item:<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(all_data[0])]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    lines.extend(format_row(row) for row in all_data[1:])
    return "\n".join(lines)


def _format_contribution(value: float) -> str:
    """Return a contribution as a percentage with up to four decimals.

    Examples:
        1.0 -> "100%"; 0.4 -> "40%"; 0.123456 -> "12.3456%".
    """
    s = f"{value * 100.0:.4f}".rstrip("0").rstrip(".")
    return f"{s}%"


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - minutes * 60:.1f}s"


def _run_trace(
    path: Path,
    start: str,
    min_contribution: float,
    terminal_label: str,
    category: Optional[str] = None,
    terminals_only: bool = False,
    max_depth: Optional[int] = None,
    limit: Optional[int] = None,
    results_path: Optional[Path] = None,
    stdout: bool = False,
    trace_paths: bool = False,
) -> None:
    """Load a graph file, run one traversal and report its results.

    Args:
        path: YAML or JSON node-link graph file.
        start: Lookup key of the start node.
        min_contribution: Edge admission threshold.
        terminal_label: Label that stops expansion.
        category: Label the start node must carry.
        terminals_only: Emit only terminal-label matches.
        max_depth: Optional path length bound.
        limit: Optional bound on the number of results.
        results_path: Optional JSON output file.
        stdout: Print the JSON document to stdout.
        trace_paths: Log every traversal event at INFO.
    """
    _start_time = perf_counter()
    try:
        graph = load_graph(path)
        view = LedgerView(graph)
        refs = traverse(
            view,
            start,
            min_contribution,
            terminal_label,
            category=category,
            emit=EmitMode.TERMINAL if terminals_only else EmitMode.ALL,
            max_depth=max_depth,
            max_results=limit,
            sink=PathLogger() if trace_paths else None,
        )
        summary = TraversalSummary.collect(refs, start, min_contribution, terminal_label)
    except FileNotFoundError:
        logger.error(f"Graph file not found: {path}")
        print(f"ERROR: Graph file not found: {path}")
        sys.exit(1)
    except (NodeNotFoundError, InvalidThresholdError, MalformedWeightError) as e:
        logger.error(f"Traversal rejected: {type(e).__name__}: {e}")
        print(f"ERROR: {type(e).__name__}: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to run traversal: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to run traversal: {type(e).__name__}: {e}")
        sys.exit(1)

    rows = [
        [
            str(ref.node),
            ref.key or "-",
            ",".join(sorted(ref.labels)) or "-",
            str(ref.depth),
            _format_contribution(ref.contribution),
            "yes" if ref.terminal else "",
        ]
        for ref in summary.results
    ]
    if rows:
        print(
            _format_table(
                ["Node", "Key", "Labels", "Depth", "Contribution", "Terminal"], rows
            )
        )
    else:
        print("No results")
    print(
        f"{len(summary.results)} results, {len(summary.terminals())} terminal "
        f"(threshold {min_contribution}, terminal label '{terminal_label}')"
    )

    json_str = json.dumps(summary.to_dict(), indent=2, default=str)
    if results_path is not None:
        results_path.parent.mkdir(parents=True, exist_ok=True)
        results_path.write_text(json_str)
        logger.info(f"Writing results to: {results_path}")
        print(f"Results written to: {results_path}")
    if stdout:
        print(json_str)

    logger.info(
        f"Traversal completed in {_format_duration(perf_counter() - _start_time)}"
    )


def _inspect_graph(path: Path, detail: bool = False) -> None:
    """Print a structural summary of a graph file."""
    try:
        graph = load_graph(path)
    except FileNotFoundError:
        print(f"ERROR: Graph file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to inspect graph: {e}")
        print(f"ERROR: Failed to inspect graph: {type(e).__name__}: {e}")
        sys.exit(1)

    print(f"Graph: {path}")
    print(f"  Nodes: {graph.number_of_nodes()}")
    print(f"  Edges: {graph.number_of_edges()}")

    label_counts: Counter[str] = Counter()
    for node in graph.nodes:
        label_counts.update(graph.node_labels(node))
    if label_counts:
        print("  Labels:")
        print(
            _format_table(
                ["Label", "Nodes"],
                [[label, str(count)] for label, count in sorted(label_counts.items())],
            )
        )

    sources = [n for n in graph.nodes if graph.in_degree(n) == 0]
    print(f"  Nodes without incoming edges: {len(sources)}")

    if detail:
        weight_attr = graph.config.weight_attr
        rows = []
        for node in graph.nodes:
            inflow = sum(
                attr.get(weight_attr, 0)
                for _, _, _, attr in graph.incoming(node)
                if isinstance(attr.get(weight_attr), (int, float))
            )
            rows.append(
                [
                    str(node),
                    graph.node_key(node) or "-",
                    ",".join(sorted(graph.node_labels(node))) or "-",
                    str(graph.in_degree(node)),
                    str(inflow),
                ]
            )
        print("  Nodes:")
        print(_format_table(["Node", "Key", "Labels", "In", "Influx"], rows))


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``fluxtrace`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="fluxtrace",
        description="Trace contribution-pruned reachability in weighted transfer graphs.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{trace,inspect}",
        help="Available commands",
    )

    trace_parser = subparsers.add_parser(
        "trace", help="Run a traversal from a start key"
    )
    trace_parser.add_argument("graph", type=Path, help="Path to graph YAML/JSON")
    trace_parser.add_argument(
        "--start", "-s", required=True, help="Lookup key of the start node"
    )
    trace_parser.add_argument(
        "--min-contribution",
        "-m",
        type=float,
        required=True,
        help="Minimum propagated contribution for an edge to be expanded",
    )
    trace_parser.add_argument(
        "--terminal-label",
        "-t",
        required=True,
        help="Label of nodes that are reported and not expanded past",
    )
    trace_parser.add_argument(
        "--category",
        "-c",
        default=None,
        help=f"Label of the start node (default: {DEFAULT_CONFIG.start_category})",
    )
    trace_parser.add_argument(
        "--terminals-only",
        action="store_true",
        help="Report only nodes carrying the terminal label",
    )
    trace_parser.add_argument(
        "--max-depth", type=int, default=None, help="Do not expand past this depth"
    )
    trace_parser.add_argument(
        "--limit", type=int, default=None, help="Stop after this many results"
    )
    trace_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help="Write results to this JSON file",
    )
    trace_parser.add_argument(
        "--stdout", action="store_true", help="Print JSON results to stdout"
    )
    trace_parser.add_argument(
        "--trace-paths",
        action="store_true",
        help="Log every traversal step (visits, expansions, pruned branches)",
    )

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a graph file")
    inspect_parser.add_argument("graph", type=Path, help="Path to graph YAML/JSON")
    inspect_parser.add_argument(
        "--detail", "-d", action="store_true", help="Show a per-node table"
    )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "trace":
        _run_trace(
            path=args.graph,
            start=args.start,
            min_contribution=args.min_contribution,
            terminal_label=args.terminal_label,
            category=args.category,
            terminals_only=args.terminals_only,
            max_depth=args.max_depth,
            limit=args.limit,
            results_path=args.results,
            stdout=args.stdout,
            trace_paths=args.trace_paths,
        )
    elif args.command == "inspect":
        _inspect_graph(args.graph, args.detail)


if __name__ == "__main__":
    main()

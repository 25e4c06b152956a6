from __future__ import annotations

import sys
from pathlib import Path

from tsserver_analyzer.analyzer import create_initial_state, get_stats, process_event, reset
from tsserver_analyzer.config import load_tsconfig_paths
from tsserver_analyzer.discovery import find_session_trace_files
from tsserver_analyzer.models import AnalysisStats, AnalyzerState, Config
from tsserver_analyzer.parser import iter_trace_events
from tsserver_analyzer.report import print_report


def run(config: Config) -> int:
    trace_files = _resolve_trace_files(config)
    if not trace_files:
        print("Please provide a valid path to a trace file or ensure VS Code logs exist.", file=sys.stderr)
        print("Usage: tsserver-analyzer [path-to-trace]", file=sys.stderr)
        return 0

    mapped_paths = load_tsconfig_paths(Path(config.tsconfig_path))
    print(f"Loaded {len(mapped_paths)} path mappings from {Path(config.tsconfig_path).name}")

    state = analyze_files(trace_files, create_initial_state(mapped_paths), config)
    stats = get_stats(state)

    if config.interactive:
        _run_report_app(stats, config)
    else:
        print_report(stats, top_slow_ops=config.top_slow_ops, top_stats=config.top_stats)
    return 0


def _resolve_trace_files(config: Config) -> list[Path]:
    if config.trace_files:
        return [Path(p) for p in config.trace_files]

    print("No trace file provided. Attempting to find all trace files from the latest VS Code session...")
    logs_dir = Path(config.logs_dir) if config.logs_dir else None
    trace_files = find_session_trace_files(logs_dir)
    for path in trace_files:
        print(f" - {path}")
    return trace_files


def analyze_files(paths: list[Path], state: AnalyzerState, config: Config) -> AnalyzerState:
    """Fold every event of every file into ``state``.

    Correlation context is reset per file; statistics accumulate across files.
    """
    for path in paths:
        if not path.is_file():
            print(f"Warning: Skipping missing file: {path}", file=sys.stderr)
            continue

        print(f"Analyzing {path}...")
        state = reset(state)
        for event in iter_trace_events(path):
            state = process_event(
                event, state,
                slow_threshold_micros=config.slow_threshold_micros,
                recent_window_micros=config.recent_window_micros,
            )
    return state


def _run_report_app(stats: AnalysisStats, config: Config) -> None:
    from tsserver_analyzer.tui.report import ReportApp

    app = ReportApp(stats=stats, top_slow_ops=config.top_slow_ops, top_stats=config.top_stats)
    app.run()

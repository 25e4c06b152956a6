from __future__ import annotations

import json
from typing import Mapping

from rich.console import Console
from rich.table import Table
from rich.text import Text

from tsserver_analyzer.models import AnalysisStats, PerformanceStat, SlowOperation

OPERATION_DESCRIPTIONS: dict[str, str] = {
    "updateGraph": "Re-calculates the project structure and dependencies.",
    "findSourceFile": "Locates a source file on disk.",
    "finishCachingPerDirectoryResolution": "Caches module resolutions for a directory.",
    "processRootFiles": "Processes the root files of the project.",
    "resolveModuleNamesWorker": "Resolves module imports.",
    "processTypeReferenceDirective": 'Handles /// <reference types="..." /> directives.',
    "updateOpen": "Updates the state of an open file.",
    "configure": "Sets up the server configuration.",
    "definitionAndBoundSpan": "Finds definition and its span.",
    "getApplicableRefactors": "Computes code refactorings.",
    "projectInfo": "Retrieves project information.",
    "documentHighlights": "Highlights references in the document.",
    "provideInlayHints": "Computes inlay hints.",
    "configurePlugin": "Configures a TS server plugin.",
    "compilerOptionsForInferredProjects": "Sets options for inferred projects.",
    "getOutliningSpans": "Computes folding ranges.",
    "linkedEditingRange": "Computes linked editing ranges.",
    "navtree": "Computes the navigation tree.",
    "resolveLibrary": "Resolves a library file.",
    "getUnresolvedImports": "Finds imports that could not be resolved.",
    "checkExpression": "Type checks an expression.",
    "parseJsonSourceFileConfigFileContent": "Parses tsconfig.json.",
    "loadConfiguredProject": "Loads a configured project.",
    "resolveTypeReferenceDirectiveNamesWorker": "Resolves type reference directives.",
    "getPackageJsonAutoImportProvider": "Gets auto-import provider from package.json.",
    "tryReuseStructureFromOldProgram": "Attempts to reuse old program structure.",
}

STAT_COLUMNS = ("Name", "File Path", "Description", "Count", "Avg (ms)", "Max (ms)", "Total (ms)")
_ARGS_PREVIEW_CHARS = 100


def top_slow_operations(slow_ops: tuple[SlowOperation, ...] | list[SlowOperation], limit: int = 10) -> list[SlowOperation]:
    return sorted(slow_ops, key=lambda op: op.duration_ms, reverse=True)[:limit]


def rank_stats(stats: Mapping[str, PerformanceStat], limit: int = 50) -> list[PerformanceStat]:
    """Stats with the largest total time, biggest first."""
    return sorted(stats.values(), key=lambda s: s.total_duration_micros, reverse=True)[:limit]


def stat_row(stat: PerformanceStat) -> tuple[str, ...]:
    return (
        stat.name,
        stat.resource or "",
        OPERATION_DESCRIPTIONS.get(stat.name, ""),
        str(stat.count),
        f"{stat.avg_duration_micros / 1000:.2f}",
        f"{stat.max_duration_micros / 1000:.2f}",
        f"{stat.total_duration_micros / 1000:.2f}",
    )


def stat_rows(stats: Mapping[str, PerformanceStat], limit: int = 50) -> list[tuple[str, ...]]:
    return [stat_row(stat) for stat in rank_stats(stats, limit)]


def format_slow_operation(op: SlowOperation) -> str:
    resource = f" ({op.resource})" if op.resource else ""
    return f"[{op.timestamp / 1_000_000:.2f}s] {op.name}{resource}: {op.duration_ms:.2f}ms"


def format_args(op: SlowOperation) -> str | None:
    if not op.args:
        return None
    return f"    Args: {json.dumps(op.args, default=str)[:_ARGS_PREVIEW_CHARS]}..."


def _stats_table(title: str, stats: Mapping[str, PerformanceStat], limit: int) -> Table:
    table = Table(title=title, title_justify="left")
    for column in STAT_COLUMNS:
        table.add_column(column, justify="right" if column.endswith(")") or column == "Count" else "left")
    for row in stat_rows(stats, limit):
        table.add_row(*(Text(cell) for cell in row))
    return table


def print_report(
    stats: AnalysisStats,
    console: Console | None = None,
    top_slow_ops: int = 10,
    top_stats: int = 50,
) -> None:
    console = console or Console()
    console.print("=== TSServer Trace Analysis Report ===")

    console.print(f"--- Top {top_slow_ops} Slowest Operations ---")
    for op in top_slow_operations(stats.slow_ops, top_slow_ops):
        console.print(format_slow_operation(op), markup=False, highlight=False, soft_wrap=True)
        args_line = format_args(op)
        if args_line:
            console.print(args_line, markup=False, highlight=False, soft_wrap=True)

    console.print(_stats_table("--- Command Statistics (Request/Response) ---", stats.command_stats, top_stats))
    console.print(_stats_table("--- Internal Compiler Performance ---", stats.internal_stats, top_stats))

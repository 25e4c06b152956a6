from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Mapping

from tsserver_analyzer.enrichment import INFERRED_PROJECT_MARKER, enrich_resource, get_resource, is_chat_block, normalize_path
from tsserver_analyzer.models import AnalysisStats, AnalyzerState, PerformanceStat, RecentFile, SlowOperation, TraceEvent
from tsserver_analyzer.parser import is_number

SLOW_THRESHOLD_MICROS = 500_000
RECENT_WINDOW_MICROS = 10_000_000


def create_initial_state(path_mapped_files: Iterable[str] = ()) -> AnalyzerState:
    return AnalyzerState(path_mapped_files=frozenset(normalize_path(p) for p in path_mapped_files))


def reset(state: AnalyzerState) -> AnalyzerState:
    """Drop per-file correlation context, keeping run-wide aggregates."""
    return replace(
        state,
        pending_requests={},
        pending_commands={},
        last_chat_block_timestamp=0,
        inferred_project_files={},
        recent_find_source_files=(),
    )


def get_stats(state: AnalyzerState) -> AnalysisStats:
    return AnalysisStats(
        command_stats=state.command_stats,
        internal_stats=state.internal_stats,
        slow_ops=state.slow_ops,
    )


def record_stat(
    stats: Mapping[str, PerformanceStat], key: str, name: str, resource: str | None, duration_micros: int,
) -> dict[str, PerformanceStat]:
    current = stats.get(key)
    if current is None:
        stat = PerformanceStat(name, resource, 1, duration_micros, duration_micros)
    else:
        stat = replace(
            current,
            count=current.count + 1,
            total_duration_micros=current.total_duration_micros + duration_micros,
            max_duration_micros=max(current.max_duration_micros, duration_micros),
        )
    updated = dict(stats)
    updated[key] = stat
    return updated


def _stat_key(name: str, resource: str | None) -> str:
    return f"{name} ({resource})" if resource else name


def _sequence_number(value: Any) -> int | str | None:
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return value
    return None


def process_event(
    event: TraceEvent,
    state: AnalyzerState,
    *,
    slow_threshold_micros: int = SLOW_THRESHOLD_MICROS,
    recent_window_micros: int = RECENT_WINDOW_MICROS,
) -> AnalyzerState:
    """Fold one trace event into the analyzer state.

    Pure: ``state`` is left untouched and a new state is returned. Only the
    containers an event actually changes are copied.
    """
    state = _update_metadata(event, state)

    if event.name == "request":
        state = _handle_request(event, state)
    elif event.name == "response":
        state = _handle_response(event, state, slow_threshold_micros)

    if event.phase == "X" and event.duration is not None:
        state = _handle_internal(event, state, slow_threshold_micros, recent_window_micros)
    return state


def _update_metadata(event: TraceEvent, state: AnalyzerState) -> AnalyzerState:
    args = event.args
    if is_chat_block(args):
        state = replace(state, last_chat_block_timestamp=event.timestamp)

    if event.name != "projectInfo":
        return state
    project_name = args.get("projectName")
    file_names = args.get("fileNames")
    if not isinstance(project_name, str) or INFERRED_PROJECT_MARKER not in project_name:
        return state
    if not isinstance(file_names, list):
        return state

    inferred = dict(state.inferred_project_files)
    inferred[project_name] = [name for name in file_names if isinstance(name, str)]
    return replace(state, inferred_project_files=inferred)


def _handle_request(event: TraceEvent, state: AnalyzerState) -> AnalyzerState:
    seq = _sequence_number(event.args.get("seq"))
    if seq is None:
        return state
    pending = dict(state.pending_requests)
    pending[seq] = event.timestamp
    commands = {k: v for k, v in state.pending_commands.items() if k != seq}
    command = event.args.get("command")
    if isinstance(command, str) and command:
        commands[seq] = command
    return replace(
        state,
        pending_requests=pending,
        pending_commands=commands,
    )


def _handle_response(event: TraceEvent, state: AnalyzerState, slow_threshold_micros: int) -> AnalyzerState:
    args = event.args
    # Requests are stored under their own seq; this only lines up when the
    # server echoes it as request_seq (or reuses seq) on the response.
    seq = _sequence_number(args.get("request_seq"))
    if seq is None:
        seq = _sequence_number(args.get("seq"))
    if seq is None or seq not in state.pending_requests:
        return state

    duration_micros = event.timestamp - state.pending_requests[seq]
    command = args.get("command")
    if not isinstance(command, str) or not command:
        command = state.pending_commands.get(seq) or "unknown"
    resource = get_resource(args)

    command_stats = record_stat(state.command_stats, _stat_key(command, resource), command, resource, duration_micros)
    slow_ops = state.slow_ops
    if duration_micros > slow_threshold_micros:
        slow_ops = slow_ops + (SlowOperation(
            name=f"Command: {command}",
            resource=resource,
            duration_ms=duration_micros / 1000,
            timestamp=event.timestamp,
            args=args,
        ),)

    pending = {k: v for k, v in state.pending_requests.items() if k != seq}
    commands = {k: v for k, v in state.pending_commands.items() if k != seq}
    return replace(
        state,
        command_stats=command_stats,
        slow_ops=slow_ops,
        pending_requests=pending,
        pending_commands=commands,
    )


def _handle_internal(
    event: TraceEvent, state: AnalyzerState, slow_threshold_micros: int, recent_window_micros: int,
) -> AnalyzerState:
    duration = event.duration
    if not is_number(duration):
        return state

    resource = get_resource(event.args)
    if resource is not None:
        resource = enrich_resource(event, state, resource)

    internal_stats = record_stat(state.internal_stats, _stat_key(event.name, resource), event.name, resource, duration)
    slow_ops = state.slow_ops
    if duration > slow_threshold_micros:
        slow_ops = slow_ops + (SlowOperation(
            name=f"Internal: {event.name}",
            resource=resource,
            duration_ms=duration / 1000,
            timestamp=event.timestamp,
            args=event.args,
        ),)

    recent = state.recent_find_source_files
    if event.name == "findSourceFile" and resource:
        cutoff = event.timestamp - recent_window_micros
        recent = tuple(
            entry for entry in recent + (RecentFile(event.timestamp, resource),)
            if entry.timestamp >= cutoff
        )

    return replace(
        state,
        internal_stats=internal_stats,
        slow_ops=slow_ops,
        recent_find_source_files=recent,
    )

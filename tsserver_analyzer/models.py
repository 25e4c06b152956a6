from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Config:
    trace_files: list[str] = field(default_factory=list)
    tsconfig_path: str = "tsconfig.base.json"
    logs_dir: str = ""
    slow_threshold_micros: int = 500_000
    recent_window_micros: int = 10_000_000
    top_slow_ops: int = 10
    top_stats: int = 50
    interactive: bool = False


@dataclass(frozen=True)
class TraceEvent:
    name: str
    phase: str
    timestamp: int
    duration: int | None = None
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceStat:
    name: str
    resource: str | None
    count: int
    total_duration_micros: int
    max_duration_micros: int

    @property
    def avg_duration_micros(self) -> float:
        return self.total_duration_micros / self.count


@dataclass(frozen=True)
class SlowOperation:
    name: str
    resource: str | None
    duration_ms: float
    timestamp: int
    args: dict[str, Any] | None = None


@dataclass(frozen=True)
class RecentFile:
    timestamp: int
    file: str


@dataclass(frozen=True)
class AnalyzerState:
    """Accumulator threaded through ``process_event``.

    Containers are never mutated once a state is built; transitions create new
    ones for the fields they change and share the rest.
    """

    path_mapped_files: frozenset[str] = frozenset()
    pending_requests: dict[int, int] = field(default_factory=dict)
    pending_commands: dict[int, str] = field(default_factory=dict)
    last_chat_block_timestamp: int = 0
    inferred_project_files: dict[str, list[str]] = field(default_factory=dict)
    recent_find_source_files: tuple[RecentFile, ...] = ()
    command_stats: dict[str, PerformanceStat] = field(default_factory=dict)
    internal_stats: dict[str, PerformanceStat] = field(default_factory=dict)
    slow_ops: tuple[SlowOperation, ...] = ()


@dataclass(frozen=True)
class AnalysisStats:
    command_stats: dict[str, PerformanceStat]
    internal_stats: dict[str, PerformanceStat]
    slow_ops: tuple[SlowOperation, ...]

from __future__ import annotations

import json

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Footer, Header, Static

from tsserver_analyzer.models import AnalysisStats, PerformanceStat, SlowOperation
from tsserver_analyzer.report import STAT_COLUMNS, rank_stats, stat_row, top_slow_operations

_SLOW_COLUMNS = ("Time (s)", "Operation", "Resource", "Duration (ms)")
_VIEW_TITLES = {
    "slow": "Slowest Operations",
    "commands": "Command Statistics (Request/Response)",
    "internal": "Internal Compiler Performance",
}


class ReportApp(App[None]):
    TITLE = "TSServer Trace Analysis"
    BINDINGS = [
        Binding("s", "show_slow", "Slow Ops"),
        Binding("c", "show_commands", "Commands"),
        Binding("i", "show_internal", "Internal"),
        Binding("enter", "toggle_detail", "Detail"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, stats: AnalysisStats, top_slow_ops: int = 10, top_stats: int = 50) -> None:
        super().__init__()
        self._slow_ops: list[SlowOperation] = top_slow_operations(stats.slow_ops, top_slow_ops)
        self._stats: dict[str, list[PerformanceStat]] = {
            "commands": rank_stats(stats.command_stats, top_stats),
            "internal": rank_stats(stats.internal_stats, top_stats),
        }
        self.detail_visible = False
        self.current_view = "slow"

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(_VIEW_TITLES[self.current_view], id="view-title")
        yield DataTable(cursor_type="row")
        yield Static("", id="detail-panel")
        yield Footer()

    def on_mount(self) -> None:
        self._populate()

    def _populate(self) -> None:
        table = self.query_one(DataTable)
        table.clear(columns=True)
        if self.current_view == "slow":
            table.add_columns(*_SLOW_COLUMNS)
            for op in self._slow_ops:
                table.add_row(
                    f"{op.timestamp / 1_000_000:.2f}", Text(op.name),
                    Text(op.resource or ""), f"{op.duration_ms:.2f}",
                )
        else:
            table.add_columns(*STAT_COLUMNS)
            for stat in self._stats[self.current_view]:
                table.add_row(*(Text(cell) for cell in stat_row(stat)))
        self.query_one("#view-title", Static).update(_VIEW_TITLES[self.current_view])
        self.query_one("#detail-panel", Static).update("")
        self.detail_visible = False

    def row_count(self) -> int:
        return self.query_one(DataTable).row_count

    def _switch(self, view: str) -> None:
        if self.current_view != view:
            self.current_view = view
            self._populate()

    def action_show_slow(self) -> None:
        self._switch("slow")

    def action_show_commands(self) -> None:
        self._switch("commands")

    def action_show_internal(self) -> None:
        self._switch("internal")

    def action_quit_app(self) -> None:
        self.exit()

    def current_detail(self) -> str | None:
        row = self.query_one(DataTable).cursor_row
        if self.current_view == "slow":
            if row is None or row >= len(self._slow_ops):
                return None
            op = self._slow_ops[row]
            args = json.dumps(op.args, indent=2, default=str) if op.args else "none"
            return (
                f"{op.name}\n"
                f"Resource: {op.resource or 'none'}\n"
                f"Duration: {op.duration_ms:.2f}ms at {op.timestamp / 1_000_000:.2f}s\n\n"
                f"Args: {args}"
            )

        stats = self._stats[self.current_view]
        if row is None or row >= len(stats):
            return None
        stat = stats[row]
        return (
            f"{stat.name}\n"
            f"Resource: {stat.resource or 'none'}\n"
            f"Count: {stat.count} | Avg: {stat.avg_duration_micros / 1000:.2f}ms | "
            f"Max: {stat.max_duration_micros / 1000:.2f}ms | Total: {stat.total_duration_micros / 1000:.2f}ms"
        )

    def action_toggle_detail(self) -> None:
        panel = self.query_one("#detail-panel", Static)
        if self.detail_visible:
            panel.update("")
            self.detail_visible = False
            return
        detail = self.current_detail()
        if detail is None:
            return
        panel.update(Text(detail))
        self.detail_visible = True

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_toggle_detail()

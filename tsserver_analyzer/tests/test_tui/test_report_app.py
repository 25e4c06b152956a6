import pytest

from tsserver_analyzer.models import AnalysisStats, PerformanceStat, SlowOperation
from tsserver_analyzer.tui.report import ReportApp


def _stats() -> AnalysisStats:
    return AnalysisStats(
        command_stats={
            "quickinfo": PerformanceStat("quickinfo", None, 2, 4_000, 3_000),
            "navtree (/a.ts)": PerformanceStat("navtree", "/a.ts", 1, 9_000, 9_000),
        },
        internal_stats={"emit": PerformanceStat("emit", None, 1, 700_000, 700_000)},
        slow_ops=(SlowOperation("Internal: emit", None, 700.0, 1_000_000, {"fileName": "/a.ts"}),),
    )


@pytest.mark.asyncio
async def test_report_app_renders():
    app = ReportApp(stats=_stats())
    async with app.run_test() as pilot:
        assert app.is_running
        assert app.current_view == "slow"
        assert app.row_count() == 1


@pytest.mark.asyncio
async def test_report_switch_views():
    app = ReportApp(stats=_stats())
    async with app.run_test() as pilot:
        await pilot.press("c")
        assert app.current_view == "commands"
        assert app.row_count() == 2
        await pilot.press("i")
        assert app.current_view == "internal"
        assert app.row_count() == 1
        await pilot.press("s")
        assert app.current_view == "slow"


@pytest.mark.asyncio
async def test_report_detail_toggle():
    app = ReportApp(stats=_stats())
    async with app.run_test() as pilot:
        detail = app.current_detail()
        assert detail.startswith("Internal: emit")
        assert "/a.ts" in detail
        app.action_toggle_detail()
        assert app.detail_visible is True
        app.action_toggle_detail()
        assert app.detail_visible is False


@pytest.mark.asyncio
async def test_report_command_detail_is_largest_first():
    app = ReportApp(stats=_stats())
    async with app.run_test() as pilot:
        await pilot.press("c")
        assert app.current_detail().startswith("navtree")


@pytest.mark.asyncio
async def test_report_quit():
    app = ReportApp(stats=_stats())
    async with app.run_test() as pilot:
        await pilot.press("q")
    assert app.return_value is None

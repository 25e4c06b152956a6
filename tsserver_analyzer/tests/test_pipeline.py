from pathlib import Path
from unittest.mock import patch

from tsserver_analyzer.analyzer import create_initial_state
from tsserver_analyzer.models import Config
from tsserver_analyzer.pipeline import analyze_files, run


def _req(seq, ts, command):
    return {"name": "request", "ph": "i", "ts": ts, "pid": 1, "tid": 1, "args": {"seq": seq, "command": command}}


def _res(seq, ts, command):
    return {"name": "response", "ph": "i", "ts": ts, "pid": 1, "tid": 1,
            "args": {"seq": seq + 1000, "request_seq": seq, "command": command, "success": True}}


def _x(name, ts, dur, **args):
    return {"name": name, "ph": "X", "ts": ts, "dur": dur, "pid": 1, "tid": 1, "args": args}


def test_stats_accumulate_across_files(write_trace):
    first = write_trace("trace.1.json", [_req(1, 0, "quickinfo"), _res(1, 200, "quickinfo"), _x("emit", 10, 700_000)])
    second = write_trace("trace.2.json", [_req(1, 0, "quickinfo"), _res(1, 400, "quickinfo")])

    state = analyze_files([first, second], create_initial_state(), Config())

    stat = state.command_stats["quickinfo"]
    assert stat.count == 2
    assert stat.total_duration_micros == 600
    assert len(state.slow_ops) == 1


def test_pending_requests_do_not_leak_between_files(write_trace):
    first = write_trace("trace.1.json", [_req(5, 0, "navtree")])
    second = write_trace("trace.2.json", [_res(5, 900_000, "navtree")])

    state = analyze_files([first, second], create_initial_state(), Config())

    assert state.command_stats == {}
    assert state.slow_ops == ()


def test_missing_file_skipped(write_trace, tmp_path, capsys):
    present = write_trace("trace.1.json", [_x("emit", 0, 10)])
    state = analyze_files([tmp_path / "gone.json", present], create_initial_state(), Config())
    assert state.internal_stats["emit"].count == 1
    assert "Skipping missing file" in capsys.readouterr().err


def test_configured_threshold_is_applied(write_trace):
    trace = write_trace("trace.1.json", [_x("emit", 0, 2_000)])
    state = analyze_files([trace], create_initial_state(), Config(slow_threshold_micros=1_000))
    assert [op.name for op in state.slow_ops] == ["Internal: emit"]


def test_run_prints_report(write_trace, tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("COLUMNS", "250")
    trace = write_trace("trace.1.json", [
        _req(1, 0, "updateOpen"), _res(1, 3_500, "updateOpen"),
        _x("findSourceFile", 100, 600_000, fileName="/repo/libs/shared/a.ts"),
    ])
    tsconfig = tmp_path / "tsconfig.base.json"
    tsconfig.write_text('{"compilerOptions": {"paths": {"@shared/*": ["libs/shared/*"]}}}')

    code = run(Config(trace_files=[str(trace)], tsconfig_path=str(tsconfig)))

    out = capsys.readouterr().out
    assert code == 0
    assert "Loaded 1 path mappings" in out
    assert "TSServer Trace Analysis Report" in out
    assert "Internal: findSourceFile" in out
    assert "Triggered by tsconfig paths" in out
    assert "updateOpen" in out


def test_run_without_traces_is_not_an_error(tmp_path, capsys):
    with patch("tsserver_analyzer.pipeline.find_session_trace_files", return_value=[]) as mock_find:
        code = run(Config(logs_dir=str(tmp_path)))
    assert code == 0
    mock_find.assert_called_once_with(Path(tmp_path))
    assert "Usage" in capsys.readouterr().err


def test_run_uses_discovered_traces(write_trace, tmp_path, capsys):
    trace = write_trace("trace.9.json", [_x("emit", 0, 10)])
    with patch("tsserver_analyzer.pipeline.find_session_trace_files", return_value=[trace]):
        code = run(Config(tsconfig_path=str(tmp_path / "none.json")))
    assert code == 0
    assert f" - {trace}" in capsys.readouterr().out


def test_run_interactive_launches_app(write_trace, tmp_path):
    trace = write_trace("trace.1.json", [_x("emit", 0, 10)])
    with patch("tsserver_analyzer.tui.report.ReportApp.run") as mock_app_run:
        with patch("tsserver_analyzer.pipeline.print_report") as mock_print:
            code = run(Config(trace_files=[str(trace)], tsconfig_path=str(tmp_path / "none.json"), interactive=True))
    assert code == 0
    mock_app_run.assert_called_once()
    mock_print.assert_not_called()

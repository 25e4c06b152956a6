from unittest.mock import patch

import pytest

from tsserver_analyzer.cli import build_parser, main


def test_parser_defaults():
    parser = build_parser()
    args = parser.parse_args([])
    assert args.trace is None
    assert args.config == ".tsserver-analyzer.yml"
    assert args.tsconfig is None
    assert args.logs_dir is None
    assert args.interactive is False


def test_parser_all_args():
    parser = build_parser()
    args = parser.parse_args([
        "trace.3.json",
        "--config", "custom.yml",
        "--tsconfig", "tsconfig.json",
        "--logs-dir", "/tmp/logs",
        "--interactive",
    ])
    assert args.trace == "trace.3.json"
    assert args.config == "custom.yml"
    assert args.tsconfig == "tsconfig.json"
    assert args.logs_dir == "/tmp/logs"
    assert args.interactive is True


def test_main_exits_with_run_code():
    with patch("sys.argv", ["tsserver-analyzer", "trace.json", "--config", "missing.yml"]):
        with patch("tsserver_analyzer.pipeline.run", return_value=0) as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main()
    assert exc_info.value.code == 0
    assert mock_run.call_args[0][0].trace_files == ["trace.json"]


def test_main_reports_unexpected_errors(capsys):
    with patch("sys.argv", ["tsserver-analyzer", "--config", "missing.yml"]):
        with patch("tsserver_analyzer.pipeline.run", side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main()
    assert exc_info.value.code == 1
    assert "Error: analysis failed: boom" in capsys.readouterr().err

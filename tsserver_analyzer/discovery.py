from __future__ import annotations

import os
import re
import sys
from pathlib import Path

_SESSION_DIR = re.compile(r"^\d{8}T\d{6}$")
_TS_EXTENSION_DIR = Path("exthost") / "vscode.typescript-language-features"


def default_logs_dir(platform: str | None = None) -> Path:
    platform = platform or sys.platform
    if platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "Code" / "logs"
    if platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Code" / "logs"
    return Path.home() / ".config" / "Code" / "logs"


def _subdirs(parent: Path, prefix: str) -> list[Path]:
    return sorted(p for p in parent.iterdir() if p.is_dir() and p.name.startswith(prefix))


def _session_trace_files(session_dir: Path) -> list[Path]:
    trace_files: list[Path] = []
    for window in _subdirs(session_dir, "window"):
        ts_log_dir = window / _TS_EXTENSION_DIR
        if not ts_log_dir.is_dir():
            continue
        for server_log in _subdirs(ts_log_dir, "tsserver-log-"):
            trace_files.extend(sorted(server_log.glob("trace.*.json")))
    return trace_files


def find_session_trace_files(logs_dir: Path | None = None) -> list[Path]:
    """Return every tsserver trace file of the newest editor session that has any."""
    logs_dir = logs_dir or default_logs_dir()
    if not logs_dir.is_dir():
        print(f"Logs directory not found: {logs_dir}")
        return []

    sessions = sorted(
        (p for p in logs_dir.iterdir() if p.is_dir() and _SESSION_DIR.match(p.name)),
        reverse=True,
    )
    if not sessions:
        print(f"No session directories found in {logs_dir}")
        return []

    for session in sessions:
        trace_files = _session_trace_files(session)
        if trace_files:
            print(f"Found {len(trace_files)} trace files in session {session.name}")
            return trace_files
    return []

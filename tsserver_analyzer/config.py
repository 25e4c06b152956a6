from __future__ import annotations

import argparse
import json
import re
import sys
from pathlib import Path

import yaml

from tsserver_analyzer.models import Config

_INT_KEYS = ("slow_threshold_micros", "recent_window_micros", "top_slow_ops", "top_stats")
# String literals are matched first so "//" or "/*" inside them survive.
_COMMENTS = re.compile(r'("(?:\\.|[^"\\])*")|/\*[\s\S]*?\*/|//[^\n]*')


def _load_yaml(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        print(f"Error: {config_path} must contain a mapping of settings", file=sys.stderr)
        sys.exit(2)
    return data


def _int_setting(yaml_data: dict, key: str, default: int) -> int:
    value = yaml_data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        print(f"Error: {key} must be a non-negative integer, got {value!r}", file=sys.stderr)
        sys.exit(2)
    return value


def load_config(args: argparse.Namespace) -> Config:
    yaml_data = _load_yaml(Path(args.config))
    return _build_config(args, yaml_data)


def _build_config(args: argparse.Namespace, yaml_data: dict) -> Config:
    defaults = Config()
    ints = {key: _int_setting(yaml_data, key, getattr(defaults, key)) for key in _INT_KEYS}
    return Config(
        trace_files=[args.trace] if args.trace else [],
        tsconfig_path=args.tsconfig or yaml_data.get("tsconfig_path") or defaults.tsconfig_path,
        logs_dir=args.logs_dir or yaml_data.get("logs_dir") or "",
        interactive=args.interactive or bool(yaml_data.get("interactive", False)),
        **ints,
    )


def load_tsconfig_paths(tsconfig_path: Path) -> list[str]:
    """Flatten ``compilerOptions.paths`` into wildcard-free path fragments."""
    if not tsconfig_path.exists():
        print(
            f"Warning: {tsconfig_path.name} not found. Path mapping detection will be disabled.",
            file=sys.stderr,
        )
        return []

    try:
        content = tsconfig_path.read_text(encoding="utf-8")
        tsconfig = json.loads(_COMMENTS.sub(lambda m: m.group(1) or "", content))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        print(f"Warning: Failed to parse {tsconfig_path.name}: {exc}", file=sys.stderr)
        return []

    compiler_options = tsconfig.get("compilerOptions") if isinstance(tsconfig, dict) else None
    mappings = compiler_options.get("paths") if isinstance(compiler_options, dict) else None
    if not isinstance(mappings, dict):
        return []

    paths: list[str] = []
    for targets in mappings.values():
        if not isinstance(targets, list):
            continue
        for target in targets:
            if isinstance(target, str):
                paths.append(target.replace("*", "").replace("\\", "/"))
    return paths

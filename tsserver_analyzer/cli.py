from __future__ import annotations

import argparse
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsserver-analyzer",
        description="Summarize TypeScript server trace logs into performance statistics",
    )
    parser.add_argument("trace", nargs="?", default=None, help="Path to a trace.*.json file (default: latest VS Code session)")
    parser.add_argument("--config", type=str, default=".tsserver-analyzer.yml", help="Config file path")
    parser.add_argument("--tsconfig", type=str, default=None, help="tsconfig with compilerOptions.paths (default: tsconfig.base.json)")
    parser.add_argument("--logs-dir", type=str, default=None, help="VS Code logs directory to search for traces")
    parser.add_argument("--interactive", action="store_true", help="Browse the report in a TUI")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    from tsserver_analyzer.config import load_config
    from tsserver_analyzer.pipeline import run

    try:
        config = load_config(args)
        exit_code = run(config)
    except Exception as exc:
        print(f"Error: analysis failed: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

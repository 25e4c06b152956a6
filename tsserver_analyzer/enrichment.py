from __future__ import annotations

from typing import Any, Callable, Iterable

from tsserver_analyzer.models import AnalyzerState, TraceEvent

CHAT_BLOCK_MARKER = "vscode-chat-code-block"
CHAT_BLOCK_RESOURCE = "[VS Code Chat Code Block]"
RESOURCE_KEYS = ("name", "file", "fileName", "path", "projectName")

INFERRED_PROJECT_MARKER = "inferredProject"
CHAT_BLOCK_SUFFIX = " (Triggered by Chat Code Block)"
PATH_MAPPING_SUFFIX = " (Triggered by tsconfig paths)"


def _candidates(args: Any) -> list[Any]:
    if not isinstance(args, dict):
        return []
    return [args.get(key) for key in RESOURCE_KEYS]


def is_chat_block(args: Any) -> bool:
    """Return True when the payload points at a chat code block document."""
    return any(isinstance(value, str) and CHAT_BLOCK_MARKER in value for value in _candidates(args))


def get_resource(args: Any) -> str | None:
    """Return the file/project identifier carried by a trace payload, if any.

    The payload schema differs per operation, so the first string among
    ``RESOURCE_KEYS`` wins. Chat code blocks collapse to a single placeholder.
    """
    if is_chat_block(args):
        return CHAT_BLOCK_RESOURCE
    return next((value for value in _candidates(args) if isinstance(value, str)), None)


def normalize_path(path: str) -> str:
    return path.lower().replace("\\", "/")


def is_path_mapped(path_mapped_files: Iterable[str]) -> Callable[[str], bool]:
    fragments = [fragment for fragment in path_mapped_files if fragment]

    def check(resource: str) -> bool:
        normalized = normalize_path(resource)
        return any(fragment in normalized for fragment in fragments)

    return check


def _basename(path: str) -> str:
    return path.split("/")[-1] or path


def describe_contents(files: list[str]) -> str:
    more = f" + {len(files) - 1} more" if len(files) > 1 else ""
    return f" (Contains: {_basename(files[0])}{more})"


def _within(timestamp: int, event: TraceEvent) -> bool:
    return event.timestamp <= timestamp <= event.timestamp + (event.duration or 0)


def enrich_with_chat_context(event: TraceEvent, state: AnalyzerState, resource: str) -> str | None:
    if _within(state.last_chat_block_timestamp, event):
        return resource + CHAT_BLOCK_SUFFIX
    return None


def enrich_with_inferred_files(state: AnalyzerState, resource: str) -> str | None:
    files = state.inferred_project_files.get(resource)
    if not files:
        return None
    return resource + describe_contents(files)


def enrich_with_recent_files(event: TraceEvent, state: AnalyzerState, resource: str) -> str | None:
    matched = [entry.file for entry in state.recent_find_source_files if _within(entry.timestamp, event)]
    unique = list(dict.fromkeys(matched))
    if not unique:
        return None
    return resource + describe_contents(unique)


def enrich_with_path_mapping(event: TraceEvent, state: AnalyzerState, resource: str) -> str:
    if event.name == "findSourceFile" and is_path_mapped(state.path_mapped_files)(resource):
        return resource + PATH_MAPPING_SUFFIX
    return resource


def enrich_resource(event: TraceEvent, state: AnalyzerState, resource: str) -> str:
    """Annotate a resource with whatever context explains why it was touched."""
    if event.name != "updateGraph" or INFERRED_PROJECT_MARKER not in resource:
        return enrich_with_path_mapping(event, state, resource)

    # Chat activity beats static project membership, which beats the
    # recent-file heuristic.
    return (
        enrich_with_chat_context(event, state, resource)
        or enrich_with_inferred_files(state, resource)
        or enrich_with_recent_files(event, state, resource)
        or resource
    )

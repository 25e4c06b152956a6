import json

import pytest

from tsserver_analyzer.analyzer import create_initial_state


@pytest.fixture
def state():
    return create_initial_state([])


@pytest.fixture
def write_trace(tmp_path):
    def _write(name: str, events: list[dict]):
        path = tmp_path / name
        lines = ["["] + [json.dumps(e) + "," for e in events]
        path.write_text("\n".join(lines) + "\n")
        return path
    return _write

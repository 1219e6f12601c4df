import importlib.util
import sys
from pathlib import Path

import pytest

from errgen.schema import load_model

DEMO_MODEL = Path(__file__).parents[1] / "errgen" / "resources" / "greeting.yml"


@pytest.fixture
def demo_model_path() -> Path:
    return DEMO_MODEL


@pytest.fixture
def demo_model():
    return load_model(DEMO_MODEL)


@pytest.fixture
def load_generated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Write a generated module to disk and import it."""

    def _load(module):
        path = tmp_path / module.filename
        path.write_text(module.source, encoding="utf-8")
        name = f"generated_{path.stem}"
        spec = importlib.util.spec_from_file_location(name, path)
        loaded = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, name, loaded)
        spec.loader.exec_module(loaded)
        return loaded

    return _load

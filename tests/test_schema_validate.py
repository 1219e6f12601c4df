import json
import subprocess
import sys
from pathlib import Path

from errgen.manifest import load_manifest

DEMO_MODEL = Path(__file__).parents[1] / "errgen" / "resources" / "greeting.yml"


def test_schema_command_outputs_json() -> None:
    for kind in ("manifest", "model", "config"):
        result = subprocess.run(
            [sys.executable, "-m", "errgen", "schema", "--kind", kind],
            check=True,
            capture_output=True,
            text=True,
        )
        schema = json.loads(result.stdout)
        assert schema["type"] == "object"


def test_manifest_round_trips_through_schema(tmp_path: Path) -> None:
    result = subprocess.run(
        [sys.executable, "-m", "errgen", "generate", "--model", str(DEMO_MODEL), "--output-dir", str(tmp_path)],
        check=True,
        capture_output=True,
        text=True,
    )
    payload = json.loads(result.stdout)
    manifest = load_manifest(Path(payload["manifest_path"]))
    assert manifest.status == "SUCCESS"
    assert manifest.error is None
    assert manifest.input.model_sha256
    assert {entry.operation for entry in manifest.files} == {"Greeting", "Farewell"}

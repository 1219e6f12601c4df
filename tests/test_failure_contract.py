import json
import subprocess
import sys
from pathlib import Path


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run([sys.executable, "-m", "errgen", *args], capture_output=True, text=True)


def test_missing_fault_writes_failed_manifest(tmp_path: Path):
    model_path = tmp_path / "model.yml"
    model_path.write_text(
        "namespace: broken\n"
        "operations:\n"
        "  Op:\n"
        "    errors: [NoFault]\n"
        "structures:\n"
        "  NoFault:\n"
        "    members: {}\n",
        encoding="utf-8",
    )
    result = _run("generate", "--model", str(model_path), "--output-dir", str(tmp_path / "out"))
    assert result.returncode == 2, f"stdout={result.stdout} stderr={result.stderr}"
    payload = json.loads(result.stdout)
    error = payload["error"]
    assert error["type"] == "schema_validation_error"
    assert error["code"] == "missing_fault"
    assert error["details"]["shape"] == "NoFault"

    manifest = json.loads(Path(payload["manifest_path"]).read_text(encoding="utf-8"))
    assert manifest["status"] == "FAILED"
    assert manifest["error"]["code"] == "missing_fault"
    assert manifest["files"] == []
    assert not (tmp_path / "out" / "op_errors.py").exists()


def test_missing_model_is_an_io_error(tmp_path: Path):
    result = _run("generate", "--model", str(tmp_path / "absent.yml"), "--output-dir", str(tmp_path / "out"))
    assert result.returncode == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["type"] == "io_error"
    assert payload["error"]["code"] == "model_unreadable"


def test_unparsable_model_is_a_schema_error(tmp_path: Path):
    model_path = tmp_path / "model.yml"
    model_path.write_text("- just\n- a list\n", encoding="utf-8")
    result = _run("validate", "--model", str(model_path))
    assert result.returncode == 2
    assert json.loads(result.stdout)["error"]["code"] == "model_unparsable"


def test_bad_config_is_a_config_error(tmp_path: Path):
    model_path = Path(__file__).parents[1] / "errgen" / "resources" / "greeting.yml"
    config_path = tmp_path / "errgen.yml"
    config_path.write_text("retry_policy: exponential\n", encoding="utf-8")
    result = _run("validate", "--model", str(model_path), "--config", str(config_path))
    assert result.returncode == 1
    error = json.loads(result.stdout)["error"]
    assert error["type"] == "config_error"
    assert error["code"] == "config_invalid"


def test_operation_filename_collision_is_reported(tmp_path: Path):
    model_path = tmp_path / "model.yml"
    model_path.write_text(
        "namespace: clash\noperations:\n  FooBar: {}\n  Foo_Bar: {}\n",
        encoding="utf-8",
    )
    result = _run("generate", "--model", str(model_path), "--output-dir", str(tmp_path / "out"))
    assert result.returncode == 2
    assert json.loads(result.stdout)["error"]["type"] == "naming_collision"


def test_unusable_output_dir_is_an_io_error(tmp_path: Path):
    model_path = Path(__file__).parents[1] / "errgen" / "resources" / "greeting.yml"
    blocker = tmp_path / "taken.txt"
    blocker.write_text("not a directory\n", encoding="utf-8")
    result = _run("generate", "--model", str(model_path), "--output-dir", str(blocker / "out"))
    assert result.returncode == 1, f"stdout={result.stdout} stderr={result.stderr}"
    payload = json.loads(result.stdout)
    assert payload["error"]["type"] == "io_error"
    assert payload["error"]["code"] == "output_unwritable"
    assert "manifest_path" not in payload

from pathlib import Path

import pytest
from pydantic import ValidationError

from errgen.config import GeneratorConfig, load_config


def test_config_load():
    config_path = Path(__file__).parents[1] / "errgen" / "resources" / "errgen.yml"
    cfg = load_config(config_path)
    assert cfg.error_suffix == "Error"
    assert cfg.retry_policy == "client-only"
    assert cfg.records_module is None


def test_config_load_json(tmp_path: Path):
    config_path = tmp_path / "errgen.json"
    config_path.write_text('{"retry_policy": "smithy", "error_suffix": "Failure"}', encoding="utf-8")
    cfg = load_config(config_path)
    assert cfg.retry_policy == "smithy"
    assert cfg.error_suffix == "Failure"


def test_config_rejects_unknown_policy_and_keys():
    with pytest.raises(ValidationError):
        GeneratorConfig(retry_policy="exponential")
    with pytest.raises(ValidationError):
        GeneratorConfig.model_validate({"emit_everything": True})


def test_config_rejects_unsupported_format(tmp_path: Path):
    config_path = tmp_path / "errgen.toml"
    config_path.write_text("retry_policy = 'smithy'", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(config_path)

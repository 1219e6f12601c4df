from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from errgen.classifier import get_retry_policy, retry_policy_names


class GeneratorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int = 1
    error_suffix: str = "Error"
    kind_suffix: str = "Kind"
    retry_policy: str = "client-only"
    rename_exception_suffix: bool = True
    runtime_module: str = "errgen.runtime"
    records_module: Optional[str] = None

    @field_validator("retry_policy")
    @classmethod
    def _known_policy(cls, value: str) -> str:
        if get_retry_policy(value) is None:
            raise ValueError(f"unknown retry policy {value!r}; expected one of {retry_policy_names()}")
        return value

    @field_validator("error_suffix", "kind_suffix")
    @classmethod
    def _identifier_suffix(cls, value: str) -> str:
        if not value or not value.isidentifier():
            raise ValueError(f"suffix must be a non-empty identifier fragment, got {value!r}")
        return value


def _parse_config(data: Dict[str, Any]) -> GeneratorConfig:
    return GeneratorConfig.model_validate(data)


def load_document(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(content)
    elif path.suffix.lower() == ".json":
        data = json.loads(content)
    else:
        raise ValueError(f"Unsupported file format: {path}")
    if not isinstance(data, dict):
        raise ValueError(f"Document root must be a mapping: {path}")
    return data


def load_config(path: Path) -> GeneratorConfig:
    return _parse_config(load_document(path))

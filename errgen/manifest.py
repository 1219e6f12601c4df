"""Generation manifest: what was generated from which inputs."""

from __future__ import annotations

import hashlib
import json
import platform
from datetime import datetime
from importlib import metadata
from pathlib import Path
from typing import Dict, List, Literal, Optional, Sequence

from pydantic import Field, model_validator

from errgen.errors import GeneratorError, StrictModel
from errgen.generator import GeneratedModule


class ManifestInput(StrictModel):
    model_path: str
    model_sha256: Optional[str] = None
    config_path: Optional[str] = None
    config_sha256: Optional[str] = None
    operations: List[str] = Field(default_factory=list)


class ManifestFingerprints(StrictModel):
    python_version: str
    platform: str
    errgen_version: str


class GeneratedFile(StrictModel):
    operation: str
    path: str
    sha256: str
    variants: List[str]


class ManifestModel(StrictModel):
    schema_version: Literal[1] = Field(default=1)
    run_id: str
    status: Literal["SUCCESS", "FAILED"] = Field(default="SUCCESS")
    error: Optional[GeneratorError] = None
    started_at: datetime
    finished_at: datetime
    input: ManifestInput
    fingerprints: ManifestFingerprints
    files: List[GeneratedFile] = Field(default_factory=list)
    trace_path: Optional[str] = None

    @model_validator(mode="after")
    def _validate_error_presence(self) -> "ManifestModel":
        if self.status == "SUCCESS" and self.error is not None:
            raise ValueError("error must be omitted for successful manifests")
        if self.status == "FAILED" and self.error is None:
            raise ValueError("error must be set for failed manifests")
        return self


def sha256_path(path: Path) -> str:
    hasher = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def get_errgen_version() -> str:
    try:
        return metadata.version("errgen")
    except metadata.PackageNotFoundError:
        return "0.1.0"


def build_manifest(
    *,
    run_id: str,
    started_at: datetime,
    finished_at: datetime,
    model_path: Path,
    config_path: Optional[Path],
    operations: Sequence[str],
    modules: Sequence[GeneratedModule],
    output_dir: Path,
    trace_path: Optional[Path],
    error: Optional[GeneratorError] = None,
) -> ManifestModel:
    return ManifestModel(
        run_id=run_id,
        status="FAILED" if error is not None else "SUCCESS",
        error=error,
        started_at=started_at,
        finished_at=finished_at,
        input=ManifestInput(
            model_path=str(model_path),
            model_sha256=sha256_path(model_path) if model_path.exists() else None,
            config_path=str(config_path) if config_path else None,
            config_sha256=sha256_path(config_path) if config_path and config_path.exists() else None,
            operations=list(operations),
        ),
        fingerprints=ManifestFingerprints(
            python_version=platform.python_version(),
            platform=platform.platform(),
            errgen_version=get_errgen_version(),
        ),
        files=[
            GeneratedFile(
                operation=module.operation,
                path=str(output_dir / module.filename),
                sha256=module.sha256,
                variants=module.variants,
            )
            for module in modules
        ],
        trace_path=str(trace_path) if trace_path else None,
    )


def write_manifest(manifest: ManifestModel, path: Path) -> Path:
    path.write_text(
        json.dumps(manifest.model_dump(mode="json"), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return path


def load_manifest(path: Path) -> ManifestModel:
    return ManifestModel.model_validate_json(path.read_text(encoding="utf-8"))


def find_drift(manifest: ManifestModel, modules: Sequence[GeneratedModule]) -> Dict[str, Dict[str, Optional[str]]]:
    """Operations whose regenerated source differs from the manifest or from disk."""
    regenerated = {module.operation: module for module in modules}
    drift: Dict[str, Dict[str, Optional[str]]] = {}
    for entry in manifest.files:
        module = regenerated.get(entry.operation)
        actual = module.sha256 if module is not None else None
        on_disk_path = Path(entry.path)
        on_disk = sha256_path(on_disk_path) if on_disk_path.exists() else None
        if actual != entry.sha256 or on_disk != entry.sha256:
            drift[entry.operation] = {"expected": entry.sha256, "regenerated": actual, "on_disk": on_disk}
    return drift

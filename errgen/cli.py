import json
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError

from errgen.combined import CombinedErrorType
from errgen.config import GeneratorConfig, load_config
from errgen.errors import GeneratorError, GeneratorErrorType, NamingCollisionError, SchemaValidityError
from errgen.generator import GeneratedModule, build_operation, generate_modules, render_modules
from errgen.manifest import ManifestModel, build_manifest, find_drift, load_manifest, write_manifest
from errgen.schema import ModelDocument, load_model
from errgen.trace import Tracer


class SchemaKind(str, Enum):
    manifest = "manifest"
    model = "model"
    config = "config"


def _get_schema_model(kind: SchemaKind):
    if kind == SchemaKind.manifest:
        return ManifestModel
    if kind == SchemaKind.model:
        return ModelDocument
    if kind == SchemaKind.config:
        return GeneratorConfig
    raise ValueError(f"Unsupported schema kind: {kind}")


app = typer.Typer(add_completion=False)


@dataclass
class GenerationResult:
    modules: List[GeneratedModule]
    manifest_path: Optional[Path]
    trace_path: Optional[Path]
    error: Optional[GeneratorError]


class ExecutionError(RuntimeError):
    def __init__(self, error: GeneratorError) -> None:
        super().__init__(error.message)
        self.error = error


def _make_config_error(code: str, message: str, path: Optional[Path], details: Optional[dict] = None) -> GeneratorError:
    payload = {"path": str(path)} if path is not None else {}
    if details:
        payload.update(details)
    return GeneratorError(
        type=GeneratorErrorType.config_error,
        code=code,
        message=message,
        is_retryable=False,
        suggested_next_step="Fix the config file format or schema, then retry.",
        details=payload or None,
    )


def _make_io_error(code: str, message: str, path: Optional[Path], details: Optional[dict] = None) -> GeneratorError:
    payload = {"path": str(path)} if path is not None else {}
    if details:
        payload.update(details)
    return GeneratorError(
        type=GeneratorErrorType.io_error,
        code=code,
        message=message,
        is_retryable=False,
        suggested_next_step="Verify the file exists and is readable, then retry.",
        details=payload or None,
    )


def _make_unparsable_model_error(path: Path, exc: Exception) -> GeneratorError:
    return GeneratorError(
        type=GeneratorErrorType.schema_validation_error,
        code="model_unparsable",
        message="Model file could not be parsed.",
        is_retryable=False,
        suggested_next_step="Check the model file is valid YAML or JSON with a mapping at the root.",
        details={"path": str(path), "exception": exc.__class__.__name__, "message": str(exc)},
    )


def _make_drift_error(drift: dict) -> GeneratorError:
    return GeneratorError(
        type=GeneratorErrorType.drift,
        code="drift",
        message="Generated sources differ from the manifest.",
        is_retryable=False,
        suggested_next_step="Run errgen generate again and commit the regenerated files.",
        details={"operations": drift},
    )


def _make_internal_error(exc: Exception) -> GeneratorError:
    return GeneratorError(
        type=GeneratorErrorType.internal_error,
        code="exception",
        message="Unexpected error during generation.",
        is_retryable=False,
        suggested_next_step="Check trace.jsonl for the failing stage and report the issue.",
        details={"exception": exc.__class__.__name__, "message": str(exc)},
    )


def _exit_code_for_error(error: GeneratorError) -> int:
    if error.type in {
        GeneratorErrorType.schema_validation_error,
        GeneratorErrorType.naming_collision,
        GeneratorErrorType.drift,
    }:
        return 2
    return 1


def _error_for_exception(exc: Exception) -> GeneratorError:
    if isinstance(exc, (ExecutionError, SchemaValidityError, NamingCollisionError)):
        return exc.error
    return _make_internal_error(exc)


def _load_generator_config(path: Optional[Path]) -> GeneratorConfig:
    if path is None:
        return GeneratorConfig()
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise ExecutionError(_make_config_error("config_not_found", "Config file not found.", path)) from exc
    except ValidationError as exc:
        raise ExecutionError(
            _make_config_error(
                "config_invalid",
                "Config failed schema validation.",
                path,
                {"errors": exc.errors(include_url=False, include_context=False)},
            )
        ) from exc
    except (ValueError, yaml.YAMLError) as exc:
        raise ExecutionError(_make_config_error("config_unparsable", str(exc), path)) from exc


def _load_model_document(path: Path) -> ModelDocument:
    try:
        return load_model(path)
    except SchemaValidityError:
        raise
    except OSError as exc:
        raise ExecutionError(_make_io_error("model_unreadable", "Model file could not be read.", path)) from exc
    except (ValueError, yaml.YAMLError) as exc:
        raise ExecutionError(_make_unparsable_model_error(path, exc)) from exc


def _write_modules(modules: List[GeneratedModule], output_dir: Path) -> List[Path]:
    paths: List[Path] = []
    for module in modules:
        target = output_dir / module.filename
        try:
            target.write_text(module.source, encoding="utf-8")
        except OSError as exc:
            raise ExecutionError(
                _make_io_error("write_failed", "Generated module could not be written.", target)
            ) from exc
        paths.append(target)
    return paths


def _run_generation(
    *,
    model_path: Path,
    config_path: Optional[Path],
    operations: List[str],
    output_dir: Path,
) -> GenerationResult:
    run_id = uuid.uuid4().hex
    started_at = datetime.now(timezone.utc)
    trace_path = output_dir / "trace.jsonl"
    manifest_path = output_dir / "manifest.json"
    tracer = Tracer(run_id=run_id, trace_path=trace_path, start_time=time.perf_counter())
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        trace_path.unlink(missing_ok=True)
        tracer.emit(
            event="run_start",
            details={"model_path": str(model_path), "output_dir": str(output_dir), "operations": operations or None},
        )
    except OSError as exc:
        unwritable = _make_io_error(
            "output_unwritable",
            "Output directory could not be prepared.",
            output_dir,
            {"exception": exc.__class__.__name__, "message": str(exc)},
        )
        return GenerationResult(modules=[], manifest_path=None, trace_path=None, error=unwritable)

    modules: List[GeneratedModule] = []
    names: List[str] = list(operations)
    error: Optional[GeneratorError] = None
    try:
        with tracer.stage("load_config") as details:
            cfg = _load_generator_config(config_path)
            details["retry_policy"] = cfg.retry_policy
        with tracer.stage("load_model") as details:
            document = _load_model_document(model_path)
            details["namespace"] = document.namespace
            details["operations"] = len(document.operations)
        names = names or list(document.operations)
        combined_types: List[CombinedErrorType] = []
        for name in names:
            with tracer.stage("build", operation=name) as details:
                combined = build_operation(document, name, cfg)
                details["variants"] = [variant.identifier for variant in combined.variants]
            combined_types.append(combined)
        with tracer.stage("render") as details:
            modules = render_modules(combined_types, cfg)
            details["modules"] = [module.filename for module in modules]
        with tracer.stage("write") as details:
            details["paths"] = [str(path) for path in _write_modules(modules, output_dir)]
    except Exception as exc:
        error = _error_for_exception(exc)
        modules = []

    manifest = build_manifest(
        run_id=run_id,
        started_at=started_at,
        finished_at=datetime.now(timezone.utc),
        model_path=model_path,
        config_path=config_path,
        operations=names,
        modules=modules,
        output_dir=output_dir,
        trace_path=trace_path,
        error=error,
    )
    write_manifest(manifest, manifest_path)
    tracer.emit(
        event="run_end",
        status=manifest.status,
        details={"files": len(modules)},
        error=error.model_dump(mode="json") if error else None,
    )
    return GenerationResult(modules=modules, manifest_path=manifest_path, trace_path=trace_path, error=error)


def _emit_payload(payload: dict) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False))


def _emit_error_and_exit(error: GeneratorError, **paths: Optional[Path]) -> None:
    payload: dict[str, object] = {"error": error.model_dump(mode="json")}
    for key, value in paths.items():
        if value is not None:
            payload[key] = str(value)
    _emit_payload(payload)
    raise typer.Exit(code=_exit_code_for_error(error))


@app.command()
def generate(
    model: Path = typer.Option(..., "--model", help="Path to the YAML/JSON model"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to YAML/JSON generator config"),
    operation: Optional[List[str]] = typer.Option(None, "--operation", help="Operation to generate; repeatable"),
    output_dir: Path = typer.Option(Path("generated"), "--output-dir"),
) -> None:
    """Generate one combined error module per operation."""
    result = _run_generation(
        model_path=model,
        config_path=config,
        operations=list(operation or []),
        output_dir=output_dir,
    )
    if result.error is not None:
        _emit_error_and_exit(result.error, manifest_path=result.manifest_path, trace_path=result.trace_path)
    _emit_payload(
        {
            "manifest_path": str(result.manifest_path),
            "trace_path": str(result.trace_path),
            "files": {module.operation: str(output_dir / module.filename) for module in result.modules},
        }
    )


@app.command()
def validate(
    model: Path = typer.Option(..., "--model", help="Path to the YAML/JSON model"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to YAML/JSON generator config"),
) -> None:
    """Check that every operation's errors resolve to a combined error type."""
    try:
        cfg = _load_generator_config(config)
        document = _load_model_document(model)
        combined_types = [build_operation(document, name, cfg) for name in document.operations]
    except Exception as exc:
        _emit_error_and_exit(_error_for_exception(exc))
    _emit_payload(
        {
            "namespace": document.namespace,
            "operations": {
                combined.operation: {
                    "type": combined.name,
                    "errors": len(combined.shape_variants),
                    "identifiers": {
                        variant.wire_name: variant.identifier for variant in combined.shape_variants
                    },
                }
                for combined in combined_types
            },
        }
    )


@app.command()
def check(
    manifest: Path = typer.Option(..., "--manifest", help="Path to manifest.json"),
    config: Optional[Path] = typer.Option(None, "--config", help="Override the config recorded in the manifest"),
) -> None:
    """Regenerate from the manifest's inputs and fail if any output drifted."""
    try:
        record = load_manifest(manifest)
    except (OSError, ValueError) as exc:
        _emit_error_and_exit(_make_io_error("manifest_unreadable", f"Invalid manifest: {exc}", manifest))
    if record.status != "SUCCESS":
        _emit_error_and_exit(
            _make_io_error("manifest_failed", "Manifest records a failed run; nothing to compare.", manifest)
        )
    config_path = config or (Path(record.input.config_path) if record.input.config_path else None)
    try:
        cfg = _load_generator_config(config_path)
        document = _load_model_document(Path(record.input.model_path))
        modules = generate_modules(document, record.input.operations, cfg)
    except Exception as exc:
        _emit_error_and_exit(_error_for_exception(exc))
    drift = find_drift(record, modules)
    if drift:
        _emit_error_and_exit(_make_drift_error(drift), manifest_path=manifest)
    _emit_payload({"manifest_path": str(manifest), "checked": [entry.operation for entry in record.files]})


@app.command()
def schema(
    kind: SchemaKind = typer.Option(..., "--kind", case_sensitive=False),
) -> None:
    """Print the JSON schema of a manifest, model or config document."""
    model = _get_schema_model(kind)
    _emit_payload(model.model_json_schema())

"""Per-operation module generation."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from errgen.classifier import get_retry_policy, retry_policy_names
from errgen.combined import CombinedErrorType, build_combined_error, combined_names
from errgen.config import GeneratorConfig
from errgen.emit.records import record_declarations, record_imports
from errgen.emit.writer import PythonWriter
from errgen.errors import NamingCollisionError
from errgen.naming import IdentifierResolver, snake_case
from errgen.schema import ModelDocument, collect_operation_errors
from errgen.synth import synthesize


@dataclass(frozen=True)
class GeneratedModule:
    operation: str
    filename: str
    source: str
    combined: CombinedErrorType

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.source.encode("utf-8")).hexdigest()

    @property
    def variants(self) -> List[str]:
        return [variant.identifier for variant in self.combined.variants]


def module_filename(operation: str) -> str:
    return f"{snake_case(operation)}_errors.py"


def build_operation(model: ModelDocument, operation: str, cfg: Optional[GeneratorConfig] = None) -> CombinedErrorType:
    cfg = cfg or GeneratorConfig()
    policy = get_retry_policy(cfg.retry_policy)
    if policy is None:
        raise ValueError(f"Unknown retry policy {cfg.retry_policy!r}; expected one of {retry_policy_names()}")
    name, kind_name = combined_names(operation, cfg.error_suffix, cfg.kind_suffix)
    resolver = IdentifierResolver(rename_exception_suffix=cfg.rename_exception_suffix)
    shapes = collect_operation_errors(model, operation, resolver, reserved=(name, kind_name))
    return build_combined_error(operation, shapes, policy, cfg.error_suffix, cfg.kind_suffix)


def render_module(combined: CombinedErrorType, cfg: Optional[GeneratorConfig] = None) -> str:
    cfg = cfg or GeneratorConfig()
    synthesis = synthesize(combined, cfg.runtime_module)
    writer = PythonWriter(doc=f"Errors for the ``{combined.operation}`` operation.")
    if cfg.records_module:
        for variant in combined.shape_variants:
            writer.add_import(cfg.records_module, variant.identifier)
    else:
        writer.add_imports(record_imports(combined))
        for declaration in record_declarations(combined):
            writer.write_declaration(declaration)
    writer.add_imports(synthesis.imports)
    for declaration in synthesis.declarations:
        writer.write_declaration(declaration)
    return writer.render()


def module_for(combined: CombinedErrorType, cfg: Optional[GeneratorConfig] = None) -> GeneratedModule:
    return GeneratedModule(
        operation=combined.operation,
        filename=module_filename(combined.operation),
        source=render_module(combined, cfg),
        combined=combined,
    )


def generate_module(model: ModelDocument, operation: str, cfg: Optional[GeneratorConfig] = None) -> GeneratedModule:
    return module_for(build_operation(model, operation, cfg), cfg)


def render_modules(
    combined_types: Sequence[CombinedErrorType],
    cfg: Optional[GeneratorConfig] = None,
) -> List[GeneratedModule]:
    modules = [module_for(combined, cfg) for combined in combined_types]
    owners: Dict[str, str] = {}
    for module in modules:
        owner = owners.setdefault(module.filename, module.operation)
        if owner != module.operation:
            raise NamingCollisionError(
                f"Operations {owner} and {module.operation} both map to {module.filename}.",
                details={"filename": module.filename, "operations": [owner, module.operation]},
            )
    return modules


def generate_modules(
    model: ModelDocument,
    operations: Optional[Sequence[str]] = None,
    cfg: Optional[GeneratorConfig] = None,
) -> List[GeneratedModule]:
    names = list(operations) if operations else list(model.operations)
    return render_modules([build_operation(model, name, cfg) for name in names], cfg)

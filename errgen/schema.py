"""Input model schema and operation error collection."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import Field, ValidationError, model_validator

from errgen.config import load_document
from errgen.errors import SchemaValidityError, StrictModel
from errgen.naming import IdentifierResolver, member_attrs
from errgen.shapes import ErrorShape, FaultSide, Member

SHAPE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
MEMBER_TARGETS = {
    "String",
    "Integer",
    "Long",
    "Short",
    "Byte",
    "Float",
    "Double",
    "Boolean",
    "Timestamp",
    "Blob",
}


class RetryableSpec(StrictModel):
    throttling: bool = False


class MemberSpec(StrictModel):
    target: str
    documentation: Optional[str] = None


class StructureSpec(StrictModel):
    error: Optional[FaultSide] = None
    retryable: Union[bool, RetryableSpec] = False
    deprecated: bool = False
    documentation: Optional[str] = None
    members: Dict[str, MemberSpec] = Field(default_factory=dict)

    @property
    def is_retryable(self) -> bool:
        return self.retryable is not False

    @property
    def is_throttling(self) -> bool:
        return isinstance(self.retryable, RetryableSpec) and self.retryable.throttling


class OperationSpec(StrictModel):
    errors: List[str] = Field(default_factory=list)
    documentation: Optional[str] = None


class ModelDocument(StrictModel):
    version: int = 1
    namespace: str
    operations: Dict[str, OperationSpec] = Field(default_factory=dict)
    structures: Dict[str, StructureSpec] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_shape_names(self) -> "ModelDocument":
        names = list(self.operations) + list(self.structures)
        for structure in self.structures.values():
            names.extend(structure.members)
        for operation in self.operations.values():
            names.extend(operation.errors)
        invalid = sorted({name for name in names if not SHAPE_NAME.match(name)})
        if invalid:
            raise ValueError(f"invalid shape names: {invalid}")
        return self


def parse_model(data: dict) -> ModelDocument:
    try:
        return ModelDocument.model_validate(data)
    except ValidationError as exc:
        raise SchemaValidityError(
            "invalid_model",
            "Model document failed schema validation.",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc


def load_model(path: Path) -> ModelDocument:
    return parse_model(load_document(path))


def _error_structure(model: ModelDocument, operation: str, name: str) -> StructureSpec:
    structure = model.structures.get(name)
    if structure is None:
        raise SchemaValidityError(
            "unknown_shape",
            f"Operation {operation} references unknown shape {name!r}.",
            details={"operation": operation, "shape": name},
        )
    if structure.error is None:
        raise SchemaValidityError(
            "missing_fault",
            f"Shape {name!r} is used as an error but declares no fault side.",
            details={"operation": operation, "shape": name},
        )
    for member_name, member in structure.members.items():
        if member.target not in MEMBER_TARGETS:
            raise SchemaValidityError(
                "unknown_member_target",
                f"Member {name}.{member_name} targets unsupported shape {member.target!r}.",
                details={"shape": name, "member": member_name, "target": member.target},
            )
    return structure


def operation_error_names(model: ModelDocument, operation: str) -> List[str]:
    declared = model.operations.get(operation)
    if declared is None:
        raise SchemaValidityError(
            "unknown_operation",
            f"Operation {operation!r} is not defined in namespace {model.namespace}.",
            details={"operation": operation},
        )
    seen = set()
    for name in declared.errors:
        if name in seen:
            raise SchemaValidityError(
                "duplicate_error",
                f"Operation {operation} lists {name!r} more than once.",
                details={"operation": operation, "shape": name},
            )
        seen.add(name)
    return list(declared.errors)


def collect_operation_errors(
    model: ModelDocument,
    operation: str,
    resolver: IdentifierResolver,
    reserved: Tuple[str, ...] = (),
) -> Tuple[ErrorShape, ...]:
    """Error shapes of ``operation`` in declaration order, with resolved names."""
    names = operation_error_names(model, operation)
    structures = [_error_structure(model, operation, name) for name in names]
    identifiers = resolver.resolve(names, extra_reserved=reserved)
    shapes: List[ErrorShape] = []
    for name, structure in zip(names, structures):
        attrs = member_attrs(structure.members.keys(), name)
        members = tuple(
            Member(name=member_name, attr=attr, target=member.target)
            for (member_name, member), attr in zip(structure.members.items(), attrs)
        )
        shapes.append(
            ErrorShape(
                wire_name=name,
                identifier=identifiers[name],
                fault=structure.error,
                retryable=structure.is_retryable,
                throttling=structure.is_throttling,
                deprecated=structure.deprecated,
                members=members,
            )
        )
    return tuple(shapes)

"""Record classes for error shapes."""

from __future__ import annotations

from typing import Dict, List, Tuple

from errgen.combined import CombinedErrorType, Variant
from errgen.declarations import ClassDeclaration, Field, Import, Method
from errgen.emit.writer import expression
from errgen.synth import display_expression

TARGET_TYPES: Dict[str, Tuple[str, Tuple[Import, ...]]] = {
    "String": ("str", ()),
    "Integer": ("int", ()),
    "Long": ("int", ()),
    "Short": ("int", ()),
    "Byte": ("int", ()),
    "Float": ("float", ()),
    "Double": ("float", ()),
    "Boolean": ("bool", ()),
    "Timestamp": ("datetime", (Import("datetime", "datetime"),)),
    "Blob": ("bytes", ()),
}


def record_imports(combined: CombinedErrorType) -> List[Import]:
    if not combined.shape_variants:
        return []
    imports = [Import("dataclasses", "dataclass"), Import("typing", "Optional")]
    for variant in combined.shape_variants:
        for member in variant.shape.members:
            imports.extend(TARGET_TYPES[member.target][1])
    return imports


def record_declaration(variant: Variant) -> ClassDeclaration:
    shape = variant.shape
    doc = f"Error shape ``{shape.wire_name}`` ({shape.fault.value} fault)."
    if shape.deprecated:
        doc += f"\n\n.. deprecated:: ``{shape.wire_name}`` is deprecated in the model."
    fields = tuple(
        Field(name=member.attr, annotation=f"Optional[{TARGET_TYPES[member.target][0]}]")
        for member in shape.members
    )
    display = Method(
        name="__str__",
        params=("self",),
        returns="str",
        body=(f"return {expression(display_expression(variant, subject='self'))}",),
    )
    return ClassDeclaration(
        name=shape.identifier,
        doc=doc,
        decorators=("dataclass(frozen=True)",),
        fields=fields,
        methods=(display,),
    )


def record_declarations(combined: CombinedErrorType) -> List[ClassDeclaration]:
    return [record_declaration(variant) for variant in combined.shape_variants]

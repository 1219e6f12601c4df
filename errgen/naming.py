"""Wire name to Python identifier resolution."""

from __future__ import annotations

import builtins
import keyword
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence

from errgen.errors import NamingCollisionError

GENERIC = "Generic"
UNHANDLED = "Unhandled"

# Names visible at module level in generated code.
RESERVED_IDENTIFIERS: FrozenSet[str] = frozenset(
    {GENERIC, UNHANDLED, "ErrorKind", "ErrorMetadata", "Any", "Optional", "Enum", "dataclass", "datetime"}
)
# A shape class may not shadow a builtin the generated module refers to.
RESERVED_BUILTINS: FrozenSet[str] = frozenset(name for name in dir(builtins) if not name.startswith("_"))
# Attribute names of the generated combined type.
RESERVED_MEMBERS: FrozenSet[str] = frozenset(
    {
        "generic",
        "unhandled",
        "is_generic",
        "is_unhandled",
        "kind",
        "inner",
        "message",
        "code",
        "retryable_error_kind",
        "args",
        "with_traceback",
        "add_note",
    }
)

_INVALID_CHARS = re.compile(r"[^0-9A-Za-z_]")
_WORD_BOUNDARY = re.compile(r"(.)([A-Z][a-z]+)")
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_UNDERSCORES = re.compile(r"_+")
_EXCEPTION_SUFFIX = "Exception"


def _escape_keyword(name: str) -> str:
    return f"{name}_" if keyword.iskeyword(name) else name


def sanitize(name: str) -> str:
    cleaned = _INVALID_CHARS.sub("_", name)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


def class_name(wire_name: str, rename_exception_suffix: bool = True) -> str:
    name = sanitize(wire_name)
    if rename_exception_suffix and name.endswith(_EXCEPTION_SUFFIX) and name != _EXCEPTION_SUFFIX:
        name = name[: -len(_EXCEPTION_SUFFIX)] + "Error"
    return _escape_keyword(name)


def snake_case(name: str) -> str:
    value = _WORD_BOUNDARY.sub(r"\1_\2", name)
    value = _LOWER_UPPER.sub(r"\1_\2", value)
    value = _UNDERSCORES.sub("_", value).strip("_").lower() or "_"
    return f"_{value}" if value[0].isdigit() else value


def constant_case(name: str) -> str:
    return snake_case(name).upper()


def member_attr(name: str) -> str:
    return _escape_keyword(snake_case(sanitize(name)))


def member_attrs(names: Iterable[str], shape_name: str) -> List[str]:
    attrs: List[str] = []
    for name in names:
        attr = member_attr(name)
        if attr in attrs:
            raise NamingCollisionError(
                f"Members of {shape_name} map to the same attribute {attr!r}.",
                details={"shape": shape_name, "attribute": attr},
            )
        attrs.append(attr)
    return attrs


@dataclass
class IdentifierResolver:
    """Assigns unique class names to error shapes, in declaration order.

    Each shape becomes a class, a constructor named after its snake form and
    an ``is_<snake>`` predicate on the combined type. A candidate whose class
    name or either attribute name is already taken gets the smallest numeric
    suffix that makes all three unique.
    """

    rename_exception_suffix: bool = True
    reserved: FrozenSet[str] = field(default=RESERVED_IDENTIFIERS)

    def resolve(self, wire_names: Sequence[str], extra_reserved: Iterable[str] = ()) -> Dict[str, str]:
        reserved = set(self.reserved) | set(extra_reserved)
        taken = reserved | RESERVED_BUILTINS
        taken_attrs = {snake_case(name) for name in reserved} | set(RESERVED_MEMBERS)
        resolved: Dict[str, str] = {}
        for wire_name in wire_names:
            if wire_name in resolved:
                raise NamingCollisionError(
                    f"Shape {wire_name!r} is declared more than once.",
                    details={"wire_name": wire_name},
                )
            base = class_name(wire_name, self.rename_exception_suffix)
            candidate = base
            suffix = 1
            while self._clashes(candidate, taken, taken_attrs):
                suffix += 1
                candidate = f"{base}{suffix}"
            snake = snake_case(candidate)
            taken.add(candidate)
            taken_attrs.update({snake, f"is_{snake}"})
            resolved[wire_name] = candidate
        return resolved

    @staticmethod
    def _clashes(candidate: str, taken: set, taken_attrs: set) -> bool:
        snake = snake_case(candidate)
        return candidate in taken or snake in taken_attrs or f"is_{snake}" in taken_attrs

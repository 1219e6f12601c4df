"""Combined error type construction."""

from __future__ import annotations

import keyword
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Optional, Sequence, Tuple

from errgen.classifier import RetryPolicyFn, ShapeClassification, classify_shape, client_only_policy
from errgen.errors import InvariantViolation
from errgen.naming import (
    GENERIC,
    RESERVED_BUILTINS,
    RESERVED_IDENTIFIERS,
    UNHANDLED,
    constant_case,
    sanitize,
    snake_case,
)
from errgen.shapes import ErrorShape

DEFAULT_ERROR_SUFFIX = "Error"
DEFAULT_KIND_SUFFIX = "Kind"


class VariantSource(str, Enum):
    shape = "shape"
    generic = "generic"
    unhandled = "unhandled"


@dataclass(frozen=True)
class Variant:
    """One arm of the combined error.

    ``identifier`` names the arm and the record class it wraps; ``wire_name``
    is what ``code()`` reports. Synthetic arms carry no shape.
    """

    identifier: str
    wire_name: Optional[str]
    source: VariantSource
    shape: Optional[ErrorShape] = None
    classification: Optional[ShapeClassification] = None

    @property
    def member(self) -> str:
        return constant_case(self.identifier)

    @property
    def snake(self) -> str:
        return snake_case(self.identifier)

    @property
    def constructor(self) -> str:
        name = self.snake
        return f"{name}_" if keyword.iskeyword(name) else name

    @property
    def predicate(self) -> str:
        return f"is_{self.snake}"

    @property
    def is_shape(self) -> bool:
        return self.source is VariantSource.shape

    @property
    def renamed(self) -> bool:
        return self.is_shape and self.identifier != self.wire_name

    @property
    def deprecated(self) -> bool:
        return self.classification is not None and self.classification.deprecated


@dataclass(frozen=True)
class CombinedErrorType:
    operation: str
    name: str
    kind_name: str
    variants: Tuple[Variant, ...]

    @property
    def shape_variants(self) -> Tuple[Variant, ...]:
        return tuple(variant for variant in self.variants if variant.is_shape)

    @property
    def generic(self) -> Variant:
        return self.variants[-2]

    @property
    def unhandled(self) -> Variant:
        return self.variants[-1]

    def variant(self, identifier: str) -> Variant:
        for variant in self.variants:
            if variant.identifier == identifier:
                return variant
        raise KeyError(identifier)


def combined_names(
    operation: str,
    error_suffix: str = DEFAULT_ERROR_SUFFIX,
    kind_suffix: str = DEFAULT_KIND_SUFFIX,
) -> Tuple[str, str]:
    name = f"{sanitize(operation)}{error_suffix}"
    return name, f"{name}{kind_suffix}"


def _shape_variant(shape: ErrorShape, policy: RetryPolicyFn) -> Variant:
    if not shape.identifier or not shape.wire_name:
        raise InvariantViolation(f"Error shape is missing a name: {shape!r}")
    if shape.identifier in RESERVED_IDENTIFIERS or shape.identifier in RESERVED_BUILTINS:
        raise InvariantViolation(f"Error shape identifier {shape.identifier!r} is reserved")
    return Variant(
        identifier=shape.identifier,
        wire_name=shape.wire_name,
        source=VariantSource.shape,
        shape=shape,
        classification=classify_shape(shape, policy),
    )


def _append(variants: Tuple[Variant, ...], variant: Variant) -> Tuple[Variant, ...]:
    if any(existing.identifier == variant.identifier for existing in variants):
        raise InvariantViolation(f"Duplicate variant {variant.identifier!r}")
    if any(existing.member == variant.member for existing in variants):
        raise InvariantViolation(f"Variant {variant.identifier!r} clashes with an earlier discriminant")
    return variants + (variant,)


def build_combined_error(
    operation: str,
    shapes: Sequence[ErrorShape],
    policy: RetryPolicyFn = client_only_policy,
    error_suffix: str = DEFAULT_ERROR_SUFFIX,
    kind_suffix: str = DEFAULT_KIND_SUFFIX,
) -> CombinedErrorType:
    """Fold the operation's error shapes into a combined error type.

    Variant order is shape order followed by ``Generic`` and ``Unhandled``.
    Shapes are neither sorted nor filtered here.
    """
    if not operation:
        raise InvariantViolation("Operation name must not be empty")
    name, kind_name = combined_names(operation, error_suffix, kind_suffix)
    variants = reduce(_append, (_shape_variant(shape, policy) for shape in shapes), ())
    variants = _append(variants, Variant(identifier=GENERIC, wire_name=None, source=VariantSource.generic))
    variants = _append(variants, Variant(identifier=UNHANDLED, wire_name=None, source=VariantSource.unhandled))
    return CombinedErrorType(operation=operation, name=name, kind_name=kind_name, variants=variants)

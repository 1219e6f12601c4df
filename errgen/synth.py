"""Query surface synthesis for combined error types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from errgen.combined import CombinedErrorType, Variant, VariantSource
from errgen.declarations import (
    Arm,
    Choice,
    ClassDeclaration,
    Const,
    Declaration,
    EnumDeclaration,
    EnumMember,
    Expr,
    Import,
    Method,
    Ref,
    Template,
)

INNER = "self._inner"


@dataclass(frozen=True)
class Synthesis:
    imports: Tuple[Import, ...]
    declarations: Tuple[Declaration, ...]


def display_expression(variant: Variant, subject: str = INNER) -> Expr:
    """Display rule shared by the combined type and the record classes.

    A renamed shape shows ``"<identifier> [<wire name>]"`` and never its
    message. Otherwise the message, when present, follows a colon.
    """
    if variant.source is not VariantSource.shape:
        return Ref(f"str({subject})")
    if variant.renamed:
        return Const(f"{variant.identifier} [{variant.wire_name}]")
    classification = variant.classification
    if classification is None or not classification.has_message:
        return Const(variant.identifier)
    message = Ref(f"{subject}.{classification.message_attr}")
    return Choice(
        test=Ref(f"{message.source} is not None"),
        then=Template((f"{variant.identifier}: ", message)),
        otherwise=Const(variant.identifier),
    )


def _message_expression(variant: Variant) -> Expr:
    if variant.source is VariantSource.generic:
        return Ref(f"{INNER}.message")
    classification = variant.classification
    if variant.is_shape and classification is not None and classification.has_message:
        return Ref(f"{INNER}.{classification.message_attr}")
    return Const(None)


def _code_expression(variant: Variant) -> Expr:
    if variant.source is VariantSource.generic:
        return Ref(f"{INNER}.code")
    if variant.is_shape:
        return Const(variant.wire_name)
    return Const(None)


def _retry_expression(variant: Variant) -> Expr:
    if variant.source is VariantSource.generic:
        return Ref(f"{INNER}.retryable_error_kind()")
    classification = variant.classification
    if variant.is_shape and classification is not None and classification.retry_kind is not None:
        return Ref(f"ErrorKind.{classification.retry_kind.name}")
    return Const(None)


def _member_ref(combined: CombinedErrorType, variant: Variant) -> str:
    return f"{combined.kind_name}.{variant.member}"


def _dispatch(
    combined: CombinedErrorType,
    *,
    name: str,
    returns: str,
    doc: str,
    expression,
) -> Method:
    # Unhandled is always last and becomes the fall-through return.
    *matched, fallback = combined.variants
    return Method(
        name=name,
        params=("self",),
        returns=returns,
        doc=doc,
        arms=tuple(Arm(member=_member_ref(combined, variant), result=expression(variant)) for variant in matched),
        result=expression(fallback),
        result_comment=fallback.identifier,
    )


def _kind_enum(combined: CombinedErrorType) -> EnumDeclaration:
    return EnumDeclaration(
        name=combined.kind_name,
        doc=f"Discriminant of :class:`{combined.name}`.",
        members=tuple(
            EnumMember(name=variant.member, value=variant.identifier, deprecated=variant.deprecated)
            for variant in combined.variants
        ),
    )


def _constructor(combined: CombinedErrorType, variant: Variant) -> Method:
    if variant.source is VariantSource.generic:
        return Method(
            name="generic",
            params=("cls", "metadata: ErrorMetadata"),
            returns=combined.name,
            doc="Wrap error metadata that matched no modeled shape.",
            decorator="classmethod",
            body=(f"return cls({_member_ref(combined, variant)}, metadata)",),
        )
    if variant.source is VariantSource.unhandled:
        return Method(
            name="unhandled",
            params=("cls", "payload: Any"),
            returns=combined.name,
            doc="Wrap an error that carried no usable metadata.",
            decorator="classmethod",
            body=(f"return cls({_member_ref(combined, variant)}, payload)",),
        )
    doc = f"Wrap a ``{variant.identifier}`` (wire name ``{variant.wire_name}``)."
    if variant.deprecated:
        doc += f"\n\n.. deprecated:: ``{variant.wire_name}`` is deprecated in the model."
    return Method(
        name=variant.constructor,
        params=("cls", f"inner: {variant.identifier}"),
        returns=combined.name,
        doc=doc,
        decorator="classmethod",
        body=(f"return cls({_member_ref(combined, variant)}, inner)",),
    )


def _predicate(combined: CombinedErrorType, variant: Variant) -> Method:
    return Method(
        name=variant.predicate,
        params=("self",),
        returns="bool",
        body=(f"return self._kind is {_member_ref(combined, variant)}",),
    )


def _combined_class(combined: CombinedErrorType) -> ClassDeclaration:
    methods: List[Method] = [
        Method(
            name="__init__",
            params=("self", f"kind: {combined.kind_name}", "inner: Any"),
            returns="None",
            body=("super().__init__(kind, inner)", "self._kind = kind", "self._inner = inner"),
        ),
        Method(
            name="kind",
            params=("self",),
            returns=combined.kind_name,
            decorator="property",
            body=("return self._kind",),
        ),
        Method(
            name="inner",
            params=("self",),
            returns="Any",
            decorator="property",
            body=("return self._inner",),
        ),
    ]
    methods.extend(_constructor(combined, variant) for variant in combined.variants)
    methods.append(
        _dispatch(
            combined,
            name="message",
            returns="Optional[str]",
            doc="Human readable message, if the error carries one.",
            expression=_message_expression,
        )
    )
    methods.append(
        _dispatch(
            combined,
            name="code",
            returns="Optional[str]",
            doc="Wire error code.",
            expression=_code_expression,
        )
    )
    methods.append(
        _dispatch(
            combined,
            name="retryable_error_kind",
            returns="Optional[ErrorKind]",
            doc="Retry classification of this error, if any.",
            expression=_retry_expression,
        )
    )
    methods.extend(_predicate(combined, variant) for variant in combined.variants)
    methods.append(
        _dispatch(
            combined,
            name="__str__",
            returns="str",
            doc=None,
            expression=display_expression,
        )
    )
    methods.append(
        Method(
            name="__repr__",
            params=("self",),
            returns="str",
            body=('return f"{type(self).__name__}({self._kind.value}, {self._inner!r})"',),
        )
    )
    return ClassDeclaration(
        name=combined.name,
        doc=f"Error returned by the ``{combined.operation}`` operation.",
        bases=("Exception",),
        methods=tuple(methods),
    )


def synthesize(combined: CombinedErrorType, runtime_module: str = "errgen.runtime") -> Synthesis:
    """Declarations for ``combined``: the discriminant enum, then the error class."""
    imports = (
        Import("enum", "Enum"),
        Import("typing", "Any"),
        Import("typing", "Optional"),
        Import(runtime_module, "ErrorKind"),
        Import(runtime_module, "ErrorMetadata"),
    )
    return Synthesis(imports=imports, declarations=(_kind_enum(combined), _combined_class(combined)))

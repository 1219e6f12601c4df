"""Semantic declarations handed from the synthesizer to the writer.

The synthesizer decides names, dispatch arms and string templates; the
writer decides how they are spelled as Python source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Const:
    value: Union[str, bool, None]


@dataclass(frozen=True)
class Ref:
    source: str


@dataclass(frozen=True)
class Template:
    parts: Tuple[Union[str, Ref], ...]


@dataclass(frozen=True)
class Choice:
    test: Ref
    then: "Expr"
    otherwise: "Expr"


Expr = Union[Const, Ref, Template, Choice]


@dataclass(frozen=True)
class Arm:
    member: str
    result: Expr


@dataclass(frozen=True)
class Method:
    name: str
    params: Tuple[str, ...]
    returns: str
    doc: Optional[str] = None
    decorator: Optional[str] = None
    body: Tuple[str, ...] = ()
    dispatch: str = "self._kind"
    arms: Tuple[Arm, ...] = ()
    result: Optional[Expr] = None
    result_comment: Optional[str] = None


@dataclass(frozen=True)
class Field:
    name: str
    annotation: str
    default: Expr = Const(None)


@dataclass(frozen=True)
class EnumMember:
    name: str
    value: str
    deprecated: bool = False


@dataclass(frozen=True)
class EnumDeclaration:
    name: str
    doc: str
    members: Tuple[EnumMember, ...]
    base: str = "Enum"


@dataclass(frozen=True)
class ClassDeclaration:
    name: str
    doc: str
    bases: Tuple[str, ...] = ()
    decorators: Tuple[str, ...] = ()
    fields: Tuple[Field, ...] = ()
    methods: Tuple[Method, ...] = ()


@dataclass(frozen=True)
class Import:
    module: str
    name: str


Declaration = Union[EnumDeclaration, ClassDeclaration]

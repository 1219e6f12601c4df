"""Python source writer."""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Set

from errgen.declarations import (
    Choice,
    ClassDeclaration,
    Const,
    Declaration,
    EnumDeclaration,
    Expr,
    Import,
    Method,
    Ref,
    Template,
)

HEADER = "# Code generated by errgen. DO NOT EDIT."
STDLIB_MODULES = {"dataclasses", "datetime", "enum", "typing"}


def literal(value: object) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if value is None or isinstance(value, bool):
        return repr(value)
    raise TypeError(f"Unsupported literal: {value!r}")


def _fstring_text(text: str) -> str:
    escaped = json.dumps(text, ensure_ascii=False)[1:-1]
    return escaped.replace("{", "{{").replace("}", "}}")


def expression(expr: Expr) -> str:
    if isinstance(expr, Const):
        return literal(expr.value)
    if isinstance(expr, Ref):
        return expr.source
    if isinstance(expr, Template):
        pieces = [
            f"{{{part.source}}}" if isinstance(part, Ref) else _fstring_text(part)
            for part in expr.parts
        ]
        return 'f"' + "".join(pieces) + '"'
    if isinstance(expr, Choice):
        return f"{expression(expr.then)} if {expr.test.source} else {expression(expr.otherwise)}"
    raise TypeError(f"Unsupported expression: {expr!r}")


class PythonWriter:
    """Ordered append target for one generated module.

    Imports are collected as declarations are written and rendered at the
    top; everything else is emitted in the order it was written.
    """

    def __init__(self, *, doc: Optional[str] = None, indent: str = "    ") -> None:
        self.doc = doc
        self.indent = indent
        self._depth = 0
        self._lines: List[str] = []
        self._imports: Dict[str, Set[str]] = {}

    def add_import(self, module: str, name: str) -> None:
        self._imports.setdefault(module, set()).add(name)

    def add_imports(self, imports: Iterable[Import]) -> None:
        for item in imports:
            self.add_import(item.module, item.name)

    def line(self, text: str = "") -> None:
        self._lines.append(f"{self.indent * self._depth}{text}" if text else "")

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self.line()

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        self.line(header)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def docstring(self, text: Optional[str]) -> None:
        if not text:
            return
        lines = text.split("\n")
        if len(lines) == 1:
            self.line(f'"""{text}"""')
            return
        self.line(f'"""{lines[0]}')
        for extra in lines[1:]:
            self.line(extra)
        self.line('"""')

    def write_declaration(self, declaration: Declaration) -> None:
        if self._lines:
            self.blank(2)
        if isinstance(declaration, EnumDeclaration):
            self._write_enum(declaration)
        elif isinstance(declaration, ClassDeclaration):
            self._write_class(declaration)
        else:
            raise TypeError(f"Unsupported declaration: {declaration!r}")

    def _write_enum(self, declaration: EnumDeclaration) -> None:
        with self.block(f"class {declaration.name}({declaration.base}):"):
            self.docstring(declaration.doc)
            self.blank()
            for member in declaration.members:
                if member.deprecated:
                    self.line("# Deprecated in the model.")
                self.line(f"{member.name} = {literal(member.value)}")

    def _write_class(self, declaration: ClassDeclaration) -> None:
        for decorator in declaration.decorators:
            self.line(f"@{decorator}")
        bases = f"({', '.join(declaration.bases)})" if declaration.bases else ""
        with self.block(f"class {declaration.name}{bases}:"):
            self.docstring(declaration.doc)
            if declaration.fields:
                self.blank()
            for field in declaration.fields:
                self.line(f"{field.name}: {field.annotation} = {expression(field.default)}")
            for method in declaration.methods:
                self.blank()
                self._write_method(method)

    def _write_method(self, method: Method) -> None:
        if method.decorator:
            self.line(f"@{method.decorator}")
        with self.block(f"def {method.name}({', '.join(method.params)}) -> {method.returns}:"):
            self.docstring(method.doc)
            for statement in method.body:
                self.line(statement)
            for arm in method.arms:
                with self.block(f"if {method.dispatch} is {arm.member}:"):
                    self.line(f"return {expression(arm.result)}")
            if method.result is not None:
                if method.result_comment:
                    self.line(f"# {method.result_comment}")
                self.line(f"return {expression(method.result)}")

    def _import_lines(self) -> List[str]:
        stdlib = sorted(module for module in self._imports if module in STDLIB_MODULES)
        others = sorted(module for module in self._imports if module not in STDLIB_MODULES)
        lines = ["from __future__ import annotations", ""]
        for group in (stdlib, others):
            for module in group:
                names = ", ".join(sorted(self._imports[module]))
                lines.append(f"from {module} import {names}")
            if group:
                lines.append("")
        return lines

    def render(self) -> str:
        head = [HEADER]
        if self.doc:
            head.append(f'"""{self.doc}"""')
        head.append("")
        head.extend(self._import_lines())
        head.append("")
        return "\n".join(head + self._lines).rstrip() + "\n"

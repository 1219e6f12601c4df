import pytest

from errgen.declarations import ClassDeclaration, Const, EnumDeclaration, EnumMember, Field, Method
from errgen.emit.writer import HEADER, PythonWriter, literal


def test_imports_are_grouped_and_deduplicated():
    writer = PythonWriter(doc="Demo.")
    writer.add_import("errgen.runtime", "ErrorKind")
    writer.add_import("typing", "Optional")
    writer.add_import("typing", "Any")
    writer.add_import("typing", "Optional")
    source = writer.render()
    lines = source.splitlines()
    assert lines[0] == HEADER
    assert lines[1] == '"""Demo."""'
    assert "from __future__ import annotations" in lines
    assert source.count("from typing import Any, Optional") == 1
    assert lines.index("from typing import Any, Optional") < lines.index("from errgen.runtime import ErrorKind")
    assert source.endswith("\n") and not source.endswith("\n\n")


def test_declarations_are_separated_by_two_blank_lines():
    writer = PythonWriter()
    writer.write_declaration(
        EnumDeclaration(
            name="DemoKind",
            doc="Kinds.",
            members=(EnumMember("OLD", "Old", deprecated=True), EnumMember("NEW", "New")),
        )
    )
    writer.write_declaration(
        ClassDeclaration(
            name="Demo",
            doc=None,
            decorators=("dataclass(frozen=True)",),
            fields=(Field("message", "Optional[str]"),),
            methods=(Method(name="__str__", params=("self",), returns="str", body=('return "Demo"',)),),
        )
    )
    body = writer.render().split("\n\n\n", 1)[1]
    assert "# Deprecated in the model.\n    OLD = \"Old\"" in body
    assert "\n\n\n@dataclass(frozen=True)\nclass Demo:\n" in body
    assert "    message: Optional[str] = None" in body


def test_literal_escapes_strings():
    assert literal('say "hi"') == '"say \\"hi\\""'
    assert literal(None) == "None"
    with pytest.raises(TypeError):
        literal(3)


def test_const_default_renders_as_literal():
    writer = PythonWriter()
    writer.write_declaration(
        ClassDeclaration(name="Flag", doc="Flag.", fields=(Field("on", "bool", Const(False)),))
    )
    assert "    on: bool = False" in writer.render()

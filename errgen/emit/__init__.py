"""Source emission."""

from errgen.emit.records import record_declarations
from errgen.emit.writer import PythonWriter

__all__ = ["PythonWriter", "record_declarations"]

"""Combined operation error generator."""

from errgen.combined import CombinedErrorType, Variant, build_combined_error
from errgen.generator import GeneratedModule, generate_module, generate_modules
from errgen.runtime import ErrorKind, ErrorMetadata
from errgen.shapes import ErrorShape, FaultSide

__all__ = [
    "CombinedErrorType",
    "ErrorKind",
    "ErrorMetadata",
    "ErrorShape",
    "FaultSide",
    "GeneratedModule",
    "Variant",
    "build_combined_error",
    "generate_module",
    "generate_modules",
]

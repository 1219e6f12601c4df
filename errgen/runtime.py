"""Runtime support imported by generated error modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Coarse retry classification of an error."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    THROTTLING_ERROR = "throttling_error"
    TRANSIENT_ERROR = "transient_error"


@dataclass(frozen=True)
class ErrorMetadata:
    """Error details recovered by a protocol layer without a matching shape."""

    code: Optional[str] = None
    message: Optional[str] = None
    retry_kind: Optional[ErrorKind] = None

    def retryable_error_kind(self) -> Optional[ErrorKind]:
        return self.retry_kind

    def __str__(self) -> str:
        parts = []
        if self.code is not None:
            parts.append(f"code: {self.code!r}")
        if self.message is not None:
            parts.append(f"message: {self.message!r}")
        return "Error {" + ", ".join(parts) + "}" if parts else "Error"

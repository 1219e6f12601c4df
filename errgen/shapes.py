"""Error shape records consumed by the generator core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class FaultSide(str, Enum):
    client = "client"
    server = "server"


@dataclass(frozen=True)
class Member:
    name: str
    attr: str
    target: str


@dataclass(frozen=True)
class ErrorShape:
    """One declared error.

    ``wire_name`` is the name the protocol reports; ``identifier`` is the
    class name the resolver picked for the generated record. The two differ
    when the resolver had to rename the shape.
    """

    wire_name: str
    identifier: str
    fault: FaultSide
    retryable: bool = False
    throttling: bool = False
    deprecated: bool = False
    members: Tuple[Member, ...] = ()

    @property
    def renamed(self) -> bool:
        return self.identifier != self.wire_name

    def member(self, name: str) -> Optional[Member]:
        for member in self.members:
            if member.name == name:
                return member
        return None

"""Fault side and retry classification of error shapes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from errgen.runtime import ErrorKind
from errgen.shapes import ErrorShape, FaultSide

MESSAGE_TARGETS = {"String"}


@dataclass(frozen=True)
class ShapeClassification:
    fault: FaultSide
    retry_kind: Optional[ErrorKind]
    message_attr: Optional[str]
    deprecated: bool

    @property
    def has_message(self) -> bool:
        return self.message_attr is not None


RetryPolicyFn = Callable[[ErrorShape], Optional[ErrorKind]]
_RETRY_POLICY_REGISTRY: Dict[str, RetryPolicyFn] = {}


def register_retry_policy(name: str) -> Callable[[RetryPolicyFn], RetryPolicyFn]:
    def decorator(func: RetryPolicyFn) -> RetryPolicyFn:
        _RETRY_POLICY_REGISTRY[name] = func
        return func

    return decorator


def get_retry_policy(name: str) -> Optional[RetryPolicyFn]:
    return _RETRY_POLICY_REGISTRY.get(name)


def retry_policy_names() -> List[str]:
    return sorted(_RETRY_POLICY_REGISTRY)


@register_retry_policy("client-only")
def client_only_policy(shape: ErrorShape) -> Optional[ErrorKind]:
    if shape.retryable and shape.fault is FaultSide.client:
        return ErrorKind.CLIENT_ERROR
    return None


@register_retry_policy("smithy")
def smithy_policy(shape: ErrorShape) -> Optional[ErrorKind]:
    if not shape.retryable:
        return None
    if shape.throttling:
        return ErrorKind.THROTTLING_ERROR
    if shape.fault is FaultSide.client:
        return ErrorKind.CLIENT_ERROR
    return ErrorKind.SERVER_ERROR


def message_attr(shape: ErrorShape) -> Optional[str]:
    for member in shape.members:
        if member.name.lower() == "message" and member.target in MESSAGE_TARGETS:
            return member.attr
    return None


def classify_shape(shape: ErrorShape, policy: RetryPolicyFn = client_only_policy) -> ShapeClassification:
    return ShapeClassification(
        fault=shape.fault,
        retry_kind=policy(shape),
        message_attr=message_attr(shape),
        deprecated=shape.deprecated,
    )

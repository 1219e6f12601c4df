import pytest

from errgen.classifier import classify_shape, get_retry_policy, register_retry_policy, smithy_policy
from errgen.runtime import ErrorKind
from errgen.shapes import ErrorShape, FaultSide, Member


def _shape(**overrides) -> ErrorShape:
    values = {"wire_name": "Oops", "identifier": "Oops", "fault": FaultSide.client}
    values.update(overrides)
    return ErrorShape(**values)


@pytest.mark.parametrize(
    "fault,retryable,expected",
    [
        (FaultSide.client, True, ErrorKind.CLIENT_ERROR),
        (FaultSide.client, False, None),
        (FaultSide.server, True, None),
        (FaultSide.server, False, None),
    ],
)
def test_default_policy_only_classifies_retryable_client_errors(fault, retryable, expected):
    assert classify_shape(_shape(fault=fault, retryable=retryable)).retry_kind == expected


def test_smithy_policy_distinguishes_throttling_and_server():
    assert smithy_policy(_shape(retryable=True, throttling=True)) == ErrorKind.THROTTLING_ERROR
    assert smithy_policy(_shape(fault=FaultSide.server, retryable=True)) == ErrorKind.SERVER_ERROR
    assert smithy_policy(_shape(fault=FaultSide.server)) is None


def test_message_field_detection():
    with_message = _shape(members=(Member(name="Message", attr="message", target="String"),))
    wrong_type = _shape(members=(Member(name="message", attr="message", target="Integer"),))
    assert classify_shape(with_message).message_attr == "message"
    assert classify_shape(with_message).has_message
    assert not classify_shape(wrong_type).has_message
    assert not classify_shape(_shape()).has_message


def test_deprecation_is_passed_through_without_changing_retry():
    plain = classify_shape(_shape(retryable=True))
    deprecated = classify_shape(_shape(retryable=True, deprecated=True))
    assert deprecated.deprecated and not plain.deprecated
    assert deprecated.retry_kind == plain.retry_kind


def test_registered_policy_is_retrievable():
    @register_retry_policy("always-transient")
    def _always(shape):
        return ErrorKind.TRANSIENT_ERROR

    policy = get_retry_policy("always-transient")
    assert classify_shape(_shape(), policy).retry_kind == ErrorKind.TRANSIENT_ERROR
    assert get_retry_policy("missing") is None

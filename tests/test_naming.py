import pytest

from errgen.errors import NamingCollisionError
from errgen.naming import IdentifierResolver, class_name, member_attr, member_attrs, snake_case


def test_snake_case():
    assert snake_case("InvalidGreeting") == "invalid_greeting"
    assert snake_case("HTTPError") == "http_error"
    assert snake_case("retryAfterSeconds") == "retry_after_seconds"
    assert snake_case("Foo_Bar") == "foo_bar"


def test_class_name_renames_exception_suffix():
    assert class_name("FooException") == "FooError"
    assert class_name("FooException", rename_exception_suffix=False) == "FooException"
    assert class_name("Exception") == "Exception"
    assert class_name("bad-name") == "bad_name"
    assert class_name("None") == "None_"


def test_member_attr_escapes_keywords():
    assert member_attr("Message") == "message"
    assert member_attr("class") == "class_"


def test_member_attrs_reject_clashes():
    with pytest.raises(NamingCollisionError):
        member_attrs(["fooBar", "foo_bar"], "Shape")


def test_resolver_keeps_order_and_reserved_names():
    resolver = IdentifierResolver()
    resolved = resolver.resolve(
        ["InvalidGreeting", "FooException", "Generic", "GreetingError"],
        extra_reserved=("GreetingError", "GreetingErrorKind"),
    )
    assert list(resolved) == ["InvalidGreeting", "FooException", "Generic", "GreetingError"]
    assert resolved["FooException"] == "FooError"
    assert resolved["Generic"] == "Generic2"
    assert resolved["GreetingError"] == "GreetingError2"


def test_resolver_suffixes_collisions_after_rename():
    resolved = IdentifierResolver().resolve(["FooError", "FooException"])
    assert resolved == {"FooError": "FooError", "FooException": "FooError2"}


def test_resolver_avoids_snake_and_predicate_clashes():
    resolved = IdentifierResolver().resolve(["HttpError", "HTTPError", "Throttle", "IsThrottle", "Message"])
    assert resolved["HttpError"] == "HttpError"
    assert resolved["HTTPError"] == "HTTPError2"
    assert resolved["IsThrottle"] == "IsThrottle2"
    assert resolved["Message"] == "Message2"


def test_resolver_rejects_duplicate_wire_names():
    with pytest.raises(NamingCollisionError) as excinfo:
        IdentifierResolver().resolve(["A", "A"])
    assert excinfo.value.error.code == "naming_collision"


def test_resolver_never_shadows_builtins():
    resolved = IdentifierResolver().resolve(["Exception", "str", "type", "super", "Throttling"])
    assert resolved == {
        "Exception": "Exception2",
        "str": "str2",
        "type": "type2",
        "super": "super2",
        "Throttling": "Throttling",
    }

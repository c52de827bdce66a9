import pytest


@pytest.mark.parametrize(
    ("input", "expected"),
    [
        ("Post", "posts"),
        ("LongComment", "long-comments"),
        ("HTTPRequest", "http-requests"),
        ("Category", "categories"),
        ("Box", "boxes"),
        ("Day", "days"),
    ],
)
def test_default_type_name(input, expected):
    from ..defaults import default_type_name

    assert default_type_name(input) == expected


def test_default_type_name_with_formatter():
    from ..defaults import IdentityNameFormatterImpl, default_type_name

    assert default_type_name("LongComment", IdentityNameFormatterImpl()) == "long_comments"


def test_name_formatter():
    from ..defaults import DefaultNameFormatterImpl

    target = DefaultNameFormatterImpl()
    assert target.format("long_content") == "long-content"
    assert target.unformat("long-content") == "long_content"
    assert DefaultNameFormatterImpl(separator=".").format("a_b") == "a.b"


def test_default_type_keys():
    from ..defaults import default_type_keys

    class Base:
        pass

    class Derived(Base):
        pass

    class Pinned:
        def jsonapi_type_key(self):
            return "Other"

    assert list(default_type_keys(Derived())) == ["Derived", "Base"]
    assert list(default_type_keys(Pinned())) == ["Other"]

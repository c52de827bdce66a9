import pytest


@pytest.mark.parametrize(
    ("input", "expected"),
    [
        (None, {}),
        ([], {}),
        (["foo"], {"foo": {"_include": True}}),
        (["foo.bar"], {"foo": {"bar": {"_include": True}}}),
        (["foo", "foo.bar"], {"foo": {"_include": True, "bar": {"_include": True}}}),
        (
            ["foo", "bar", "bar.baz"],
            {"foo": {"_include": True}, "bar": {"_include": True, "baz": {"_include": True}}},
        ),
        (
            ["foo", "foo.bar", "foo.bar.baz"],
            {"foo": {"_include": True, "bar": {"_include": True, "baz": {"_include": True}}}},
        ),
        (
            ["foo", "foo.bar.baz"],
            {"foo": {"_include": True, "bar": {"baz": {"_include": True}}}},
        ),
        ("foo, foo.bar.baz", {"foo": {"_include": True, "bar": {"baz": {"_include": True}}}}),
        ("foo,,foo , foo", {"foo": {"_include": True}}),
    ],
)
def test_parse_relationship_paths(input, expected):
    from ..paths import parse_relationship_paths

    assert parse_relationship_paths(input).as_dict() == expected


def test_order_independence():
    from ..paths import parse_relationship_paths

    assert parse_relationship_paths(["a", "a.b"]) == parse_relationship_paths(["a.b", "a"])
    assert parse_relationship_paths("x.y, a, a.b.c") == parse_relationship_paths(
        ["a.b.c", "x.y", "a"]
    )
    assert parse_relationship_paths(["a"]) != parse_relationship_paths(["a.b"])


def test_intermediate_node_is_not_included():
    from ..paths import parse_relationship_paths

    tree = parse_relationship_paths(["comments.author"])
    comments = tree.children["comments"]
    assert not comments.include
    assert comments.children["author"].include
    assert tree.included_children() == frozenset()
    assert comments.included_children() == frozenset(["author"])


def test_included_children():
    from ..paths import parse_relationship_paths

    tree = parse_relationship_paths(["author", "comments", "tags.owner"])
    assert tree.included_children() == frozenset(["author", "comments"])
    assert not tree.include
    assert bool(tree)
    assert not bool(parse_relationship_paths(None))


@pytest.mark.parametrize("input", ["a..b", ".a", "a.", ["a", "b. .c"]])
def test_malformed_path(input):
    from ..paths import parse_relationship_paths

    from ..exceptions import IncludeError, MalformedIncludePathError

    with pytest.raises(MalformedIncludePathError) as excinfo:
        parse_relationship_paths(input)
    assert isinstance(excinfo.value, IncludeError)

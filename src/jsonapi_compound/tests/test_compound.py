import pytest

from .testing import Factory, Post, TaggedPost, User, declare_resources


@pytest.fixture
def registry():
    return declare_resources()


@pytest.fixture
def factory():
    return Factory()


@pytest.fixture
def target(registry):
    from ..compound import CompoundResolver
    from ..defaults import DefaultNameFormatterImpl

    return CompoundResolver(registry, DefaultNameFormatterImpl())


def resolve(target, natives, paths, **kwargs):
    from ..paths import parse_relationship_paths
    from ..resource import RenderOptions

    return target.resolve(natives, parse_relationship_paths(paths), RenderOptions(**kwargs))


def resolve_document(target, natives, paths, **kwargs):
    from ..paths import parse_relationship_paths
    from ..resource import RenderOptions

    return target.resolve_document(
        natives, parse_relationship_paths(paths), RenderOptions(**kwargs)
    )


def keys_of(result):
    return [key for key in result]


def test_nothing_requested(target, factory):
    post = factory.post(with_author=True)
    assert keys_of(resolve(target, [post], None)) == []


def test_to_one(target, factory):
    post = factory.post(with_author=True)
    result = resolve(target, [post], ["author"])
    assert keys_of(result) == [("users", str(post.author.id))]
    assert result[("users", str(post.author.id))].native is post.author
    assert result[("users", str(post.author.id))].include_linkages == set()


def test_null_to_one(target, factory):
    post = factory.post(author=None)
    assert keys_of(resolve(target, [post], ["author"])) == []


def test_to_many(target, factory):
    c1 = factory.long_comment()
    c2 = factory.long_comment()
    post = factory.post(long_comments=[c1, c2])
    assert keys_of(resolve(target, [post], ["long-comments"])) == [
        ("long-comments", str(c1.id)),
        ("long-comments", str(c2.id)),
    ]


def test_one_copy_of_each_resource(target, factory):
    comment = factory.long_comment()
    post = factory.post(long_comments=[comment, comment])
    assert keys_of(resolve(target, [post], ["long-comments"])) == [
        ("long-comments", str(comment.id)),
    ]


def test_dedup_across_primaries(target, factory):
    user = factory.user()
    posts = [factory.post(author=user), factory.post(author=user)]
    assert keys_of(resolve(target, posts, ["author"])) == [("users", str(user.id))]


def test_last_seen_native_wins(target, factory):
    first = User(id=100, name="first")
    second = User(id=100, name="second")
    posts = [factory.post(author=first), factory.post(author=second)]
    result = resolve(target, posts, ["author"])
    assert len(result) == 1
    assert result[("users", "100")].native is second


def test_recursive_loading_includes_only_requested_leaves(target, factory):
    user = factory.user()
    comments = [factory.long_comment(user=user), factory.long_comment(user=user)]
    post = factory.post(with_author=True, long_comments=comments)
    for c in comments:
        c.post = post

    result = resolve(target, [post], ["long-comments.post.author"])
    assert keys_of(result) == [("users", str(post.author.id))]


def test_recursive_loading_of_multiple_to_one(target, factory):
    first_user = factory.user()
    second_user = factory.user()
    comments = [factory.long_comment(user=first_user), factory.long_comment(user=second_user)]
    post = factory.post(with_author=True, long_comments=comments)
    for c in comments:
        c.post = post

    result = resolve(target, [post], ["long-comments.user"])
    assert keys_of(result) == [
        ("users", str(first_user.id)),
        ("users", str(second_user.id)),
    ]


def test_overlapping_paths(target, factory):
    user = factory.user()
    comments = [factory.long_comment(user=user), factory.long_comment(user=user)]
    post = factory.post(with_author=True, long_comments=comments)
    for c in comments:
        c.post = post

    result = resolve(target, [post], "long-comments, long-comments.post.author")
    assert keys_of(result) == [
        ("long-comments", str(comments[0].id)),
        ("long-comments", str(comments[1].id)),
        ("users", str(post.author.id)),
    ]


def test_cycles_terminate(target, factory):
    comment = factory.long_comment()
    post = factory.post(long_comments=[comment])
    comment.post = post

    result = resolve(target, [post], ["long-comments.post.long-comments.post"])
    # the only resource reached is the primary one, which is never included
    assert keys_of(result) == []
    result = resolve(target, [comment], ["post.long-comments.post.long-comments"])
    assert keys_of(result) == [("posts", str(post.id))]


def test_skips_none(target, factory):
    post = factory.post(with_author=True)
    assert keys_of(resolve(target, [None, post], ["author"])) == [
        ("users", str(post.author.id)),
    ]


def test_invalid_include(target, factory):
    from ..exceptions import InvalidIncludeError

    user = factory.user()
    with pytest.raises(InvalidIncludeError) as excinfo:
        resolve(target, [user], ["fake-attr"])
    assert excinfo.value.resource_type == "users"
    assert excinfo.value.name == "fake-attr"
    assert str(excinfo.value) == (
        '"fake-attr" is not a valid include for resource "users"; the resource has no relationships'
    )


def test_invalid_nested_include(target, factory):
    from ..exceptions import InvalidIncludeError

    post = factory.post(with_author=True)
    with pytest.raises(InvalidIncludeError) as excinfo:
        resolve(target, [post], ["author.posts"])
    assert excinfo.value.resource_type == "users"
    assert excinfo.value.name == "posts"


def test_invalid_include_lists_available(target, factory):
    from ..exceptions import InvalidIncludeError

    post = factory.post()
    with pytest.raises(InvalidIncludeError) as excinfo:
        resolve(target, [post], ["comments"])
    assert excinfo.value.suggestion is None
    assert str(excinfo.value) == (
        '"comments" is not a valid include for resource "posts"; '
        'available relationships are author, and long-comments'
    )


def test_internal_spelling_is_rejected_with_suggestion(target, factory):
    from ..exceptions import InvalidIncludeError

    post = factory.post(long_comments=[factory.long_comment()])
    with pytest.raises(InvalidIncludeError) as excinfo:
        resolve(target, [post], ["long_comments"])
    assert excinfo.value.suggestion == "long-comments"
    assert str(excinfo.value).endswith('did you mean "long-comments"?')


def test_subclass_uses_own_descriptor(target, factory):
    comment = factory.long_comment()
    post = factory.tagged_post(long_comments=[comment])
    comment.post = post
    result = resolve(target, [comment], ["post"])
    assert keys_of(result) == [("tagged-posts", str(post.id))]
    assert isinstance(result[("tagged-posts", str(post.id))].native, TaggedPost)


def test_visibility_stops_walk(factory):
    from ..compound import CompoundResolver
    from ..declarative import Attr, Declarative, ToOne
    from ..defaults import DefaultNameFormatterImpl

    decl = Declarative()

    @decl(Post)
    class PostResource:
        author = ToOne(if_=lambda post, ctx: ctx.get("show_author", False))

    @decl(User)
    class UserResource:
        name = Attr()

    target = CompoundResolver(decl.registry, DefaultNameFormatterImpl())
    post = factory.post(with_author=True)
    assert keys_of(resolve(target, [post], ["author"])) == []
    assert keys_of(resolve(target, [post], ["author"], context={"show_author": True})) == [
        ("users", str(post.author.id)),
    ]


def test_linkage_sets_are_unioned(target, factory):
    author = factory.user()
    comment = factory.long_comment(user=author)
    post = factory.post(author=author, long_comments=[comment])
    comment.post = post

    primary_linkages, result = resolve_document(
        target,
        [comment],
        ["post", "post.author", "user", "post.long-comments", "post.long-comments.user"],
    )
    assert keys_of(result) == [
        ("posts", str(post.id)),
        ("users", str(author.id)),
    ]
    assert result[("posts", str(post.id))].include_linkages == {"author", "long-comments"}
    assert result[("users", str(author.id))].include_linkages == set()
    assert primary_linkages == [frozenset(["post", "user"])]



def test_path_back_to_primary_adds_linkage(target, factory):
    user = factory.user()
    comments = [factory.long_comment(), factory.long_comment()]
    post = factory.post(author=user, long_comments=comments)
    for c in comments:
        c.post = post
    other = factory.post()

    primary_linkages, result = resolve_document(
        target, [post, other], ["long-comments.post.author"]
    )
    assert keys_of(result) == [("users", str(user.id))]
    assert primary_linkages == [frozenset(["author"]), frozenset()]


def test_resources_without_id(target, factory):
    first = User(id=None, name="first")
    second = User(id="  ", name="second")
    posts = [factory.post(author=first), factory.post(author=second), factory.post(author=first)]
    result = resolve(target, posts, ["author"])
    # told apart by identity, a blank id being no id
    assert [entry.native for entry in result.values()] == [first, second]
    assert all(key[0] == "users" and not isinstance(key[1], str) for key in result)



def test_polymorphic_primaries(target, factory):
    from ..exceptions import InvalidIncludeError

    post = factory.post(with_author=True)
    user = factory.user()

    # only the first native reached at a path is validated
    result = resolve(target, [post, user], ["author"])
    assert keys_of(result) == [("users", str(post.author.id))]

    with pytest.raises(InvalidIncludeError):
        resolve(target, [user, post], ["author"])


def test_explicit_primary_descriptor(target, factory):
    from ..models import ResourceDescriptor, ToOneRelationshipDescriptor
    from ..paths import parse_relationship_paths
    from ..resource import RenderOptions

    descr = ResourceDescriptor(
        "posts",
        to_one=[ToOneRelationshipDescriptor("writer", lambda post, ctx: post.author)],
    )
    post = factory.post(with_author=True)
    result = target.resolve([post], parse_relationship_paths(["writer"]), RenderOptions(), descr)
    assert keys_of(result) == [("users", str(post.author.id))]

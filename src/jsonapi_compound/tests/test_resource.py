import pytest

from .testing import Factory, LongComment, Post, User, declare_resources


@pytest.fixture
def registry():
    return declare_resources()


@pytest.fixture
def factory():
    return Factory()


@pytest.fixture
def target(registry):
    from ..resource import ResourceRenderer

    return ResourceRenderer(registry)


@pytest.fixture
def render():
    from ..serde.models import SingletonDocumentRepr
    from ..serde.renderer import ReprRenderer

    renderer = ReprRenderer()

    def _(repr_):
        return renderer(SingletonDocumentRepr(data=repr_))["data"]

    return _


def test_render_none(target):
    from ..resource import RenderOptions

    assert target.render(None, None, RenderOptions()) is None


def test_render_without_linkages(target, render, factory):
    from ..resource import RenderOptions

    post = factory.post(with_author=True)
    result = render(target.render(post, None, RenderOptions()))
    assert result == {
        "type": "posts",
        "id": str(post.id),
        "attributes": {
            "title": post.title,
            "long-content": post.body,
        },
        "relationships": {
            "author": {
                "links": {
                    "self": f"/posts/{post.id}/relationships/author",
                    "related": f"/posts/{post.id}/author",
                },
            },
            "long-comments": {
                "links": {
                    "self": f"/posts/{post.id}/relationships/long-comments",
                    "related": f"/posts/{post.id}/long-comments",
                },
            },
        },
        "links": {
            "self": f"/posts/{post.id}",
        },
    }


def test_render_with_linkages(target, render, factory):
    from ..resource import RenderOptions

    c1 = factory.long_comment()
    c2 = factory.long_comment()
    post = factory.post(with_author=True, long_comments=[c1, c2])
    result = render(
        target.render(
            post,
            None,
            RenderOptions(
                include_linkages=frozenset(["author", "long-comments"]),
                base_url="http://example.com",
            ),
        )
    )
    assert result["relationships"] == {
        "author": {
            "links": {
                "self": f"http://example.com/posts/{post.id}/relationships/author",
                "related": f"http://example.com/posts/{post.id}/author",
            },
            "data": {"type": "users", "id": str(post.author.id)},
        },
        "long-comments": {
            "links": {
                "self": f"http://example.com/posts/{post.id}/relationships/long-comments",
                "related": f"http://example.com/posts/{post.id}/long-comments",
            },
            "data": [
                {"type": "long-comments", "id": str(c1.id)},
                {"type": "long-comments", "id": str(c2.id)},
            ],
        },
    }
    assert result["links"] == {"self": f"http://example.com/posts/{post.id}"}


def test_render_empty_linkages(target, render, factory):
    from ..resource import RenderOptions

    post = factory.post(author=None, long_comments=[])
    result = render(
        target.render(
            post, None, RenderOptions(include_linkages=frozenset(["author", "long-comments"]))
        )
    )
    assert result["relationships"]["author"]["data"] is None
    assert result["relationships"]["long-comments"]["data"] == []


def test_render_without_id(target, render):
    from ..resource import RenderOptions

    result = render(
        target.render(User(id=None, name="anonymous"), None, RenderOptions())
    )
    assert result == {"type": "users", "attributes": {"name": "anonymous"}}


def test_render_blank_id(target, render):
    from ..resource import RenderOptions

    result = render(
        target.render(User(id="  ", name="anonymous"), None, RenderOptions())
    )
    assert "id" not in result
    assert "links" not in result


def test_sparse_fieldsets(target, render, factory):
    from ..resource import RenderOptions

    post = factory.post(with_author=True)
    options = RenderOptions(
        fields={"posts": frozenset(["title", "author"]), "users": frozenset()},
        include_linkages=frozenset(["author"]),
    )
    result = render(target.render(post, None, options))
    assert result["attributes"] == {"title": post.title}
    assert list(result["relationships"]) == ["author"]
    assert result["relationships"]["author"]["data"] == {
        "type": "users",
        "id": str(post.author.id),
    }

    # an empty fieldset leaves nothing but the identity
    result = render(target.render(post.author, None, options))
    assert "attributes" not in result


def test_fieldsets_of_unrelated_type(target, render, factory):
    from ..resource import RenderOptions

    post = factory.post()
    options = RenderOptions(fields={"users": frozenset(["name"])})
    result = render(target.render(post, None, options))
    assert list(result["attributes"]) == ["title", "long-content"]


def test_visibility_uses_context(render, factory):
    from ..declarative import Attr, Declarative, ToOne
    from ..resource import RenderOptions, ResourceRenderer

    decl = Declarative()

    @decl(Post)
    class PostResource:
        title = Attr()
        body = Attr(if_=lambda post, ctx: ctx.get("show_body", False))
        author = ToOne(unless=lambda post, ctx: ctx.get("anonymous", False))

    @decl(User)
    class UserResource:
        name = Attr()

    target = ResourceRenderer(decl.registry)
    post = factory.post(with_author=True)

    result = render(target.render(post, None, RenderOptions()))
    assert list(result["attributes"]) == ["title"]
    assert list(result["relationships"]) == ["author"]

    result = render(
        target.render(
            post, None, RenderOptions(context={"show_body": True, "anonymous": True})
        )
    )
    assert list(result["attributes"]) == ["title", "body"]
    assert "relationships" not in result


def test_include_data_and_links_flags(render, factory):
    from ..declarative import Declarative, ToMany, ToOne
    from ..resource import RenderOptions, ResourceRenderer

    decl = Declarative()

    @decl(Post)
    class PostResource:
        author = ToOne(include_links=False)
        long_comments = ToMany(include_data=True, include_links=False)

    @decl(LongComment)
    class LongCommentResource:
        pass

    target = ResourceRenderer(decl.registry)
    comment = factory.long_comment()
    post = factory.post(long_comments=[comment])
    result = render(target.render(post, None, RenderOptions()))
    # the author relationship would have neither links nor data
    assert result["relationships"] == {
        "long-comments": {
            "data": [{"type": "long-comments", "id": str(comment.id)}],
        },
    }


def test_meta_and_self_link(render, factory):
    from ..declarative import Attr, Declarative, ToOne
    from ..resource import RenderOptions, ResourceRenderer

    decl = Declarative()

    @decl(Post)
    class PostResource:
        class Meta:
            type = "articles"

            @staticmethod
            def meta(post, ctx):
                return {"copyright": "Copyright 2015 Example Corp.", "authors": ["Aliens"]}

            @staticmethod
            def self_link(post, base_url, type, id):
                return f"{base_url}/blog/{type}/{id}"

        title = Attr()
        author = ToOne()

    target = ResourceRenderer(decl.registry)
    post = factory.post()
    result = render(target.render(post, None, RenderOptions()))
    assert result["type"] == "articles"
    assert result["meta"] == {
        "copyright": "Copyright 2015 Example Corp.",
        "authors": ["Aliens"],
    }
    assert result["links"] == {"self": f"/blog/articles/{post.id}"}
    assert result["relationships"]["author"]["links"] == {
        "self": f"/blog/articles/{post.id}/relationships/author",
        "related": f"/blog/articles/{post.id}/author",
    }


def test_self_link_disabled(render, factory):
    from ..declarative import Attr, Declarative, ToOne
    from ..resource import RenderOptions, ResourceRenderer

    decl = Declarative()

    @decl(Post)
    class PostResource:
        class Meta:
            self_link = staticmethod(lambda post, base_url, type, id: None)

        title = Attr()
        author = ToOne()

    target = ResourceRenderer(decl.registry)
    post = factory.post()
    result = render(target.render(post, None, RenderOptions()))
    assert "links" not in result
    assert "relationships" not in result


def test_identify(target, factory):
    from ..resource import RenderOptions

    comment = factory.long_comment()
    repr_ = target.identify(comment, RenderOptions())
    assert (repr_.type, repr_.id) == ("long-comments", str(comment.id))


def test_unknown_type(target):
    from ..exceptions import UnknownResourceTypeError
    from ..resource import RenderOptions

    with pytest.raises(UnknownResourceTypeError):
        target.render(object(), None, RenderOptions())


def test_explicit_descriptor(target, render, factory):
    from ..models import AttributeDescriptor, ResourceDescriptor
    from ..resource import RenderOptions

    descr = ResourceDescriptor("simplest-posts", attributes=[AttributeDescriptor("title")])
    post = factory.post()
    result = render(target.render(post, descr, RenderOptions()))
    assert result == {
        "type": "simplest-posts",
        "id": str(post.id),
        "attributes": {"title": post.title},
        "links": {"self": f"/simplest-posts/{post.id}"},
    }

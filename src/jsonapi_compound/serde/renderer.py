"""
:py:mod:`jsonapi_compound.serde.renderer` module contains a set of classes in charge of rendering internal representation of JSON-API document to JSON.

Synopsis
--------

.. code-block:: python

   import json

   from jsonapi_compound.serde.renderer import ReprRenderer

   renderer = ReprRenderer()

   internal_repr = SingletonDocumentRepr(
       data=ResourceRepr(
           type="posts",
           id="1",
           attributes=[
               ("title", "Title for Post 1"),
           ],
           relationships=[
               (
                   "comments",
                   LinkageRepr(
                       links=LinksRepr(
                           self_="/posts/1/relationships/comments",
                           related="/posts/1/comments",
                       ),
                       data=[
                           ResourceIdRepr(type="comments", id="1"),
                           ResourceIdRepr(type="comments", id="2"),
                       ],
                   ),
               ),
           ],
           links=LinksRepr(self_="/posts/1"),
       ),
       included=[],
   )

   print(json.dumps(renderer(internal_repr)))

"""

import base64
import collections.abc
import datetime
import decimal
import enum
import typing
from collections import OrderedDict

from .models import (
    AttributeValue,
    CollectionDocumentRepr,
    DocumentReprBase,
    ErrorItem,
    ErrorRepr,
    JSONScalar,
    JSONValue,
    LinkageRepr,
    LinksRepr,
    Missing,
    MutableJSONObject,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
    SourceRepr,
)


class TZLocalizer(typing.Protocol):
    def localize(self, dt: datetime.datetime) -> datetime.datetime:
        ...  # pragma: nocover


class ReprRendererContext:
    parent: typing.Optional["ReprRendererContext"]
    path: typing.Tuple[str, ...]

    @property
    def pointer(self) -> str:
        """
        The JSON pointer of the node being rendered.
        """
        return "".join(
            "/" + component.replace("~", "~0").replace("/", "~1") for component in self.path
        )

    def __truediv__(self, component: str) -> "ReprRendererContext":
        return ReprRendererContext(parent=self, path=self.path + (component,))

    def __getitem__(self, index: int) -> "ReprRendererContext":
        return ReprRendererContext(parent=self, path=self.path + (str(index),))

    def __init__(
        self,
        parent: typing.Optional["ReprRendererContext"],
        path: typing.Tuple[str, ...] = (),
    ):
        self.parent = parent
        self.path = path


class ReprRenderer:
    _render_decimal_as_str: bool = True
    _render_embedded_links: bool = True
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None

    def _dict_factory(self, items: typing.Iterable[typing.Tuple[str, typing.Any]]):
        return OrderedDict(items)

    def _render_datetime(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(datetime.datetime, repr_)
        if _repr.tzinfo is None:
            if self._assume_naive_timezone_as is None:
                raise ValueError(f"{ctx.pointer}: naive datetime {_repr}")
            else:
                if hasattr(self._assume_naive_timezone_as, "localize"):
                    _repr = typing.cast(TZLocalizer, self._assume_naive_timezone_as).localize(_repr)
                else:
                    _repr = _repr.replace(tzinfo=self._assume_naive_timezone_as)
        return _repr.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(datetime.date, repr_)
        return _repr.isoformat()

    def _render_decimal(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(decimal.Decimal, repr_)
        return str(_repr) if self._render_decimal_as_str else float(_repr)

    def _render_bytes(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        return base64.b64encode(typing.cast(bytes, repr_)).decode("ascii")

    def _render_enum(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONValue:
        return self._render_value(ctx, typing.cast(enum.Enum, repr_).value)

    def _render_passthrough(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        return typing.cast(JSONScalar, repr_)

    _supported_types: typing.ClassVar[typing.Dict[type, typing.Callable]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        enum.Enum: _render_enum,
        str: _render_passthrough,
        int: _render_passthrough,
        float: _render_passthrough,
        bool: _render_passthrough,
        None.__class__: _render_passthrough,
    }

    def _render_value(self, ctx: ReprRendererContext, repr_: typing.Any) -> JSONValue:
        # fast pass
        r = self._supported_types.get(type(repr_))
        if r is not None:
            return r(self, ctx, repr_)

        for type_, r in self._supported_types.items():
            if isinstance(repr_, type_):
                return r(self, ctx, repr_)

        if isinstance(repr_, collections.abc.Mapping):
            return self._dict_factory(
                (str(k), self._render_value(ctx / str(k), v)) for k, v in repr_.items()
            )
        elif isinstance(repr_, (collections.abc.Sequence, collections.abc.Set)):
            return [self._render_value(ctx[i], v) for i, v in enumerate(repr_)]

        raise TypeError(f"{ctx.pointer}: unsupported type {repr_!r}")

    def _render_relationship(
        self, ctx: ReprRendererContext, repr_: LinkageRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.links:
            retval["links"] = self._render_links(ctx / "links", repr_.links)
        if repr_.data is Missing:
            pass
        elif repr_.data is None:
            retval["data"] = None
        elif isinstance(repr_.data, ResourceIdRepr):
            retval["data"] = self._render_resource_link(ctx / "data", repr_.data)
        else:
            retval["data"] = [
                self._render_resource_link((ctx / "data")[i], item)
                for i, item in enumerate(typing.cast(typing.Sequence[ResourceIdRepr], repr_.data))
            ]

        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resource_link(
        self, ctx: ReprRendererContext, repr_: ResourceIdRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {
            "type": repr_.type,
        }
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resource(self, ctx: ReprRendererContext, repr_: ResourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {
            "type": repr_.type,
        }
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.attributes:
            new_ctx = ctx / "attributes"
            retval["attributes"] = self._dict_factory(
                (k, self._render_value(new_ctx / k, v)) for k, v in repr_.attributes.items()
            )
        if repr_.relationships:
            new_ctx = ctx / "relationships"
            retval["relationships"] = self._dict_factory(
                (k, self._render_relationship(new_ctx / k, v))
                for k, v in repr_.relationships.items()
            )
        if self._render_embedded_links and repr_.links:
            retval["links"] = self._render_links(ctx / "links", repr_.links)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_links(self, ctx: ReprRendererContext, repr_: LinksRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.self_ is not None:
            retval["self"] = repr_.self_
        if repr_.related is not None:
            retval["related"] = repr_.related
        if repr_.first is not None:
            retval["first"] = repr_.first
        if repr_.prev is not None:
            retval["prev"] = repr_.prev
        if repr_.next is not None:
            retval["next"] = repr_.next
        if repr_.last is not None:
            retval["last"] = repr_.last
        return retval

    def _render_source(self, ctx: ReprRendererContext, repr_: SourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.pointer is not None:
            retval["pointer"] = repr_.pointer
        if repr_.parameter is not None:
            retval["parameter"] = repr_.parameter
        return retval

    def _render_error(self, ctx: ReprRendererContext, repr_: ErrorItem) -> MutableJSONObject:
        if not isinstance(repr_, ErrorRepr):
            # already shaped by the caller
            return typing.cast(MutableJSONObject, repr_)
        retval: MutableJSONObject = {}
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.links:
            retval["links"] = self._render_links(ctx / "links", repr_.links)
        if repr_.status is not None:
            retval["status"] = repr_.status
        if repr_.code is not None:
            retval["code"] = repr_.code
        if repr_.title is not None:
            retval["title"] = repr_.title
        if repr_.detail is not None:
            retval["detail"] = repr_.detail
        if repr_.source is not None:
            retval["source"] = self._render_source(ctx / "source", repr_.source)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _populate_document_common(
        self, target: MutableJSONObject, ctx: ReprRendererContext, repr_: DocumentReprBase
    ) -> None:
        if repr_.included is not None:
            new_ctx = ctx / "included"
            target["included"] = [
                self._render_resource(new_ctx[i], r) for i, r in enumerate(repr_.included)
            ]
        if repr_.jsonapi:
            target["jsonapi"] = repr_.jsonapi
        if repr_.meta:
            target["meta"] = repr_.meta
        if repr_.links:
            target["links"] = self._render_links(ctx / "links", repr_.links)
        if repr_.errors:
            new_ctx = ctx / "errors"
            target["errors"] = [
                self._render_error(new_ctx[i], e) for i, e in enumerate(repr_.errors)
            ]

    def _render_singleton_document(
        self, ctx: ReprRendererContext, repr_: SingletonDocumentRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.data is None:
            retval["data"] = None
        elif isinstance(repr_.data, ResourceRepr):
            retval["data"] = self._render_resource(ctx / "data", repr_.data)
        self._populate_document_common(retval, ctx, repr_)
        return retval

    def _render_collection_document(
        self, ctx: ReprRendererContext, repr_: CollectionDocumentRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        retval["data"] = [
            self._render_resource((ctx / "data")[i], item) for i, item in enumerate(repr_.data)
        ]
        self._populate_document_common(retval, ctx, repr_)
        return retval

    def __call__(
        self, repr_: typing.Union[SingletonDocumentRepr, CollectionDocumentRepr]
    ) -> MutableJSONObject:
        ctx = ReprRendererContext(None)
        if isinstance(repr_, SingletonDocumentRepr):
            return self._render_singleton_document(ctx, repr_)
        elif isinstance(repr_, CollectionDocumentRepr):
            return self._render_collection_document(ctx, repr_)
        else:
            raise AssertionError("never get here")

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        render_embedded_links: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self._render_decimal_as_str = render_decimal_as_str
        self._render_embedded_links = render_embedded_links
        self._assume_naive_timezone_as = assume_naive_timezone_as

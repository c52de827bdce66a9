"""
:py:mod:`jsonapi_compound.document` module assembles whole JSON:API documents
out of native objects.

Synopsis
--------

.. code-block:: python

   from jsonapi_compound.declarative import Attr, Declarative, ToMany, ToOne
   from jsonapi_compound.document import Serializer
   from jsonapi_compound.registry import Registry

   registry = Registry()
   decl = Declarative(registry)

   @decl(Post)
   class PostResource:
       title = Attr()
       author = ToOne()
       comments = ToMany()

   serializer = Serializer(registry)
   doc = serializer.serialize(post, include="comments,author", base_url="http://example.com")

"""

import dataclasses
import logging
import typing

from .compound import CompoundResolver, IncludedResource
from .defaults import DefaultNameFormatterImpl
from .error_objects import adapt_errors
from .exceptions import AmbiguousCollectionError
from .interfaces import NameFormatter
from .models import Context, ResourceDescriptor
from .paths import parse_relationship_paths
from .registry import Registry
from .resource import Fieldsets, RenderOptions, ResourceRenderer
from .serde.models import (
    CollectionDocumentRepr,
    LinksRepr,
    Missing,
    MutableJSONObject,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .serde.renderer import ReprRenderer
from .utils import UNSPECIFIED, UnspecifiedType, is_collection_like, split_names

logger = logging.getLogger(__name__)

LinksLike = typing.Union[LinksRepr, typing.Mapping[str, typing.Optional[str]]]


@dataclasses.dataclass(frozen=True)
class SerializeOptions:
    is_collection: typing.Union[UnspecifiedType, bool] = UNSPECIFIED
    """
    Whether the primary data is a collection. Must be given when it is one.
    """

    include: typing.Union[None, str, typing.Sequence[str]] = None
    """
    Dot-separated relationship paths, as a list or a comma-separated string.
    """

    context: typing.Optional[Context] = None
    fields: typing.Optional[typing.Mapping[str, typing.Union[str, typing.Iterable[str]]]] = None
    """
    Sparse fieldsets keyed by type name; each value is a list of wire names or a comma-separated string.
    """

    base_url: str = ""
    namespace: typing.Optional[str] = None
    meta: typing.Optional[typing.Mapping[str, typing.Any]] = None
    links: typing.Optional[LinksLike] = None
    jsonapi: typing.Optional[typing.Mapping[str, typing.Any]] = None
    errors: typing.Any = None
    skip_collection_check: bool = False
    descriptor: typing.Optional[ResourceDescriptor] = None
    """
    Forces the descriptor used for the primary objects instead of looking it up.
    """


_links_keys = {
    "self": "self_",
    "related": "related",
    "next": "next",
    "prev": "prev",
    "first": "first",
    "last": "last",
}


def build_links(links: LinksLike) -> LinksRepr:
    if isinstance(links, LinksRepr):
        return links
    kwargs: typing.Dict[str, typing.Optional[str]] = {}
    for k, v in links.items():
        attr = _links_keys.get(k)
        if attr is None:
            raise ValueError(f"unsupported link: {k}")
        kwargs[attr] = v
    return LinksRepr(**kwargs)


def build_fieldsets(
    fields: typing.Optional[typing.Mapping[str, typing.Union[str, typing.Iterable[str]]]]
) -> typing.Optional[Fieldsets]:
    if fields is None:
        return None
    return {type_name: frozenset(split_names(names)) for type_name, names in fields.items()}


class Serializer:
    """
    The entry point for building JSON:API documents.

    :param Registry registry: the descriptors of the domain types.
    :param Optional[NameFormatter] name_formatter: maps internal member names to wire names. Dasherizes by default.
    :param Optional[ReprRenderer] repr_renderer: turns the built document into JSON-compatible objects.
    """

    registry: Registry
    name_formatter: NameFormatter
    resource_renderer: ResourceRenderer
    compound_resolver: CompoundResolver
    repr_renderer: ReprRenderer

    def _is_collection(self, natives: typing.Any, options: SerializeOptions) -> bool:
        if options.skip_collection_check:
            return bool(options.is_collection)
        if isinstance(options.is_collection, UnspecifiedType):
            if is_collection_like(natives):
                raise AmbiguousCollectionError(
                    "primary data looks like a collection; "
                    "pass is_collection=True to serialize it as one, or is_collection=False otherwise"
                )
            return False
        if options.is_collection and not is_collection_like(natives):
            raise AmbiguousCollectionError(
                f"is_collection=True was given, but {type(natives).__name__} is not a collection"
            )
        return options.is_collection

    def _render_included(
        self,
        resolved: typing.Iterable[IncludedResource],
        render_options: RenderOptions,
    ) -> typing.List[ResourceRepr]:
        included: typing.List[ResourceRepr] = []
        for entry in resolved:
            repr_ = self.resource_renderer.render(
                entry.native,
                None,
                dataclasses.replace(
                    render_options, include_linkages=frozenset(entry.include_linkages)
                ),
            )
            assert repr_ is not None
            included.append(repr_)
        return included

    def build_document(
        self, natives: typing.Any, options: SerializeOptions
    ) -> typing.Union[SingletonDocumentRepr, CollectionDocumentRepr]:
        """
        Builds the internal representation of the document for the given primary data.

        :param Any natives: a native object, :py:const:`None`, or a collection of native objects.
        :param SerializeOptions options: the options.
        :return: a :py:class:`SingletonDocumentRepr` or a :py:class:`CollectionDocumentRepr`.
        :raises AmbiguousCollectionError: if it cannot be told whether the primary data is a collection.
        :raises MalformedIncludePathError: if an include path has an empty segment.
        :raises InvalidIncludeError: if an include path is not valid for the resources it walks.
        """
        is_collection = self._is_collection(natives, options)
        tree = parse_relationship_paths(options.include) if options.include is not None else None
        render_options = RenderOptions(
            context=options.context if options.context is not None else {},
            fields=build_fieldsets(options.fields),
            include_linkages=(tree.included_children() if tree is not None else frozenset()),
            base_url=options.base_url,
            namespace=options.namespace,
        )

        primary: typing.List[typing.Any]
        if is_collection:
            primary = [native for native in (natives or ()) if native is not None]
        else:
            primary = [natives] if natives is not None else []
        logger.debug(
            "serializing %d primary resource(s) (collection: %s)", len(primary), is_collection
        )

        primary_linkages = [render_options.include_linkages] * len(primary)
        included: typing.Optional[typing.List[ResourceRepr]] = None
        if tree is not None:
            included = []
            if primary:
                primary_linkages, resolved = self.compound_resolver.resolve_document(
                    primary, tree, render_options, options.descriptor
                )
                logger.debug("resolved %d included resource(s)", len(resolved))
                included = self._render_included(resolved.values(), render_options)

        data = [
            self.resource_renderer.render(
                native,
                options.descriptor,
                dataclasses.replace(render_options, include_linkages=linkages),
            )
            for native, linkages in zip(primary, primary_linkages)
        ]

        kwargs: typing.Dict[str, typing.Any] = dict(
            included=included,
            errors=adapt_errors(options.errors, self.name_formatter),
        )
        if options.jsonapi:
            kwargs["jsonapi"] = dict(options.jsonapi)
        if options.meta:
            kwargs["meta"] = dict(options.meta)
        if options.links:
            kwargs["links"] = build_links(options.links)

        if is_collection:
            return CollectionDocumentRepr(data=data, **kwargs)
        else:
            return SingletonDocumentRepr(data=data[0] if data else None, **kwargs)

    def serialize(
        self, natives: typing.Any, options: typing.Optional[SerializeOptions] = None, **kwargs
    ) -> MutableJSONObject:
        """
        Serializes native objects into a JSON:API document.

        :param Any natives: a native object, :py:const:`None`, or a collection of native objects.
        :param Optional[SerializeOptions] options: the options. Keyword arguments override its fields.
        :return: a JSON-compatible dictionary.
        """
        if options is None:
            options = SerializeOptions(**kwargs)
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)
        return self.repr_renderer(self.build_document(natives, options))

    def serialize_errors(
        self, errors: typing.Any, options: typing.Optional[SerializeOptions] = None, **kwargs
    ) -> MutableJSONObject:
        """
        Serializes a document that carries only error objects.

        :param Any errors: validation errors, or a sequence of error objects (:py:class:`ErrorRepr` or mappings).
        :param Optional[SerializeOptions] options: ``jsonapi``, ``meta`` and ``links`` are honored.
        :return: a JSON-compatible dictionary.
        """
        if options is None:
            options = SerializeOptions(**kwargs)
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)
        doc = SingletonDocumentRepr(
            data=Missing,
            errors=adapt_errors(errors, self.name_formatter),
        )
        if options.jsonapi:
            doc.jsonapi = dict(options.jsonapi)
        if options.meta:
            doc.meta = dict(options.meta)
        if options.links:
            doc.links = build_links(options.links)
        return self.repr_renderer(doc)

    def __init__(
        self,
        registry: Registry,
        name_formatter: typing.Optional[NameFormatter] = None,
        repr_renderer: typing.Optional[ReprRenderer] = None,
    ):
        self.registry = registry
        self.name_formatter = (
            name_formatter if name_formatter is not None else DefaultNameFormatterImpl()
        )
        self.resource_renderer = ResourceRenderer(registry, self.name_formatter)
        self.compound_resolver = CompoundResolver(registry, self.name_formatter)
        self.repr_renderer = repr_renderer if repr_renderer is not None else ReprRenderer()

import dataclasses
import typing

from .defaults import DefaultNameFormatterImpl
from .interfaces import NameFormatter
from .models import (
    Context,
    RelationshipDescriptor,
    RelationshipType,
    ResourceDescriptor,
    ResourceMemberDescriptor,
)
from .registry import Registry
from .serde.builders import ResourceIdReprBuilder, ResourceReprBuilder
from .serde.models import URL, LinksRepr, ResourceIdRepr, ResourceRepr

Fieldsets = typing.Mapping[str, typing.FrozenSet[str]]


@dataclasses.dataclass(frozen=True)
class RenderOptions:
    """
    Per-call options handed down to every resource rendered in a document.
    """

    context: Context = dataclasses.field(default_factory=dict)
    """
    Opaque, read-only mapping passed to every accessor and predicate.
    """

    fields: typing.Optional[Fieldsets] = None
    """
    Sparse fieldsets keyed by type name. A type that does not appear is not filtered.
    """

    include_linkages: typing.FrozenSet[str] = frozenset()
    """
    Wire names of the relationships of this resource that must carry ``data``.
    """

    base_url: str = ""

    namespace: typing.Optional[str] = None
    """
    Qualifier for descriptor lookups of related objects.
    """


def default_self_link(native: typing.Any, base_url: str, type: str, id: str) -> str:
    return f"{base_url}/{type}/{id}"


class ResourceRenderer:
    """
    Renders single native objects into :py:class:`ResourceRepr` objects.

    :param Registry registry: resolves descriptors of related objects.
    :param Optional[NameFormatter] name_formatter: maps internal member names to wire names.
    """

    registry: Registry
    name_formatter: NameFormatter

    def _select(
        self,
        type_name: str,
        member: ResourceMemberDescriptor,
        native: typing.Any,
        options: RenderOptions,
    ) -> bool:
        if options.fields is not None:
            fieldset = options.fields.get(type_name)
            if fieldset is not None and self.name_formatter.format(member.name) not in fieldset:
                return False
        return member.is_visible(native, options.context)

    def _resolve_self_link(
        self,
        descr: ResourceDescriptor,
        native: typing.Any,
        type_name: str,
        id_: typing.Optional[str],
        options: RenderOptions,
    ) -> typing.Optional[URL]:
        if id_ is None:
            return None
        self_link = descr.self_link if descr.self_link is not None else default_self_link
        return self_link(native, options.base_url, type_name, id_)

    def _build_identifier(
        self, builder: ResourceIdReprBuilder, native: typing.Any, options: RenderOptions
    ) -> None:
        descr = self.registry.lookup(native, options.namespace)
        builder.identify(descr.type_of(native), descr.wire_id_of(native))

    def _build_relationship(
        self,
        builder: ResourceReprBuilder,
        rel: RelationshipDescriptor,
        native: typing.Any,
        self_link: typing.Optional[URL],
        options: RenderOptions,
    ) -> None:
        name = self.name_formatter.format(rel.name)
        with_links = rel.include_links and self_link is not None
        with_data = rel.include_data or name in options.include_linkages
        if not with_links and not with_data:
            return

        rel_builder = builder.add_relationship(name, to_many=rel.type is RelationshipType.TO_MANY)

        if with_links:
            rel_builder.links = LinksRepr(
                self_=f"{self_link}/relationships/{name}",
                related=f"{self_link}/{name}",
            )

        if with_data:
            rel_builder.request_linkage()
            for dest in rel.fetch_related(native, options.context):
                self._build_identifier(rel_builder.add_identifier(), dest, options)

    def build(
        self,
        builder: ResourceReprBuilder,
        native: typing.Any,
        descr: ResourceDescriptor,
        options: RenderOptions,
    ) -> None:
        type_name = descr.type_of(native)
        id_ = descr.wire_id_of(native)
        builder.identify(type_name, id_)

        for attr in descr.attributes.values():
            if self._select(type_name, attr, native, options):
                builder.add_attribute(
                    self.name_formatter.format(attr.name), attr.fetch(native, options.context)
                )

        self_link = self._resolve_self_link(descr, native, type_name, id_, options)
        for rel in descr.relationships.values():
            if self._select(type_name, rel, native, options):
                self._build_relationship(builder, rel, native, self_link, options)

        if self_link is not None:
            builder.links = LinksRepr(self_=self_link)

        if descr.meta_of is not None:
            meta = descr.meta_of(native, options.context)
            if meta:
                builder.meta.update(meta)

    def render(
        self,
        native: typing.Any,
        descr: typing.Optional[ResourceDescriptor],
        options: RenderOptions,
    ) -> typing.Optional[ResourceRepr]:
        """
        Renders a native object into a resource object.

        :param Any native: the native object. :py:const:`None` renders as :py:const:`None`.
        :param Optional[ResourceDescriptor] descr: the descriptor to use; looked up in the registry if omitted.
        :param RenderOptions options: the render options.
        :return: a :py:class:`ResourceRepr` or :py:const:`None`.
        """
        if native is None:
            return None
        if descr is None:
            descr = self.registry.lookup(native, options.namespace)
        builder = ResourceReprBuilder()
        self.build(builder, native, descr, options)
        return builder()

    def identify(self, native: typing.Any, options: RenderOptions) -> ResourceIdRepr:
        """
        Builds the resource identifier of a native object without rendering its members.
        """
        builder = ResourceIdReprBuilder()
        self._build_identifier(builder, native, options)
        return builder()

    def __init__(self, registry: Registry, name_formatter: typing.Optional[NameFormatter] = None):
        self.registry = registry
        self.name_formatter = (
            name_formatter if name_formatter is not None else DefaultNameFormatterImpl()
        )

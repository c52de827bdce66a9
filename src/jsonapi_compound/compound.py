"""
Resolution of the resources that go into the ``included`` member of a compound document.

The walk is driven by the inclusion tree, not by the object graph: recursion
depth never exceeds the depth of the longest include path, so cyclic graphs
(a comment pointing back to its post, for instance) need no visited-set.
"""

import dataclasses
import logging
import typing
from collections import OrderedDict

from .exceptions import InvalidIncludeError
from .interfaces import NameFormatter
from .models import RelationshipDescriptor, ResourceDescriptor
from .paths import InclusionTreeNode
from .registry import Registry
from .resource import RenderOptions

logger = logging.getLogger(__name__)

ResourceKey = typing.Tuple[str, typing.Union[str, int]]
"""
``(type, id)``. An object without an id is keyed by its identity instead, so
distinct unsaved objects are never merged.
"""


def _normalize(name: str) -> str:
    return name.replace("-", "").replace("_", "").lower()


@dataclasses.dataclass
class IncludedResource:
    native: typing.Any
    include_linkages: typing.Set[str] = dataclasses.field(default_factory=set)


class CompoundResolver:
    """
    Walks an inclusion tree against native objects and collects the resources to include.

    :param Registry registry: resolves descriptors of the objects encountered.
    :param NameFormatter name_formatter: maps include path segments back to relationship names.
    """

    registry: Registry
    name_formatter: NameFormatter

    class _Run:
        outer: "CompoundResolver"
        options: RenderOptions
        result: "OrderedDict[ResourceKey, IncludedResource]"
        primaries: "OrderedDict[ResourceKey, IncludedResource]"
        _validated: typing.Set[typing.Tuple[str, ...]]

        def add(self, native: typing.Any, include_linkages: typing.FrozenSet[str]) -> None:
            key = self.outer.identity_key(native, self.options)
            primary = self.primaries.get(key)
            if primary is not None:
                logger.debug(
                    "%s:%s is primary data; merging linkages %s", *key, sorted(include_linkages)
                )
                primary.include_linkages |= include_linkages
                return
            entry = self.result.get(key)
            if entry is None:
                logger.debug("including %s:%s", *key)
                self.result[key] = IncludedResource(native, set(include_linkages))
            else:
                logger.debug("merging %s:%s with linkages %s", *key, sorted(include_linkages))
                entry.native = native
                entry.include_linkages |= include_linkages

        def find_relationship(
            self,
            descr: ResourceDescriptor,
            native: typing.Any,
            path: typing.Tuple[str, ...],
        ) -> typing.Optional[RelationshipDescriptor]:
            segment = path[-1]
            name_formatter = self.outer.name_formatter
            rel = descr.get_relationship(name_formatter.unformat(segment))
            if rel is not None and name_formatter.format(rel.name) == segment:
                self._validated.add(path)
                return rel
            if path in self._validated:
                # reached through a polymorphic relationship; only the first type is checked
                return None
            raise self.outer._invalid_include(descr, native, segment)

        def walk(
            self,
            native: typing.Any,
            node: InclusionTreeNode,
            path: typing.Tuple[str, ...],
            descr: typing.Optional[ResourceDescriptor] = None,
        ) -> None:
            if descr is None:
                descr = self.outer.registry.lookup(native, self.options.namespace)
            for segment, child in node.children.items():
                child_path = path + (segment,)
                rel = self.find_relationship(descr, native, child_path)
                if rel is None or not rel.is_visible(native, self.options.context):
                    continue
                dests = rel.fetch_related(native, self.options.context)
                if not dests:
                    continue
                if child.include:
                    linkages = child.included_children()
                    for dest in dests:
                        self.add(dest, linkages)
                if child.children:
                    for dest in dests:
                        self.walk(dest, child, child_path)

        def __init__(self, outer: "CompoundResolver", options: RenderOptions):
            self.outer = outer
            self.options = options
            self.result = OrderedDict()
            self.primaries = OrderedDict()
            self._validated = set()

    def identity_key(
        self,
        native: typing.Any,
        options: RenderOptions,
        descr: typing.Optional[ResourceDescriptor] = None,
    ) -> ResourceKey:
        if descr is None:
            descr = self.registry.lookup(native, options.namespace)
        id_ = descr.wire_id_of(native)
        return (descr.type_of(native), id_ if id_ is not None else id(native))

    def _invalid_include(
        self, descr: ResourceDescriptor, native: typing.Any, segment: str
    ) -> InvalidIncludeError:
        available = [self.name_formatter.format(name) for name in descr.relationships]
        suggestion: typing.Optional[str] = None
        for name in descr.relationships:
            if _normalize(name) == _normalize(segment):
                suggestion = self.name_formatter.format(name)
                break
        return InvalidIncludeError(
            resource_type=descr.type_of(native),
            name=segment,
            suggestion=suggestion,
            available=available,
        )

    def resolve_document(
        self,
        natives: typing.Sequence[typing.Any],
        tree: InclusionTreeNode,
        options: RenderOptions,
        descr: typing.Optional[ResourceDescriptor] = None,
    ) -> typing.Tuple[
        typing.List[typing.FrozenSet[str]], "OrderedDict[ResourceKey, IncludedResource]"
    ]:
        """
        Collects the resources to include for the given primary objects.

        A primary object is never included; an include path that reaches one
        adds to the linkages rendered on the primary resource instead.

        :param Sequence[Any] natives: the primary objects, in document order. :py:const:`None` entries are skipped.
        :param InclusionTreeNode tree: the parsed include paths.
        :param RenderOptions options: the render options of the call.
        :param Optional[ResourceDescriptor] descr: the descriptor of the primary objects, if not to be looked up.
        :return: a pair of the linkage set of each primary object, in the order given, and an ordered mapping from ``(type, id)`` to :py:class:`IncludedResource`, in first-discovery order.
        :raises InvalidIncludeError: if an include path names a relationship not declared on the type encountered.
        """
        run = self._Run(self, options)
        primary_keys: typing.List[ResourceKey] = []
        for native in natives:
            if native is None:
                continue
            key = self.identity_key(native, options, descr)
            primary_keys.append(key)
            if key not in run.primaries:
                run.primaries[key] = IncludedResource(native, set(tree.included_children()))
        for native in natives:
            if native is None:
                continue
            run.walk(native, tree, (), descr)
        return (
            [frozenset(run.primaries[key].include_linkages) for key in primary_keys],
            run.result,
        )

    def resolve(
        self,
        natives: typing.Sequence[typing.Any],
        tree: InclusionTreeNode,
        options: RenderOptions,
        descr: typing.Optional[ResourceDescriptor] = None,
    ) -> "OrderedDict[ResourceKey, IncludedResource]":
        """
        Collects the resources to include for the given primary objects.

        :param Sequence[Any] natives: the primary objects, in document order.
        :param InclusionTreeNode tree: the parsed include paths.
        :param RenderOptions options: the render options of the call.
        :param Optional[ResourceDescriptor] descr: the descriptor of the primary objects, if not to be looked up.
        :return: an ordered mapping from ``(type, id)`` to :py:class:`IncludedResource`, in first-discovery order. Primary objects are left out.
        :raises InvalidIncludeError: if an include path names a relationship not declared on the type encountered.
        """
        _, included = self.resolve_document(natives, tree, options, descr)
        return included

    def __init__(self, registry: Registry, name_formatter: NameFormatter):
        self.registry = registry
        self.name_formatter = name_formatter

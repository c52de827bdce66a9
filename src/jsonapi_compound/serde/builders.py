"""
Mutable counterparts of the resource reprs.

A :py:class:`ResourceReprBuilder` is filled in member by member while a descriptor
is walked, and calling it freezes the collected state into a :py:class:`ResourceRepr`.
"""
import typing
from collections import OrderedDict

from .models import (
    AttributeValue,
    LinkageData,
    LinkageRepr,
    LinksRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
)


class ResourceIdReprBuilder:
    type: typing.Optional[str] = None
    id: typing.Optional[str] = None

    def identify(self, type: str, id: typing.Optional[str]) -> None:
        self.type = type
        self.id = id

    def __call__(self) -> ResourceIdRepr:
        assert self.type is not None
        return ResourceIdRepr(type=self.type, id=self.id)


class RelationshipReprBuilder:
    """
    Collects the ``links`` and the resource linkage of a single relationship.

    Nothing is rendered for ``data`` until :py:meth:`request_linkage` is called.
    After that a to-one relationship without an identifier renders ``null`` and
    a to-many one renders an empty array.
    """

    to_many: bool
    links: typing.Optional[LinksRepr] = None
    linkage: typing.Optional[typing.List[ResourceIdReprBuilder]] = None

    def request_linkage(self) -> None:
        if self.linkage is None:
            self.linkage = []

    def add_identifier(self) -> ResourceIdReprBuilder:
        if self.linkage is None:
            raise ValueError("linkage is not requested for this relationship")
        if not self.to_many and self.linkage:
            raise ValueError("a to-one relationship takes at most one identifier")
        builder = ResourceIdReprBuilder()
        self.linkage.append(builder)
        return builder

    def __call__(self) -> LinkageRepr:
        data: LinkageData
        if self.linkage is None:
            data = Missing
        elif self.to_many:
            data = tuple(b() for b in self.linkage)
        else:
            data = self.linkage[0]() if self.linkage else None
        return LinkageRepr(data=data, links=self.links)

    def __init__(self, to_many: bool):
        self.to_many = to_many
        self.links = None
        self.linkage = None


class ResourceReprBuilder:
    type: typing.Optional[str] = None
    id: typing.Optional[str] = None
    links: typing.Optional[LinksRepr] = None
    meta: typing.Dict[str, typing.Any]
    attributes: "OrderedDict[str, AttributeValue]"
    relationships: "OrderedDict[str, RelationshipReprBuilder]"

    def identify(self, type: str, id: typing.Optional[str]) -> None:
        self.type = type
        self.id = id

    def add_attribute(self, name: str, value: AttributeValue) -> None:
        self.attributes[name] = value

    def add_relationship(self, name: str, to_many: bool) -> RelationshipReprBuilder:
        if name in self.relationships:
            raise ValueError(f"relationship {name} is already added")
        self.relationships[name] = builder = RelationshipReprBuilder(to_many)
        return builder

    def __call__(self) -> ResourceRepr:
        assert self.type is not None
        return ResourceRepr(
            type=self.type,
            id=self.id,
            links=self.links,
            meta=self.meta,
            attributes=self.attributes.items(),
            relationships=((name, b()) for name, b in self.relationships.items()),
        )

    def __init__(self):
        self.links = None
        self.meta = {}
        self.attributes = OrderedDict()
        self.relationships = OrderedDict()

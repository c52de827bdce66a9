"""
Classes in :py:mod:`jsonapi_compound.serde.models` are abstract representation of JSON:API document elements.

They are built by :py:mod:`jsonapi_compound.serde.builders` and turned into
JSON-compatible dictionaries by :py:class:`jsonapi_compound.serde.renderer.ReprRenderer`.
"""

import dataclasses
import datetime
import decimal
import typing
from collections import OrderedDict

JSONScalar = typing.Union[bool, int, float, str]
JSONArray = typing.Sequence[typing.Any]
JSONObject = typing.Mapping[str, typing.Any]
MutableJSONObject = typing.MutableMapping[str, typing.Any]
JSONValue = typing.Union[JSONScalar, JSONArray, JSONObject, None]

URL = str


class MissingType:
    def __bool__(self):
        return False

    def __repr__(self):
        return "Missing"

    def __init__(self):
        raise TypeError("Not directly instantiable")


Missing = object.__new__(MissingType)
"""
Marks a ``data`` member of a relationship that must not be rendered at all,
as opposed to :py:const:`None`, which renders as ``null``.
"""


@dataclasses.dataclass
class Repr:
    """
    The base class for any model objects.
    """


@dataclasses.dataclass
class LinksRepr(Repr):
    """
    :py:class:`LinksRepr` class represents a ``links`` node of JSON:API.

    Ref.

    * `Document Links <https://jsonapi.org/format/#document-links>`_
    * `Related Resource Links <https://jsonapi.org/format/#document-resource-object-related-resource-links>`_
    """

    self_: typing.Optional[URL] = None
    related: typing.Optional[URL] = None
    next: typing.Optional[URL] = None
    prev: typing.Optional[URL] = None
    first: typing.Optional[URL] = None
    last: typing.Optional[URL] = None

    def __bool__(self):
        return any(
            v is not None
            for v in (self.self_, self.related, self.next, self.prev, self.first, self.last)
        )


@dataclasses.dataclass(init=False)
class MetaContainerRepr(Repr):
    """
    :py:class:`MetaContainerRepr` is an abstract base for classes containing ``meta`` node.
    """

    meta: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __init__(self, *, meta: typing.Optional[typing.Mapping[str, typing.Any]] = None):
        """
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        """
        self.meta = dict(meta) if meta is not None else {}


@dataclasses.dataclass(init=False)
class NodeRepr(MetaContainerRepr):
    """
    :py:class:`NodeRepr` is an abstract base for classes containing ``links`` node.
    """

    links: typing.Optional[LinksRepr] = None

    def __init__(
        self,
        *,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        """
        :param Optional[LinksRepr] links: a :py:class:`LinksRepr` instance.
        :param Optional[Mapping[str, Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(meta=meta)
        self.links = links


@dataclasses.dataclass(init=False)
class ResourceIdRepr(MetaContainerRepr):
    """
    Instances of :py:class:`ResourceIdRepr` represent `Resource Identifier Objects <https://jsonapi.org/format/#document-resource-identifier-objects>`_
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore

    @property
    def key(self) -> typing.Tuple[str, str]:
        """
        The identity key used to deduplicate resources in a compound document.
        """
        return (self.type, self.id if self.id is not None else "")

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str],
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param Optional[str] id: a value for ``id`` property.
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(meta=meta)
        self.type = type
        self.id = id


LinkageData = typing.Union[None, MissingType, ResourceIdRepr, typing.Sequence[ResourceIdRepr]]


@dataclasses.dataclass(init=False)
class LinkageRepr(NodeRepr):
    """
    :py:class:`LinkageRepr` represents a `Resource Linkage <https://jsonapi.org/format/#document-resource-object-linkage>`_
    together with the relationship links.
    """

    data: LinkageData = Missing

    def __init__(
        self,
        *,
        data: LinkageData = Missing,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        """
        :param Union[None, Missing, ResourceIdRepr, Sequence[ResourceIdRepr]] data: a value for ``data`` property. :py:const:`Missing` omits the property.
        :param Optional[LinksRepr] links: a value for ``links`` property.
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(links=links, meta=meta)
        self.data = data


AttributeScalar = typing.Union[
    datetime.datetime, datetime.date, decimal.Decimal, str, int, float, bytes, None
]
AttributeValue = typing.Union[
    typing.Sequence[typing.Any],
    typing.Mapping[str, typing.Any],
    AttributeScalar,
]


@dataclasses.dataclass(init=False)
class ResourceRepr(NodeRepr):
    """
    :py:class:`ResourceRepr` class represents a `Resource Object <https://jsonapi.org/format/#document-resource-objects>`_.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    attributes: typing.Mapping[str, AttributeValue] = dataclasses.field(default_factory=OrderedDict)  # type: ignore
    relationships: typing.Mapping[str, LinkageRepr] = dataclasses.field(default_factory=OrderedDict)  # type: ignore

    def __getitem__(self, name):
        return self.attributes[name]

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str],
        attributes: typing.Iterable[typing.Tuple[str, AttributeValue]] = (),
        relationships: typing.Iterable[typing.Tuple[str, LinkageRepr]] = (),
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param Optional[str] id: an optional value for ``id`` property; :py:const:`None` omits it.
        :param Iterable[Tuple[str, AttributeValue]] attributes: a sequence of tuples each of which represents a key-value pair of an attribute.
        :param Iterable[Tuple[str, LinkageRepr]] relationships: a sequence of tuples each of which represent a key-value pair of a relationship.
        :param Optional[LinksRepr] links: a value for ``links`` property.
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(links=links, meta=meta)
        self.type = type
        self.id = id
        self.attributes = OrderedDict(attributes)
        self.relationships = OrderedDict(relationships)


@dataclasses.dataclass(init=False)
class SourceRepr(Repr):
    """
    :py:class:`SourceRepr` represents a value for the ``source`` property of an `Error Object <https://jsonapi.org/format/#error-objects>`_.
    """

    pointer: typing.Optional[str] = None
    parameter: typing.Optional[str] = None

    def __init__(
        self,
        pointer: typing.Optional[str] = None,
        parameter: typing.Optional[str] = None,
    ):
        self.pointer = pointer
        self.parameter = parameter


@dataclasses.dataclass(init=False)
class ErrorRepr(NodeRepr):
    id: typing.Optional[str] = None
    status: typing.Optional[str] = None
    code: typing.Optional[str] = None
    title: typing.Optional[str] = None
    detail: typing.Optional[str] = None
    source: typing.Optional[SourceRepr] = None

    def __init__(
        self,
        *,
        id: typing.Optional[str] = None,
        status: typing.Optional[str] = None,
        code: typing.Optional[str] = None,
        title: typing.Optional[str] = None,
        detail: typing.Optional[str] = None,
        source: typing.Optional[SourceRepr] = None,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        super().__init__(links=links, meta=meta)
        self.id = id
        self.status = status
        self.code = code
        self.title = title
        self.detail = detail
        self.source = source


ErrorItem = typing.Union[ErrorRepr, typing.Mapping[str, typing.Any]]


@dataclasses.dataclass(init=False)
class DocumentReprBase(NodeRepr):
    jsonapi: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)
    errors: typing.Sequence[ErrorItem] = ()
    included: typing.Optional[typing.Sequence[ResourceRepr]] = None

    def __init__(
        self,
        *,
        jsonapi: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        errors: typing.Optional[typing.Sequence[ErrorItem]] = None,
        included: typing.Optional[typing.Sequence[ResourceRepr]] = None,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        """
        :param Optional[Mapping[str, Any]] jsonapi: a value for the ``jsonapi`` member.
        :param Optional[Sequence[ErrorItem]] errors: a sequence of :py:class:`ErrorRepr` or already shaped error objects.
        :param Optional[Sequence[ResourceRepr]] included: a sequence of :py:class:`ResourceRepr`; :py:const:`None` omits the ``included`` member while an empty sequence renders as ``[]``.
        :param Optional[LinksRepr] links: a value for ``links`` property.
        :param Optional[Mapping[str, Any]] meta: a dictionary containing user-defined information.
        """
        super().__init__(links=links, meta=meta)
        self.jsonapi = dict(jsonapi) if jsonapi is not None else {}
        self.errors = errors or ()
        self.included = included


@dataclasses.dataclass(init=False)
class SingletonDocumentRepr(DocumentReprBase):
    data: typing.Union[ResourceRepr, None, MissingType] = None

    def __init__(
        self,
        *,
        data: typing.Union[ResourceRepr, None, MissingType] = None,
        jsonapi: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        errors: typing.Optional[typing.Sequence[ErrorItem]] = None,
        included: typing.Optional[typing.Sequence[ResourceRepr]] = None,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        """
        :param Union[ResourceRepr, None, Missing] data: the primary data; :py:const:`Missing` omits ``data`` (error documents).
        """
        super().__init__(
            jsonapi=jsonapi,
            errors=errors,
            included=included,
            links=links,
            meta=meta,
        )
        self.data = data


@dataclasses.dataclass(init=False)
class CollectionDocumentRepr(DocumentReprBase):
    data: typing.Sequence[ResourceRepr] = ()

    def __init__(
        self,
        *,
        data: typing.Sequence[ResourceRepr] = (),
        jsonapi: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        errors: typing.Optional[typing.Sequence[ErrorItem]] = None,
        included: typing.Optional[typing.Sequence[ResourceRepr]] = None,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        super().__init__(
            jsonapi=jsonapi,
            errors=errors,
            included=included,
            links=links,
            meta=meta,
        )
        self.data = tuple(data)

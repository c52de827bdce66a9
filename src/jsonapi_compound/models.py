import enum
import typing
from collections import OrderedDict

from .exceptions import DeclarationError
from .utils import assert_not_none

Context = typing.Mapping[str, typing.Any]
Accessor = typing.Callable[[typing.Any, Context], typing.Any]
Predicate = typing.Callable[[typing.Any, Context], bool]
SelfLinkResolver = typing.Callable[[typing.Any, str, str, str], typing.Optional[str]]

RESERVED_NAMES = frozenset(["id", "type"])


class RelationshipType(enum.Enum):
    TO_ONE = "to_one"
    TO_MANY = "to_many"


def always(native: typing.Any, context: Context) -> bool:
    return True


def compose_visibility(
    if_: typing.Optional[Predicate] = None, unless: typing.Optional[Predicate] = None
) -> Predicate:
    """
    Composes a pair of ``if`` / ``unless`` predicates into a single one that holds
    when ``if_`` holds and ``unless`` does not. A missing predicate is neutral.

    :param Optional[Predicate] if_: the predicate that must hold.
    :param Optional[Predicate] unless: the predicate that must not hold.
    :return: a predicate taking a native object and the context.
    """
    if if_ is None and unless is None:
        return always

    def _(native: typing.Any, context: Context) -> bool:
        if if_ is not None and not if_(native, context):
            return False
        if unless is not None and unless(native, context):
            return False
        return True

    return _


def attribute_getter(name: str) -> Accessor:
    def _(native: typing.Any, context: Context) -> typing.Any:
        return getattr(native, name)

    return _


class ResourceMemberDescriptor:
    name: str
    accessor: Accessor
    visible_if: Predicate

    def fetch(self, native: typing.Any, context: Context) -> typing.Any:
        return self.accessor(native, context)

    def is_visible(self, native: typing.Any, context: Context) -> bool:
        return self.visible_if(native, context)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def __init__(
        self,
        name: str,
        accessor: typing.Optional[Accessor] = None,
        visible_if: typing.Optional[Predicate] = None,
    ):
        if name in RESERVED_NAMES:
            raise DeclarationError(f'"{name}" is a reserved name and cannot be declared')
        self.name = name
        self.accessor = accessor if accessor is not None else attribute_getter(name)
        self.visible_if = visible_if if visible_if is not None else always


class AttributeDescriptor(ResourceMemberDescriptor):
    pass


class RelationshipDescriptor(ResourceMemberDescriptor):
    type: typing.ClassVar[RelationshipType]
    include_links: bool
    """
    Set to :py:const:`True` if ``self`` / ``related`` links are rendered for the relationship.
    """
    include_data: bool
    """
    Set to :py:const:`True` if resource linkage is rendered even if not requested.
    """

    def __init__(
        self,
        name: str,
        accessor: typing.Optional[Accessor] = None,
        visible_if: typing.Optional[Predicate] = None,
        include_links: bool = True,
        include_data: bool = False,
    ):
        super().__init__(name, accessor, visible_if)
        self.include_links = include_links
        self.include_data = include_data


class ToOneRelationshipDescriptor(RelationshipDescriptor):
    type = RelationshipType.TO_ONE
    """
    Always set to :py:class:`RelationshipType`.``TO_ONE``
    """

    def fetch_related(self, native: typing.Any, context: Context) -> typing.List[typing.Any]:
        dest = self.fetch(native, context)
        return [dest] if dest is not None else []


class ToManyRelationshipDescriptor(RelationshipDescriptor):
    type = RelationshipType.TO_MANY
    """
    Always set to :py:class:`RelationshipType`.``TO_MANY``
    """

    def fetch_related(self, native: typing.Any, context: Context) -> typing.List[typing.Any]:
        dest = self.fetch(native, context)
        if dest is None:
            return []
        return [d for d in dest if d is not None]


def default_id_of(native: typing.Any) -> typing.Any:
    return getattr(native, "id", None)


class ResourceDescriptor:
    """
    A :py:class:`ResourceDescriptor` holds the serialization rules of a domain type.

    :param str name: The type name of the resource as it appears on the wire.
    :param Iterable[AttributeDescriptor] attributes: The descriptors for the attributes the resource holds.
    :param Iterable[ToOneRelationshipDescriptor] to_one: The descriptors for the to-one relationships.
    :param Iterable[ToManyRelationshipDescriptor] to_many: The descriptors for the to-many relationships.
    :param Optional[Callable[[Any], Any]] id_of: Extracts the identifier from a native object. Defaults to its ``id`` attribute.
    :param Optional[Callable[[Any], str]] type_of: Extracts the type name from a native object. Defaults to ``name``.
    :param Optional[Callable[[Any, Context], Optional[Mapping]]] meta_of: Builds the resource-level ``meta``.
    :param Optional[SelfLinkResolver] self_link: Overrides the ``self`` link of the resource.
    """

    name: str
    """
    The type name of the resource.
    """
    id_of: typing.Callable[[typing.Any], typing.Any]
    type_of: typing.Callable[[typing.Any], str]
    meta_of: typing.Optional[
        typing.Callable[[typing.Any, Context], typing.Optional[typing.Mapping[str, typing.Any]]]
    ]
    self_link: typing.Optional[SelfLinkResolver]
    _attributes: typing.MutableMapping[str, AttributeDescriptor]
    _to_one: typing.MutableMapping[str, ToOneRelationshipDescriptor]
    _to_many: typing.MutableMapping[str, ToManyRelationshipDescriptor]

    @property
    def attributes(self) -> typing.Mapping[str, AttributeDescriptor]:
        """
        The mapping of attribute names to :py:class:`AttributeDescriptor`s.
        """
        return self._attributes

    @property
    def to_one(self) -> typing.Mapping[str, ToOneRelationshipDescriptor]:
        """
        The mapping of relationship names to :py:class:`ToOneRelationshipDescriptor`s.
        """
        return self._to_one

    @property
    def to_many(self) -> typing.Mapping[str, ToManyRelationshipDescriptor]:
        """
        The mapping of relationship names to :py:class:`ToManyRelationshipDescriptor`s.
        """
        return self._to_many

    @property
    def relationships(self) -> typing.Mapping[str, RelationshipDescriptor]:
        """
        All the relationships, to-one ones first.
        """
        retval: "OrderedDict[str, RelationshipDescriptor]" = OrderedDict(self._to_one)
        retval.update(self._to_many)
        return retval

    def get_relationship(self, name: str) -> typing.Optional[RelationshipDescriptor]:
        rel: typing.Optional[RelationshipDescriptor] = self._to_one.get(name)
        if rel is None:
            rel = self._to_many.get(name)
        return rel

    def wire_id_of(self, native: typing.Any) -> typing.Optional[str]:
        """
        The ``id`` of a native object as it appears on the wire: the string form of
        :py:attr:`id_of`, or :py:const:`None` when that is absent or blank.
        """
        id_ = self.id_of(native)
        if id_ is None:
            return None
        id_ = str(id_)
        return id_ if id_.strip() else None

    def _check_unique(self, name: str) -> None:
        if name in self._attributes or name in self._to_one or name in self._to_many:
            raise DeclarationError(f'"{name}" is declared more than once in "{self.name}"')

    def _add_attribute(self, attr: AttributeDescriptor) -> None:
        self._check_unique(attr.name)
        self._attributes[assert_not_none(attr.name)] = attr

    def _add_relationship(self, rel: RelationshipDescriptor) -> None:
        self._check_unique(rel.name)
        if isinstance(rel, ToOneRelationshipDescriptor):
            self._to_one[rel.name] = rel
        elif isinstance(rel, ToManyRelationshipDescriptor):
            self._to_many[rel.name] = rel
        else:
            raise DeclarationError(f"unsupported relationship descriptor: {rel!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def __init__(
        self,
        name: str,
        attributes: typing.Iterable[AttributeDescriptor] = (),
        to_one: typing.Iterable[ToOneRelationshipDescriptor] = (),
        to_many: typing.Iterable[ToManyRelationshipDescriptor] = (),
        id_of: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None,
        type_of: typing.Optional[typing.Callable[[typing.Any], str]] = None,
        meta_of: typing.Optional[
            typing.Callable[[typing.Any, Context], typing.Optional[typing.Mapping[str, typing.Any]]]
        ] = None,
        self_link: typing.Optional[SelfLinkResolver] = None,
    ) -> None:
        self.name = name
        self.id_of = id_of if id_of is not None else default_id_of
        self.type_of = type_of if type_of is not None else (lambda native: self.name)
        self.meta_of = meta_of
        self.self_link = self_link
        self._attributes = OrderedDict()
        self._to_one = OrderedDict()
        self._to_many = OrderedDict()
        for attr in attributes:
            self._add_attribute(attr)
        for rel in to_one:
            self._add_relationship(rel)
        for rel in to_many:
            self._add_relationship(rel)


def derive_descriptor(
    parent: ResourceDescriptor,
    name: typing.Optional[str] = None,
    attributes: typing.Iterable[AttributeDescriptor] = (),
    to_one: typing.Iterable[ToOneRelationshipDescriptor] = (),
    to_many: typing.Iterable[ToManyRelationshipDescriptor] = (),
    id_of: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None,
    type_of: typing.Optional[typing.Callable[[typing.Any], str]] = None,
    meta_of: typing.Optional[
        typing.Callable[[typing.Any, Context], typing.Optional[typing.Mapping[str, typing.Any]]]
    ] = None,
    self_link: typing.Optional[SelfLinkResolver] = None,
) -> ResourceDescriptor:
    """
    Builds a new descriptor out of ``parent`` overlaid with the given additions.
    Parent entries come first; an addition with the name of a parent entry of the
    same kind replaces it in place. The parent is left untouched.

    ``type_of`` of the parent is not inherited unless ``name`` is omitted, so that
    a derived descriptor with its own name reports that name.
    """
    new_attributes: "OrderedDict[str, AttributeDescriptor]" = OrderedDict(parent.attributes)
    new_to_one: "OrderedDict[str, ToOneRelationshipDescriptor]" = OrderedDict(parent.to_one)
    new_to_many: "OrderedDict[str, ToManyRelationshipDescriptor]" = OrderedDict(parent.to_many)
    for attr in attributes:
        new_attributes[attr.name] = attr
    for rel in to_one:
        new_to_one[rel.name] = rel
    for rel in to_many:
        new_to_many[rel.name] = rel
    return ResourceDescriptor(
        name=name if name is not None else parent.name,
        attributes=new_attributes.values(),
        to_one=new_to_one.values(),
        to_many=new_to_many.values(),
        id_of=id_of if id_of is not None else parent.id_of,
        type_of=type_of if type_of is not None else (parent.type_of if name is None else None),
        meta_of=meta_of if meta_of is not None else parent.meta_of,
        self_link=self_link if self_link is not None else parent.self_link,
    )

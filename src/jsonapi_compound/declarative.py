"""
:py:mod:`jsonapi_compound.declarative` module lets resource descriptors be declared as classes.

Synopsis
--------

.. code-block:: python

   from jsonapi_compound.declarative import Attr, Declarative, ToMany, ToOne

   decl = Declarative()

   @decl(Post)
   class PostResource:
       class Meta:
           type = "posts"
           meta = lambda post, ctx: {"copyright": "Copyright 2015 Example Corp."}

       title = Attr()
       long_content = Attr(lambda post, ctx: post.body)
       author = ToOne()
       comments = ToMany(include_data=True, unless=lambda post, ctx: ctx.get("draft"))

   @decl(TaggedPost)
   class TaggedPostResource(PostResource):
       tag = Attr()

``TaggedPostResource`` gets every member of ``PostResource`` followed by ``tag``,
under its own type name ``tagged-posts``.
"""

import abc
import dataclasses
import typing

from .defaults import DefaultNameFormatterImpl, default_type_name
from .exceptions import DeclarationError
from .interfaces import NameFormatter
from .models import (
    Accessor,
    AttributeDescriptor,
    Context,
    Predicate,
    ResourceDescriptor,
    ResourceMemberDescriptor,
    SelfLinkResolver,
    ToManyRelationshipDescriptor,
    ToOneRelationshipDescriptor,
    attribute_getter,
    compose_visibility,
    derive_descriptor,
)
from .registry import Registry

DESCRIPTOR_ATTR = "__jsonapi_descriptor__"

AccessorLike = typing.Union[str, Accessor]


def _build_accessor(accessor: typing.Optional[AccessorLike]) -> typing.Optional[Accessor]:
    if isinstance(accessor, str):
        return attribute_getter(accessor)
    return accessor


class Member(metaclass=abc.ABCMeta):
    accessor: typing.Optional[AccessorLike]
    if_: typing.Optional[Predicate]
    unless: typing.Optional[Predicate]

    @property
    def visible_if(self) -> typing.Optional[Predicate]:
        if self.if_ is None and self.unless is None:
            return None
        return compose_visibility(self.if_, self.unless)

    @abc.abstractmethod
    def build(self, name: str) -> ResourceMemberDescriptor:
        ...  # pragma: nocover

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.accessor!r})"

    def __init__(
        self,
        accessor: typing.Optional[AccessorLike] = None,
        *,
        if_: typing.Optional[Predicate] = None,
        unless: typing.Optional[Predicate] = None,
    ):
        """
        :param Optional[Union[str, Accessor]] accessor: a callable taking the native object and the context,
                                                        or the name of the attribute to read. Defaults to the
                                                        attribute of the same name as the member.
        :param Optional[Predicate] if_: the member is rendered only when this holds.
        :param Optional[Predicate] unless: the member is not rendered when this holds.
        """
        self.accessor = accessor
        self.if_ = if_
        self.unless = unless


class Attr(Member):
    def build(self, name: str) -> AttributeDescriptor:
        return AttributeDescriptor(name, _build_accessor(self.accessor), self.visible_if)


class Relationship(Member):
    include_links: bool
    include_data: bool

    def __init__(
        self,
        accessor: typing.Optional[AccessorLike] = None,
        *,
        if_: typing.Optional[Predicate] = None,
        unless: typing.Optional[Predicate] = None,
        include_links: bool = True,
        include_data: bool = False,
    ):
        """
        :param bool include_links: render ``self`` and ``related`` links for the relationship.
        :param bool include_data: always render the resource linkage, even if not included.
        """
        super().__init__(accessor, if_=if_, unless=unless)
        self.include_links = include_links
        self.include_data = include_data


class ToOne(Relationship):
    def build(self, name: str) -> ToOneRelationshipDescriptor:
        return ToOneRelationshipDescriptor(
            name,
            _build_accessor(self.accessor),
            self.visible_if,
            include_links=self.include_links,
            include_data=self.include_data,
        )


class ToMany(Relationship):
    def build(self, name: str) -> ToManyRelationshipDescriptor:
        return ToManyRelationshipDescriptor(
            name,
            _build_accessor(self.accessor),
            self.visible_if,
            include_links=self.include_links,
            include_data=self.include_data,
        )


@dataclasses.dataclass
class Meta:
    type: typing.Optional[str] = None
    id: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None
    meta: typing.Optional[
        typing.Callable[[typing.Any, Context], typing.Optional[typing.Mapping[str, typing.Any]]]
    ] = None
    self_link: typing.Optional[SelfLinkResolver] = None


def handle_meta(meta: typing.Optional[typing.Type]) -> Meta:
    if meta is None:
        return Meta()
    attrs: typing.Dict[str, typing.Any] = {}
    for k, v in vars(meta).items():
        if k.startswith("__"):
            continue
        if isinstance(v, staticmethod):
            v = v.__func__
        attrs[k] = v
    known = {f.name for f in dataclasses.fields(Meta)}
    unknown = [k for k in attrs if k not in known]
    if unknown:
        raise DeclarationError(f"unknown Meta option(s): {', '.join(unknown)}")
    return Meta(**attrs)


def find_parent_descriptor(class_: typing.Type) -> typing.Optional[ResourceDescriptor]:
    for base in class_.__mro__[1:]:
        descr = vars(base).get(DESCRIPTOR_ATTR)
        if descr is not None:
            return descr
    return None


def build_descriptor(
    resource_class: typing.Type,
    default_name: str,
    parent: typing.Optional[ResourceDescriptor] = None,
) -> ResourceDescriptor:
    """
    Builds a descriptor from the members declared on ``resource_class``.

    :param Type resource_class: the class holding :py:class:`Attr`, :py:class:`ToOne` and :py:class:`ToMany` declarations.
    :param str default_name: the type name used unless ``Meta.type`` says otherwise.
    :param Optional[ResourceDescriptor] parent: the descriptor to derive from.
    :return: a new :py:class:`ResourceDescriptor`.
    :raises DeclarationError: if a member is declared with a reserved name, or ``Meta`` is malformed.
    """
    meta = handle_meta(vars(resource_class).get("Meta"))
    attributes: typing.List[AttributeDescriptor] = []
    to_one: typing.List[ToOneRelationshipDescriptor] = []
    to_many: typing.List[ToManyRelationshipDescriptor] = []
    for name, member in vars(resource_class).items():
        if not isinstance(member, Member):
            continue
        descr = member.build(name)
        if isinstance(descr, ToOneRelationshipDescriptor):
            to_one.append(descr)
        elif isinstance(descr, ToManyRelationshipDescriptor):
            to_many.append(descr)
        elif isinstance(descr, AttributeDescriptor):
            attributes.append(descr)
        else:
            raise AssertionError("never get here")

    if parent is not None:
        return derive_descriptor(
            parent,
            name=(meta.type if meta.type is not None else default_name),
            attributes=attributes,
            to_one=to_one,
            to_many=to_many,
            id_of=meta.id,
            meta_of=meta.meta,
            self_link=meta.self_link,
        )
    else:
        return ResourceDescriptor(
            name=(meta.type if meta.type is not None else default_name),
            attributes=attributes,
            to_one=to_one,
            to_many=to_many,
            id_of=meta.id,
            meta_of=meta.meta,
            self_link=meta.self_link,
        )


class Declarative:
    """
    A class decorator factory that turns declaration classes into descriptors and registers them.

    :param Optional[Registry] registry: the registry to populate. A new one is created if omitted.
    :param Optional[NameFormatter] name_formatter: used to derive default type names from class names.
    """

    registry: Registry
    name_formatter: NameFormatter

    T = typing.TypeVar("T")

    def __call__(
        self,
        native_class: typing.Union[str, typing.Type],
        namespace: typing.Optional[str] = None,
    ) -> typing.Callable[[typing.Type[T]], typing.Type[T]]:
        """
        :param Union[str, Type] native_class: the domain class the declaration describes, or its registry key.
        :param Optional[str] namespace: the namespace to register the descriptor in.
        """
        class_name = native_class if isinstance(native_class, str) else native_class.__name__

        def _(resource_class):
            if not isinstance(resource_class, type):
                raise DeclarationError(f"{resource_class!r} is not a class")
            descr = build_descriptor(
                resource_class,
                default_type_name(class_name, self.name_formatter),
                find_parent_descriptor(resource_class),
            )
            setattr(resource_class, DESCRIPTOR_ATTR, descr)
            self.registry.register(native_class, descr, namespace)
            return resource_class

        return _

    def __init__(
        self,
        registry: typing.Optional[Registry] = None,
        name_formatter: typing.Optional[NameFormatter] = None,
    ):
        self.registry = registry if registry is not None else Registry()
        self.name_formatter = (
            name_formatter if name_formatter is not None else DefaultNameFormatterImpl()
        )

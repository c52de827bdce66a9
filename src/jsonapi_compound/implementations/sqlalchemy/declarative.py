"""
jsonapi_compound.implementations.sqlalchemy.declarative module contains a
class decorator that registers SQLAlchemy-mapped classes as resources.

Synopsis
--------

.. code-block:: python

   import sqlalchemy as sa
   from sqlalchemy import orm
   from sqlalchemy.orm import declarative_base
   from jsonapi_compound.document import Serializer
   from jsonapi_compound.implementations.sqlalchemy import SQLADeclarative
   from jsonapi_compound.registry import Registry

   Base = declarative_base()
   registry = Registry()
   decl = SQLADeclarative(registry)

   @decl
   class Foo(Base):
       __tablename__ = "foos"

       class Meta:
           exclude = ["secret"]

       id = sa.Column(sa.Integer(), primary_key=True, nullable=False)
       col1 = sa.Column(sa.Integer(), nullable=False)
       secret = sa.Column(sa.String(), nullable=True)
       bars = orm.relationship("Bar")

   decl.configure()

   serializer = Serializer(registry)
   doc = serializer.serialize(session.query(Foo).all(), is_collection=True, include="bars")

"""
import dataclasses
import typing

from sqlalchemy import orm  # type: ignore

from ...declarative import DESCRIPTOR_ATTR
from ...exceptions import DeclarationError
from ...models import Context, ResourceDescriptor, SelfLinkResolver
from ...registry import Registry
from .core import build_descriptor, default_extract_properties


@dataclasses.dataclass
class SQLAMeta:
    type: typing.Optional[str] = None
    exclude: typing.Sequence[str] = ()
    meta: typing.Optional[
        typing.Callable[[typing.Any, Context], typing.Optional[typing.Mapping[str, typing.Any]]]
    ] = None
    self_link: typing.Optional[SelfLinkResolver] = None


def handle_meta(meta: typing.Optional[typing.Type]) -> SQLAMeta:
    if meta is None:
        return SQLAMeta()
    attrs: typing.Dict[str, typing.Any] = {}
    for k, v in vars(meta).items():
        if k.startswith("__"):
            continue
        if isinstance(v, staticmethod):
            v = v.__func__
        attrs[k] = v
    known = {f.name for f in dataclasses.fields(SQLAMeta)}
    unknown = [k for k in attrs if k not in known]
    if unknown:
        raise DeclarationError(f"unknown Meta option(s): {', '.join(unknown)}")
    return SQLAMeta(**attrs)


class SQLADeclarative:
    """
    Collects SQLAlchemy-mapped classes and registers their descriptors on :py:meth:`configure`.

    :param Registry registry: the registry to populate.
    :param Optional[Callable] extract_properties_fn: yields the properties to expose out of a mapper.
    :param Optional[str] namespace: the namespace to register the descriptors in.
    """

    registry: Registry
    namespace: typing.Optional[str]
    _instrumented_classes: typing.List[typing.Type]
    _extract_properties_fn: typing.Callable[
        [orm.Mapper], typing.Iterable[orm.interfaces.MapperProperty]
    ]

    def _configure_instrumented_class(self, class_: typing.Type) -> ResourceDescriptor:
        meta = handle_meta(vars(class_).get("Meta"))
        descr = build_descriptor(
            class_,
            name=meta.type,
            exclude=meta.exclude,
            extract_properties=self._extract_properties_fn,
            meta_of=meta.meta,
            self_link=meta.self_link,
        )
        setattr(class_, DESCRIPTOR_ATTR, descr)
        self.registry.register(class_, descr, self.namespace)
        return descr

    def configure(self, skip_configure_mappers=False) -> None:
        if not skip_configure_mappers:
            orm.configure_mappers()
        for c in self._instrumented_classes:
            self._configure_instrumented_class(c)

    T = typing.TypeVar("T")

    def __call__(self, instrumented_class: typing.Type[T]) -> typing.Type[T]:
        self._instrumented_classes.append(instrumented_class)
        return instrumented_class

    def __init__(
        self,
        registry: typing.Optional[Registry] = None,
        extract_properties_fn: typing.Optional[
            typing.Callable[[orm.Mapper], typing.Iterable[orm.interfaces.MapperProperty]]
        ] = None,
        namespace: typing.Optional[str] = None,
    ):
        self.registry = registry if registry is not None else Registry()
        self.namespace = namespace
        self._instrumented_classes = []
        self._extract_properties_fn = (
            extract_properties_fn
            if extract_properties_fn is not None
            else default_extract_properties
        )

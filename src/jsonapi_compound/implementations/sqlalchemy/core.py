import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...models import (
    Accessor,
    AttributeDescriptor,
    Context,
    ResourceDescriptor,
    SelfLinkResolver,
    ToManyRelationshipDescriptor,
    ToOneRelationshipDescriptor,
)

NULL_ID_COMPONENT = "@null@"


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


def is_foreign_key_column(col: sa.Column) -> bool:
    return any(col.key in c.column_keys for c in col.table.foreign_key_constraints)


def default_extract_properties(
    sa_mapper: orm.Mapper,
) -> typing.Iterator[orm.interfaces.MapperProperty]:
    """
    Yields the properties of a mapper that make up a resource: every property but
    those mapped to primary-key or foreign-key columns, or to columns already
    covered by a composite.
    """
    pkey_cols = set(sa_mapper.primary_key)
    composite_cols = set()
    for attr in sa_mapper.attrs:
        if isinstance(attr, orm.CompositeProperty):
            composite_cols.update(col for col in attr.columns if isinstance(col, sa.Column))

    for attr in sa_mapper.attrs:
        if isinstance(attr, orm.ColumnProperty):
            if not is_alien_clause(sa_mapper, attr.expression):
                col = attr.expression
                if col in pkey_cols or col in composite_cols or is_foreign_key_column(col):
                    continue
        elif isinstance(attr, orm.CompositeProperty):
            if all(isinstance(col, sa.Column) and col in pkey_cols for col in attr.columns):
                continue
        yield attr


def build_composite_accessor(prop: orm.CompositeProperty) -> Accessor:
    """
    Reads a composite as the list of its column values, in the order the columns
    were given to the composite. Gives :py:const:`None` when every value is absent.
    """
    keys = [p.key for p in prop.props]

    def _(native: typing.Any, context: Context) -> typing.Any:
        values = [getattr(native, key) for key in keys]
        if all(v is None for v in values):
            return None
        return values

    return _


def extract_table_name(sa_mapper: orm.Mapper) -> str:
    tables = list(sa_mapper.tables)
    if len(tables) != 1:
        raise RuntimeError(
            f"SQLAlchemy mapper is associated to multiple tables: "
            f'{", ".join(table.name for table in tables)}'
        )
    return tables[0].name


def build_id_of(sa_mapper: orm.Mapper) -> typing.Callable[[typing.Any], typing.Optional[str]]:
    def _(native: typing.Any) -> typing.Optional[str]:
        pkey_values = sa_mapper.primary_key_from_instance(native)
        if all(v is None for v in pkey_values):
            return None
        return " ".join(str(v) if v is not None else NULL_ID_COMPONENT for v in pkey_values)

    return _


def build_descriptor(
    class_: typing.Type,
    *,
    name: typing.Optional[str] = None,
    exclude: typing.Iterable[str] = (),
    extract_properties: typing.Callable[
        [orm.Mapper], typing.Iterable[orm.interfaces.MapperProperty]
    ] = default_extract_properties,
    meta_of: typing.Optional[
        typing.Callable[[typing.Any, Context], typing.Optional[typing.Mapping[str, typing.Any]]]
    ] = None,
    self_link: typing.Optional[SelfLinkResolver] = None,
) -> ResourceDescriptor:
    """
    Builds a :py:class:`ResourceDescriptor` out of an SQLAlchemy-instrumented class.
    Mappers must have been configured beforehand so that relationships know their cardinality.

    :param Type class_: a mapped class.
    :param Optional[str] name: the type name of the resource. Defaults to the name of the mapped table.
    :param Iterable[str] exclude: names of the properties not to expose.
    :param extract_properties: yields the properties to expose out of a mapper.
    :param meta_of: builds the resource-level ``meta``.
    :param Optional[SelfLinkResolver] self_link: overrides the ``self`` link of the resource.
    :return: a new :py:class:`ResourceDescriptor`.
    """
    sa_mapper = orm.class_mapper(class_)
    excluded = set(exclude)
    attributes: typing.List[AttributeDescriptor] = []
    to_one: typing.List[ToOneRelationshipDescriptor] = []
    to_many: typing.List[ToManyRelationshipDescriptor] = []
    for prop in extract_properties(sa_mapper):
        if prop.key in excluded:
            continue
        if isinstance(prop, orm.ColumnProperty):
            attributes.append(AttributeDescriptor(prop.key))
        elif isinstance(prop, orm.CompositeProperty):
            attributes.append(
                AttributeDescriptor(prop.key, accessor=build_composite_accessor(prop))
            )
        elif isinstance(prop, orm.RelationshipProperty):
            if prop.uselist:
                to_many.append(ToManyRelationshipDescriptor(prop.key))
            else:
                to_one.append(ToOneRelationshipDescriptor(prop.key))

    return ResourceDescriptor(
        name=(name if name is not None else extract_table_name(sa_mapper)),
        attributes=attributes,
        to_one=to_one,
        to_many=to_many,
        id_of=build_id_of(sa_mapper),
        meta_of=meta_of,
        self_link=self_link,
    )

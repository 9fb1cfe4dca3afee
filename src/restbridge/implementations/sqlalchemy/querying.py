import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...exceptions import InvalidArgumentError
from ...interfaces import Filter, QueryBuilder
from ...models import Request
from ...naming import QueryNameGenerator

Entity = typing.Union[typing.Type[typing.Any], orm.util.AliasedClass]


class SQLAQueryBuilder(QueryBuilder):
    """
    A :py:class:`QueryBuilder` that accumulates a :py:func:`sqlalchemy.select`
    statement for a mapped class. Every alias is bound to an :py:func:`sqlalchemy.orm.aliased`
    entity of the same name.

    :param entity: The mapped class to select.
    :param str root_alias: The alias of the selected entity.
    """

    root_alias: str
    query_name_generator: QueryNameGenerator
    aliases: typing.Dict[str, Entity]
    joins: typing.List[typing.Tuple[str, str]]
    _statement: sa.sql.Select

    @property
    def root_aliases(self) -> typing.Sequence[str]:
        return [self.root_alias]

    @property
    def statement(self) -> sa.sql.Select:
        return self._statement

    def get_entity(self, alias: str) -> Entity:
        try:
            return self.aliases[alias]
        except KeyError:
            raise InvalidArgumentError(f'unknown alias "{alias}"')

    def left_join(self, join: str, alias: str) -> None:
        parent_alias, sep, association = join.partition(".")
        if not sep or not association:
            raise InvalidArgumentError(f'invalid join "{join}"')
        if alias in self.aliases:
            raise InvalidArgumentError(f'alias "{alias}" is already in use')
        parent = self.get_entity(parent_alias)
        rel = sa.inspect(parent).mapper.relationships.get(association)
        if rel is None:
            raise InvalidArgumentError(f'"{parent_alias}" has no association named "{association}"')
        target = orm.aliased(rel.mapper.class_, name=alias)
        self._statement = self._statement.outerjoin(getattr(parent, association).of_type(target))
        self.aliases[alias] = target
        self.joins.append((join, alias))

    def column(self, alias: str, field: str) -> sa.sql.ColumnElement:
        entity = self.get_entity(alias)
        try:
            return getattr(entity, field)
        except AttributeError:
            raise InvalidArgumentError(f'"{alias}" has no field named "{field}"')

    def and_where(self, clause: sa.sql.ColumnElement) -> None:
        self._statement = self._statement.where(clause)

    def add_order_by(self, clause: sa.sql.ColumnElement) -> None:
        self._statement = self._statement.order_by(clause)

    def __init__(
        self,
        entity: typing.Type[typing.Any],
        root_alias: str = "o",
        query_name_generator: typing.Optional[QueryNameGenerator] = None,
    ):
        self.root_alias = root_alias
        self.query_name_generator = (
            query_name_generator if query_name_generator is not None else QueryNameGenerator()
        )
        root = orm.aliased(entity, name=root_alias)
        self.aliases = {root_alias: root}
        self.joins = []
        self._statement = sa.select(root)


def apply_filters(
    query_builder: SQLAQueryBuilder,
    filters: typing.Iterable[Filter],
    resource_class: str,
    request: Request,
) -> sa.sql.Select:
    for filter_ in filters:
        filter_.apply(query_builder, query_builder.query_name_generator, resource_class, request)
    return query_builder.statement

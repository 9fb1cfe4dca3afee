import collections.abc
import decimal
import typing

import sqlalchemy as sa  # type: ignore
from loguru import logger

from ...exceptions import ConfigurationError
from ...filters import AbstractFilter
from ...interfaces import ManagerRegistry, QueryBuilder
from ...models import Request
from ...naming import QueryNameGenerator
from .querying import SQLAQueryBuilder

STRATEGY_EXACT = "exact"
STRATEGY_PARTIAL = "partial"
STRATEGY_START = "start"
STRATEGY_END = "end"
STRATEGY_WORD_START = "word_start"

STRATEGIES = frozenset(
    [STRATEGY_EXACT, STRATEGY_PARTIAL, STRATEGY_START, STRATEGY_END, STRATEGY_WORD_START]
)

NUMERIC_TYPES: typing.Tuple[type, ...] = (int, float, decimal.Decimal)

BOOLEAN_VALUES: typing.Mapping[str, bool] = {
    "true": True,
    "1": True,
    "false": False,
    "0": False,
}


def _normalize_values(value: typing.Any) -> typing.List[str]:
    if isinstance(value, str):
        values = [value]
    elif isinstance(value, collections.abc.Sequence):
        values = [v for v in value if isinstance(v, str)]
    else:
        return []
    return [v for v in values if v != ""]


class SearchFilter(AbstractFilter):
    """
    Filters a collection by the values of its (possibly nested) properties.

    The allow-list maps property names to strategies: ``exact``, ``partial``,
    ``start``, ``end`` and ``word_start``. Prefixing a strategy with ``i``
    makes the comparison case-insensitive. Properties without a strategy are
    matched exactly.

    :raises ConfigurationError: if the allow-list names an unknown strategy.
    """

    def _parse_strategy(self, property: str) -> typing.Tuple[str, bool]:
        strategy = (self.properties or {}).get(property)
        if not isinstance(strategy, str) or not strategy:
            return STRATEGY_EXACT, False
        if strategy in STRATEGIES:
            return strategy, False
        if strategy[0] == "i" and strategy[1:] in STRATEGIES:
            return strategy[1:], True
        raise ConfigurationError(f"unknown search strategy {strategy!r} for {property!r}")

    def _convert_values(
        self, property: str, resource_class: str, values: typing.Sequence[str]
    ) -> typing.List[typing.Any]:
        parts = self.split_property_parts(property)
        metadata = self.get_nested_metadata(resource_class, parts.associations)
        type_ = metadata.get_type_of_field(parts.field)
        if type_ is None:
            return list(values)
        converted: typing.List[typing.Any] = []
        if issubclass(type_, bool):
            for v in values:
                try:
                    converted.append(BOOLEAN_VALUES[v.lower()])
                except KeyError:
                    logger.debug("ignoring invalid value {!r} for {!r}", v, property)
            return converted
        if not issubclass(type_, NUMERIC_TYPES):
            return list(values)
        for v in values:
            try:
                converted.append(type_(v))
            except (ValueError, decimal.InvalidOperation):
                logger.debug("ignoring invalid value {!r} for {!r}", v, property)
        return converted

    def filter_property(
        self,
        property: str,
        value: typing.Any,
        query_builder: QueryBuilder,
        query_name_generator: QueryNameGenerator,
        resource_class: str,
    ) -> None:
        assert isinstance(query_builder, SQLAQueryBuilder)
        if property.endswith("[]"):
            property = property[:-2]
        if not self.is_property_enabled(property) or not self.is_property_mapped(
            property, resource_class
        ):
            return

        values = self._convert_values(property, resource_class, _normalize_values(value))
        if not values:
            return

        alias = query_builder.root_aliases[0]
        field = property
        if self.is_property_nested(property):
            alias, field = self.add_joins_for_nested_property(
                property, alias, query_builder, query_name_generator
            )

        column = query_builder.column(alias, field)
        strategy, case_insensitive = self._parse_strategy(property)
        query_builder.and_where(
            self._build_clause(
                column, field, strategy, case_insensitive, values, query_name_generator
            )
        )

    def _build_clause(
        self,
        column: sa.sql.ColumnElement,
        field: str,
        strategy: str,
        case_insensitive: bool,
        values: typing.Sequence[typing.Any],
        query_name_generator: QueryNameGenerator,
    ) -> sa.sql.ColumnElement:
        if strategy == STRATEGY_EXACT:
            if case_insensitive:
                column = sa.func.lower(column)
                values = [v.lower() if isinstance(v, str) else v for v in values]
            name = query_name_generator.generate_parameter_name(field)
            if len(values) == 1:
                return column == sa.bindparam(name, values[0])
            return column.in_(sa.bindparam(name, list(values), expanding=True))

        clauses: typing.List[sa.sql.ColumnElement] = []
        for v in values:
            v = str(v)
            if strategy == STRATEGY_PARTIAL:
                op = column.icontains if case_insensitive else column.contains
                clauses.append(op(v, autoescape=True))
            elif strategy == STRATEGY_START:
                op = column.istartswith if case_insensitive else column.startswith
                clauses.append(op(v, autoescape=True))
            elif strategy == STRATEGY_END:
                op = column.iendswith if case_insensitive else column.endswith
                clauses.append(op(v, autoescape=True))
            elif strategy == STRATEGY_WORD_START:
                starts = column.istartswith if case_insensitive else column.startswith
                contains = column.icontains if case_insensitive else column.contains
                clauses.append(
                    sa.or_(starts(v, autoescape=True), contains(" " + v, autoescape=True))
                )
        return clauses[0] if len(clauses) == 1 else sa.or_(*clauses)

    def get_description(self, resource_class: str) -> typing.Dict[str, typing.Dict[str, typing.Any]]:
        description: typing.Dict[str, typing.Dict[str, typing.Any]] = {}
        if self.properties is None:
            properties: typing.Iterable[str] = self.get_class_metadata(resource_class).field_names
        else:
            properties = self.properties.keys()

        for property in properties:
            if not self.is_property_mapped(property, resource_class):
                continue
            parts = self.split_property_parts(property)
            type_ = self.get_nested_metadata(resource_class, parts.associations).get_type_of_field(
                parts.field
            )
            strategy, case_insensitive = self._parse_strategy(property)
            entry = {
                "property": property,
                "type": type_.__name__ if type_ is not None else "string",
                "required": False,
                "strategy": ("i" if case_insensitive else "") + strategy,
            }
            description[property] = entry
            if strategy == STRATEGY_EXACT:
                description[f"{property}[]"] = dict(entry)
        return description

    def __init__(
        self,
        manager_registry: ManagerRegistry,
        properties: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        super().__init__(manager_registry, properties)
        for property in properties or ():
            self._parse_strategy(property)


ASC = "ASC"
DESC = "DESC"


class OrderFilter(AbstractFilter):
    """
    Orders a collection by the (possibly nested) properties given in the
    ``order`` request parameter, e.g. ``{"order": {"name": "desc"}}`` or the flat
    ``{"order[name]": "desc"}``.

    The allow-list maps property names to their default direction.
    """

    order_parameter_name: str

    def extract_properties(self, request: Request) -> typing.Dict[str, typing.Any]:
        order: typing.Dict[str, typing.Any] = {}
        prefix = f"{self.order_parameter_name}["
        for key, value in request.query.items():
            if key == self.order_parameter_name and isinstance(value, collections.abc.Mapping):
                order.update(value)
            elif key.startswith(prefix) and key.endswith("]"):
                order[key[len(prefix) : -1]] = value
        return order

    def filter_property(
        self,
        property: str,
        value: typing.Any,
        query_builder: QueryBuilder,
        query_name_generator: QueryNameGenerator,
        resource_class: str,
    ) -> None:
        assert isinstance(query_builder, SQLAQueryBuilder)
        if not self.is_property_enabled(property) or not self.is_property_mapped(
            property, resource_class
        ):
            return

        if not value:
            value = (self.properties or {}).get(property)
            if not isinstance(value, str) or not value:
                value = ASC
        if not isinstance(value, str):
            return
        direction = value.upper()
        if direction not in (ASC, DESC):
            logger.debug("ignoring order direction {!r} for {!r}", value, property)
            return

        alias = query_builder.root_aliases[0]
        field = property
        if self.is_property_nested(property):
            alias, field = self.add_joins_for_nested_property(
                property, alias, query_builder, query_name_generator
            )

        column = query_builder.column(alias, field)
        query_builder.add_order_by(column.desc() if direction == DESC else column.asc())

    def get_description(self, resource_class: str) -> typing.Dict[str, typing.Dict[str, typing.Any]]:
        if self.properties is None:
            properties: typing.Iterable[str] = self.get_class_metadata(resource_class).field_names
        else:
            properties = self.properties.keys()
        return {
            f"{self.order_parameter_name}[{property}]": {
                "property": property,
                "type": "string",
                "required": False,
            }
            for property in properties
            if self.is_property_mapped(property, resource_class)
        }

    def __init__(
        self,
        manager_registry: ManagerRegistry,
        properties: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        order_parameter_name: str = "order",
    ):
        super().__init__(manager_registry, properties)
        self.order_parameter_name = order_parameter_name

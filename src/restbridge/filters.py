import abc
import typing

from loguru import logger

from .exceptions import InvalidArgumentError
from .interfaces import ClassMetadata, Filter, ManagerRegistry, QueryBuilder
from .models import PropertyParts, Request
from .naming import QueryNameGenerator

NESTING_SEPARATOR = "."


class AbstractFilter(Filter, metaclass=abc.ABCMeta):
    """
    Base class for filters operating on (possibly nested) properties of
    a mapped resource class.

    :param ManagerRegistry manager_registry: Gives access to the class metadata.
    :param properties: The properties the filter is enabled for, mapped to a
                       filter-specific value (a strategy, a default direction, etc.)
                       When omitted, every non-nested property is enabled.
    """

    manager_registry: ManagerRegistry
    properties: typing.Optional[typing.Mapping[str, typing.Any]]

    def get_class_metadata(self, resource_class: str) -> ClassMetadata:
        return self.manager_registry.get_class_metadata(resource_class)

    def is_property_enabled(self, property: str) -> bool:
        if self.properties is None:
            # nested properties must still be explicitly enabled
            return not self.is_property_nested(property)
        return property in self.properties

    def is_property_mapped(
        self, property: str, resource_class: str, allow_association: bool = False
    ) -> bool:
        if self.is_property_nested(property):
            parts = self.split_property_parts(property)
            metadata = self.get_nested_metadata(resource_class, parts.associations)
            property = parts.field
        else:
            metadata = self.get_class_metadata(resource_class)

        return metadata.has_field(property) or (
            allow_association and metadata.has_association(property)
        )

    def is_property_nested(self, property: str) -> bool:
        return NESTING_SEPARATOR in property

    def get_nested_metadata(
        self, resource_class: str, associations: typing.Iterable[str]
    ) -> ClassMetadata:
        """
        Walks the associations from ``resource_class`` and returns the metadata of
        the class owning the leaf. A name that is not an association of the current
        class does not move the walk forward.
        """
        metadata = self.get_class_metadata(resource_class)
        for association in associations:
            if metadata.has_association(association):
                metadata = self.get_class_metadata(
                    metadata.get_association_target_class(association)
                )
        return metadata

    def split_property_parts(self, property: str) -> PropertyParts:
        parts = property.split(NESTING_SEPARATOR)
        return PropertyParts(associations=tuple(parts[:-1]), field=parts[-1])

    def extract_properties(self, request: Request) -> typing.Dict[str, typing.Any]:
        return dict(request.query)

    def add_joins_for_nested_property(
        self,
        property: str,
        root_alias: str,
        query_builder: QueryBuilder,
        query_name_generator: QueryNameGenerator,
    ) -> typing.Tuple[str, str]:
        """
        Adds a left join for every association of a nested property.

        :return: A tuple of the alias bound to the entity owning the leaf, and the leaf field name.
        :raises InvalidArgumentError: If the property is not nested.
        """
        parts = self.split_property_parts(property)
        if not parts.associations:
            raise InvalidArgumentError(
                f'cannot add joins for property "{property}": property is not nested'
            )

        parent_alias = root_alias
        for association in parts.associations:
            alias = query_name_generator.generate_join_alias(association)
            query_builder.left_join(f"{parent_alias}{NESTING_SEPARATOR}{association}", alias)
            parent_alias = alias

        logger.debug("joined {!r} as {!r}", property, parent_alias)
        return parent_alias, parts.field

    def apply(
        self,
        query_builder: QueryBuilder,
        query_name_generator: QueryNameGenerator,
        resource_class: str,
        request: Request,
    ) -> None:
        for property, value in self.extract_properties(request).items():
            self.filter_property(
                property, value, query_builder, query_name_generator, resource_class
            )

    @abc.abstractmethod
    def filter_property(
        self,
        property: str,
        value: typing.Any,
        query_builder: QueryBuilder,
        query_name_generator: QueryNameGenerator,
        resource_class: str,
    ) -> None:
        """
        Applies the filter for a single request parameter. Parameters the filter
        does not understand are to be ignored.
        """
        ...  # pragma: nocover

    def __init__(
        self,
        manager_registry: ManagerRegistry,
        properties: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        self.manager_registry = manager_registry
        self.properties = properties

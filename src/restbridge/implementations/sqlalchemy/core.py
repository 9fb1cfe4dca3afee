import typing
from collections import OrderedDict

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...exceptions import InvalidArgumentError, ResourceClassNotFoundError
from ...interfaces import ClassMetadata, ManagerRegistry


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


class SQLAClassMetadata(ClassMetadata):
    """
    A :py:class:`ClassMetadata` backed by an SQLAlchemy mapper. Column and composite
    properties are fields, relationship properties are associations.
    """

    registry: "SQLAManagerRegistry"
    mapper: orm.Mapper
    fields_: "typing.Optional[OrderedDict[str, orm.interfaces.MapperProperty]]" = None
    associations_: "typing.Optional[OrderedDict[str, orm.RelationshipProperty]]" = None

    @property
    def name(self) -> str:
        return self.mapper.class_.__name__

    @property
    def class_(self) -> type:
        return self.mapper.class_

    def _populate_fields_and_associations(self) -> None:
        if self.fields_ is None:
            fields: "OrderedDict[str, orm.interfaces.MapperProperty]" = OrderedDict()
            associations: "OrderedDict[str, orm.RelationshipProperty]" = OrderedDict()
            for sa_attr in self.mapper.attrs:
                if isinstance(sa_attr, (orm.ColumnProperty, orm.CompositeProperty)):
                    fields[sa_attr.key] = sa_attr
                elif isinstance(sa_attr, orm.RelationshipProperty):
                    associations[sa_attr.key] = sa_attr
            self.fields_ = fields
            self.associations_ = associations

    @property
    def field_names(self) -> typing.Sequence[str]:
        self._populate_fields_and_associations()
        assert self.fields_ is not None
        return list(self.fields_.keys())

    @property
    def identifier_field_names(self) -> typing.Sequence[str]:
        return [self.mapper.get_property_by_column(col).key for col in self.mapper.primary_key]

    def has_field(self, name: str) -> bool:
        self._populate_fields_and_associations()
        assert self.fields_ is not None
        return name in self.fields_

    def has_association(self, name: str) -> bool:
        self._populate_fields_and_associations()
        assert self.associations_ is not None
        return name in self.associations_

    def get_association(self, name: str) -> orm.RelationshipProperty:
        self._populate_fields_and_associations()
        assert self.associations_ is not None
        try:
            return self.associations_[name]
        except KeyError:
            raise InvalidArgumentError(f'"{self.name}" has no association named "{name}"')

    def get_association_target_class(self, name: str) -> str:
        return self.get_association(name).mapper.class_.__name__

    def is_collection_valued_association(self, name: str) -> bool:
        return bool(self.get_association(name).uselist)

    def get_type_of_field(self, name: str) -> typing.Optional[typing.Type]:
        self._populate_fields_and_associations()
        assert self.fields_ is not None
        prop = self.fields_.get(name)
        if isinstance(prop, orm.ColumnProperty):
            if not is_alien_clause(prop.parent, prop.expression):
                try:
                    return prop.expression.type.python_type
                except NotImplementedError:
                    return None
        elif isinstance(prop, orm.CompositeProperty):
            return prop.composite_class
        return None

    def is_nullable(self, name: str) -> bool:
        self._populate_fields_and_associations()
        assert self.fields_ is not None
        prop = self.fields_.get(name)
        if isinstance(prop, orm.ColumnProperty):
            if not is_alien_clause(prop.parent, prop.expression):
                return bool(prop.expression.nullable)
        return False

    def __init__(self, registry: "SQLAManagerRegistry", mapper: orm.Mapper):
        self.registry = registry
        self.mapper = mapper


class SQLAManagerRegistry(ManagerRegistry):
    """
    Looks up mapped classes by their class names.

    :param classes: The mapped classes, or declarative bases whose mapped classes
                    are to be registered.
    """

    classes: typing.Dict[str, type]
    metadata_: typing.Dict[str, SQLAClassMetadata]

    def register(self, class_: type) -> None:
        sa_registry = getattr(class_, "registry", None)
        if isinstance(sa_registry, orm.registry) and getattr(class_, "__mapper__", None) is None:
            for sa_mapper in sa_registry.mappers:
                self.classes[sa_mapper.class_.__name__] = sa_mapper.class_
        else:
            sa_mapper = sa.inspect(class_)
            self.classes[sa_mapper.class_.__name__] = sa_mapper.class_

    def get_mapped_class(self, resource_class: str) -> type:
        try:
            return self.classes[resource_class]
        except KeyError:
            raise ResourceClassNotFoundError(resource_class)

    def get_class_metadata(self, resource_class: str) -> SQLAClassMetadata:
        metadata = self.metadata_.get(resource_class)
        if metadata is None:
            class_ = self.get_mapped_class(resource_class)
            self.metadata_[resource_class] = metadata = SQLAClassMetadata(
                self, sa.inspect(class_)
            )
        return metadata

    def __init__(self, classes: typing.Iterable[type] = ()):
        self.classes = {}
        self.metadata_ = {}
        for class_ in classes:
            self.register(class_)

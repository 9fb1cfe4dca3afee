"""
This package contains a series of interface definitions for the collaborators
the host framework has to provide: the deserializer, the serializer context
builder, the ORM metadata registry and the query builder.

"""
import abc
import typing

if typing.TYPE_CHECKING:
    from .models import Request
    from .naming import QueryNameGenerator


class Deserializer(metaclass=abc.ABCMeta):
    """
    A :py:class:`Deserializer` turns a raw request body into an object of
    the requested resource class.
    """

    @abc.abstractmethod
    def deserialize(
        self,
        data: typing.Union[bytes, str],
        resource_class: str,
        format: str,
        context: typing.Mapping[str, typing.Any],
    ) -> typing.Any:
        """
        Deserializes the body.

        :param data: The raw request body.
        :param str resource_class: The resource class the body is expected to denote.
        :param str format: The format identifier negotiated for the request.
        :param context: Deserialization options. If ``object_to_populate`` is present,
                        the deserializer updates that object instead of creating a new one.
        :return: The deserialized object.
        :raises DeserializationError: If the body cannot be deserialized.
        """
        ...  # pragma: nocover


class SerializerContextBuilder(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def create_from_request(
        self,
        request: "Request",
        normalization: bool,
        extra: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> typing.Dict[str, typing.Any]:
        """
        Builds the (de)serialization options for the request.

        :param Request request: The request being handled.
        :param bool normalization: True when serializing a response, False when
                                   deserializing a request body.
        :param extra: The request attributes relevant to the operation.
        :return: A new dict of options.
        """
        ...  # pragma: nocover


class ClassMetadata(metaclass=abc.ABCMeta):
    """
    A :py:class:`ClassMetadata` describes the fields and the associations
    of a mapped resource class.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        ...  # pragma: nocover

    @property
    @abc.abstractmethod
    def field_names(self) -> typing.Sequence[str]:
        ...  # pragma: nocover

    @abc.abstractmethod
    def has_field(self, name: str) -> bool:
        ...  # pragma: nocover

    @abc.abstractmethod
    def has_association(self, name: str) -> bool:
        ...  # pragma: nocover

    @abc.abstractmethod
    def get_association_target_class(self, name: str) -> str:
        """
        Returns the resource class on the other side of the association.

        :param str name: The association name.
        :return: The name of the target resource class.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def get_type_of_field(self, name: str) -> typing.Optional[typing.Type]:
        """
        Returns the Python type of the field. In case the type is indeterminable,
        returns None.
        """
        ...  # pragma: nocover


class ManagerRegistry(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def get_class_metadata(self, resource_class: str) -> ClassMetadata:
        """
        Returns the :py:class:`ClassMetadata` for the resource class.

        :raises ResourceClassNotFoundError: If the resource class is not mapped.
        """
        ...  # pragma: nocover


class QueryBuilder(metaclass=abc.ABCMeta):
    """
    A :py:class:`QueryBuilder` accumulates the joins and the criteria of
    a single query. Joined entity sets are referred to by their aliases.
    """

    @property
    @abc.abstractmethod
    def root_aliases(self) -> typing.Sequence[str]:
        ...  # pragma: nocover

    @abc.abstractmethod
    def left_join(self, join: str, alias: str) -> None:
        """
        Adds a left outer join.

        :param str join: The association to join, in the form of ``"{parent_alias}.{association}"``.
        :param str alias: The alias to bind to the joined entity set.
        """
        ...  # pragma: nocover


class Filter(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def apply(
        self,
        query_builder: QueryBuilder,
        query_name_generator: "QueryNameGenerator",
        resource_class: str,
        request: "Request",
    ) -> None:
        """
        Applies the filter to the query according to the request parameters.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def get_description(self, resource_class: str) -> typing.Dict[str, typing.Dict[str, typing.Any]]:
        """
        Describes the request parameters the filter understands, keyed by parameter name.
        """
        ...  # pragma: nocover

import collections.abc
import datetime
import decimal
import json
import typing

from sqlalchemy import orm  # type: ignore

from ...exceptions import (
    DeserializationError,
    DeserializationErrorItem,
    InvalidArgumentError,
    ResourceClassNotFoundError,
    UnsupportedFormatError,
)
from ...interfaces import Deserializer
from ...listeners import OBJECT_TO_POPULATE
from .core import SQLAClassMetadata, SQLAManagerRegistry

Decoder = typing.Callable[[str], typing.Any]

JSON_DECODERS: typing.Mapping[str, Decoder] = {
    "json": json.loads,
    "jsonld": json.loads,
}


class _FieldError(Exception):
    message: str

    def __init__(self, message: str):
        self.message = message


def _convert_scalar(type_: typing.Optional[type], value: typing.Any) -> typing.Any:
    if type_ is None or isinstance(value, type_) and not (
        isinstance(value, bool) and type_ is not bool
    ):
        return value
    if type_ is bool or isinstance(value, bool):
        raise _FieldError(f"value has type {type(value).__name__} where {type_.__name__} expected")
    if issubclass(type_, float) and isinstance(value, int):
        return float(value)
    if issubclass(type_, decimal.Decimal) and isinstance(value, (int, float, str)):
        try:
            return decimal.Decimal(str(value))
        except decimal.InvalidOperation:
            raise _FieldError(f"failed to parse {value!r} as a decimal")
    if isinstance(value, str):
        for temporal_type in (datetime.datetime, datetime.date, datetime.time):
            if issubclass(type_, temporal_type):
                try:
                    return temporal_type.fromisoformat(value)
                except ValueError:
                    raise _FieldError(f"failed to parse {value!r} as {temporal_type.__name__}")
    raise _FieldError(f"value has type {type(value).__name__} where {type_.__name__} expected")


class SQLADeserializer(Deserializer):
    """
    A :py:class:`Deserializer` that builds SQLAlchemy-mapped objects out of
    JSON (or JSON-LD) documents whose keys are the field and association names.

    Associations are given as identifiers of the related objects and are resolved
    through ``session``; without a session, they cannot be set. JSON-LD keywords
    (keys beginning with ``@``) are ignored.

    All the problems found in a document are reported at once, and nothing is
    assigned to the object if there is any.

    :param SQLAManagerRegistry manager_registry: Resolves resource classes.
    :param session: The session to look up related objects with.
    :param decoders: Decoders by format identifier.
    """

    manager_registry: SQLAManagerRegistry
    session: typing.Optional[orm.Session]
    decoders: typing.Mapping[str, Decoder]

    def _decode(self, data: typing.Union[bytes, str], format: str) -> typing.Any:
        decoder = self.decoders.get(format)
        if decoder is None:
            raise UnsupportedFormatError(data, format)
        try:
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            return decoder(text)
        except ValueError as e:
            raise DeserializationError(
                data, [DeserializationErrorItem("", f"malformed {format} document ({e})")]
            ) from e

    def _resolve_related(
        self, metadata: SQLAClassMetadata, name: str, value: typing.Any
    ) -> typing.Any:
        if self.session is None:
            raise _FieldError("associations cannot be set without a session")
        target_class = metadata.get_association(name).mapper.class_

        def get(id: typing.Any) -> typing.Any:
            if not isinstance(id, (str, int)):
                raise _FieldError(f"value {id!r} is not a valid identifier")
            assert self.session is not None
            related = self.session.get(target_class, id)
            if related is None:
                raise _FieldError(f'no "{target_class.__name__}" found for {id!r}')
            return related

        if metadata.is_collection_valued_association(name):
            if isinstance(value, str) or not isinstance(value, collections.abc.Sequence):
                raise _FieldError("value must be a list of identifiers")
            return [get(id) for id in value]
        return None if value is None else get(value)

    def deserialize(
        self,
        data: typing.Union[bytes, str],
        resource_class: str,
        format: str,
        context: typing.Mapping[str, typing.Any],
    ) -> typing.Any:
        payload = self._decode(data, format)
        if not isinstance(payload, collections.abc.Mapping):
            raise DeserializationError(
                payload, [DeserializationErrorItem("", "document must be an object")]
            )

        try:
            metadata = self.manager_registry.get_class_metadata(resource_class)
        except ResourceClassNotFoundError as e:
            raise DeserializationError(payload, [DeserializationErrorItem("", e.message)]) from e

        target = context.get(OBJECT_TO_POPULATE)
        if target is not None and not isinstance(target, metadata.class_):
            raise InvalidArgumentError(
                f"object to populate is not an instance of {metadata.class_.__name__}: {target!r}"
            )

        identifier_field_names = set(metadata.identifier_field_names)
        assignments: typing.List[typing.Tuple[str, typing.Any]] = []
        errors: typing.List[DeserializationErrorItem] = []
        for name, value in payload.items():
            if name.startswith("@"):
                continue
            path = f"/{name}"
            try:
                if metadata.has_field(name):
                    if name in identifier_field_names:
                        raise _FieldError(f'attribute "{name}" is read-only')
                    if value is None:
                        if not metadata.is_nullable(name):
                            raise _FieldError(f'attribute "{name}" cannot be null')
                    else:
                        value = _convert_scalar(metadata.get_type_of_field(name), value)
                elif metadata.has_association(name):
                    value = self._resolve_related(metadata, name, value)
                else:
                    raise _FieldError(f'unknown attribute "{name}"')
            except _FieldError as e:
                errors.append(DeserializationErrorItem(path, e.message))
                continue
            assignments.append((name, value))

        if errors:
            raise DeserializationError(payload, errors)

        if target is None:
            target = metadata.class_()
        for name, value in assignments:
            setattr(target, name, value)
        return target

    def __init__(
        self,
        manager_registry: SQLAManagerRegistry,
        session: typing.Optional[orm.Session] = None,
        decoders: typing.Optional[typing.Mapping[str, Decoder]] = None,
    ):
        self.manager_registry = manager_registry
        self.session = session
        self.decoders = decoders if decoders is not None else JSON_DECODERS

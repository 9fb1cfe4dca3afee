import abc
import typing


class RestBridgeException(Exception, metaclass=abc.ABCMeta):
    pass


class ConfigurationError(RestBridgeException):
    message: str

    def __str__(self):
        return self.message

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(RestBridgeException):
    message: str

    def __str__(self):
        return self.message

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResourceClassNotFoundError(RestBridgeException):
    resource_class: str

    @property
    def message(self):
        return f'no mapped class known as "{self.resource_class}"'

    def __str__(self):
        return self.message

    def __init__(self, resource_class: str):
        super().__init__(resource_class)
        self.resource_class = resource_class


class DeserializationErrorItem(typing.NamedTuple):
    path: str
    message: str


class DeserializationError(RestBridgeException):
    """
    Raised by a :py:class:`restbridge.interfaces.Deserializer` when the request
    body cannot be turned into an object of the requested resource class.

    The listener never catches it; translating it into a client-facing response
    is up to the host framework.
    """

    payload: typing.Any
    errors: typing.Sequence[DeserializationErrorItem]

    @property
    def message(self) -> str:
        return "; ".join(
            f"{item.path}: {item.message}" if item.path else item.message for item in self.errors
        )

    def __str__(self):
        return self.message

    def __init__(self, payload: typing.Any, errors: typing.Sequence[DeserializationErrorItem]):
        super().__init__(payload, errors)
        self.payload = payload
        self.errors = errors


class UnsupportedFormatError(DeserializationError):
    format: str

    def __init__(self, payload: typing.Any, format: str):
        super().__init__(
            payload, [DeserializationErrorItem("", f'format "{format}" is not supported')]
        )
        self.format = format

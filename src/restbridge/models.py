import dataclasses
import typing

FormatTable = typing.Mapping[str, typing.Sequence[str]]

SAFE_METHODS: typing.FrozenSet[str] = frozenset(["GET", "HEAD", "OPTIONS", "TRACE"])


@dataclasses.dataclass
class RequestAttributes:
    """
    Out-of-band attributes the host framework attaches to a request once routing
    has determined which resource and operation it targets.

    ``result`` is the only field written by this package.
    """

    resource_class: typing.Optional[str] = None
    collection_operation_name: typing.Optional[str] = None
    item_operation_name: typing.Optional[str] = None
    existing_object: typing.Optional[typing.Any] = None
    result: typing.Optional[typing.Any] = None

    @property
    def operation_name(self) -> typing.Optional[str]:
        if self.collection_operation_name is not None:
            return self.collection_operation_name
        return self.item_operation_name

    @property
    def is_managed(self) -> bool:
        return self.resource_class is not None and self.operation_name is not None

    def as_context_options(self) -> typing.Dict[str, typing.Any]:
        options: typing.Dict[str, typing.Any] = {"resource_class": self.resource_class}
        if self.collection_operation_name is not None:
            options["collection_operation_name"] = self.collection_operation_name
        elif self.item_operation_name is not None:
            options["item_operation_name"] = self.item_operation_name
        return options


@dataclasses.dataclass
class Request:
    method: str = "GET"
    content_type: typing.Optional[str] = None
    format: typing.Optional[str] = None
    content: typing.Union[bytes, str] = b""
    query: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)
    attributes: RequestAttributes = dataclasses.field(default_factory=RequestAttributes)
    uri: str = "/"

    def __post_init__(self):
        self.method = self.method.upper()

    def is_method_safe(self) -> bool:
        return self.method in SAFE_METHODS

    @property
    def mime_type(self) -> typing.Optional[str]:
        if self.content_type is None:
            return None
        mime_type = self.content_type.split(";", 1)[0].strip().lower()
        return mime_type or None


class PropertyParts(typing.NamedTuple):
    associations: typing.Tuple[str, ...]
    field: str

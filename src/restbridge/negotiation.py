import types
import typing
from collections import OrderedDict

from loguru import logger

from .exceptions import ConfigurationError
from .models import FormatTable, Request


class FormatNegotiator:
    """
    Resolves the format of a request body against a table of formats.

    A format hint already set on the request wins if the table knows it.
    Otherwise the declared content type is looked up, and when nothing
    matches the first format of the table is used.

    :param formats: A mapping of format identifiers to the MIME types they stand for.
                    Its iteration order decides ties and the default format.
    """

    _formats: typing.Mapping[str, typing.Tuple[str, ...]]

    @property
    def formats(self) -> typing.Mapping[str, typing.Tuple[str, ...]]:
        return self._formats

    @property
    def default_format(self) -> str:
        for format in self._formats:
            return format
        raise ConfigurationError("no format is configured")

    def get_format(self, mime_type: typing.Optional[str]) -> typing.Optional[str]:
        if mime_type is None:
            return None
        mime_type = mime_type.lower()
        for format, mime_types in self._formats.items():
            if mime_type in mime_types:
                return format
        return None

    def get_mime_types(self, format: str) -> typing.Sequence[str]:
        return self._formats.get(format, ())

    def resolve(self, request: Request) -> str:
        if not self._formats:
            raise ConfigurationError("no format is configured")

        if request.format is not None and request.format in self._formats:
            return request.format

        format = self.get_format(request.mime_type)
        if format is not None:
            return format

        # unmatched content types are tolerated
        default_format = self.default_format
        logger.debug(
            "no format matches content type {!r}, falling back to {!r}",
            request.content_type,
            default_format,
        )
        return default_format

    def __init__(self, formats: FormatTable):
        self._formats = types.MappingProxyType(
            OrderedDict(
                (format, tuple(mime_type.lower() for mime_type in mime_types))
                for format, mime_types in formats.items()
            )
        )

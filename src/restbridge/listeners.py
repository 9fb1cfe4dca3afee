import typing

from loguru import logger

from .config import Settings, get_settings
from .interfaces import Deserializer, SerializerContextBuilder
from .models import FormatTable, Request
from .negotiation import FormatNegotiator

OBJECT_TO_POPULATE = "object_to_populate"


class DeserializeListener:
    """
    Deserializes the body of a request that targets a managed resource and stores
    the resulting object in ``request.attributes.result``.

    Requests with a safe method and requests the host framework did not route to
    a resource operation are left untouched. Errors raised by the deserializer
    are not caught.

    :param Deserializer deserializer: Turns the body into an object.
    :param SerializerContextBuilder context_builder: Builds the deserialization options.
    :param formats: A mapping of format identifiers to MIME types.
    """

    deserializer: Deserializer
    context_builder: SerializerContextBuilder
    negotiator: FormatNegotiator

    def on_request(self, request: Request) -> None:
        if request.is_method_safe():
            logger.debug("skipping {} request: safe method", request.method)
            return

        attributes = request.attributes
        if not attributes.is_managed:
            logger.debug("skipping {} {}: not a resource operation", request.method, request.uri)
            return

        format = self.negotiator.resolve(request)
        context = dict(
            self.context_builder.create_from_request(
                request, False, attributes.as_context_options()
            )
        )
        if attributes.existing_object is not None:
            context[OBJECT_TO_POPULATE] = attributes.existing_object

        logger.debug(
            "deserializing {} body as {!r} ({})",
            attributes.resource_class,
            format,
            attributes.operation_name,
        )
        assert attributes.resource_class is not None
        attributes.result = self.deserializer.deserialize(
            request.content, attributes.resource_class, format, context
        )

    __call__ = on_request

    @classmethod
    def from_settings(
        cls,
        deserializer: Deserializer,
        context_builder: SerializerContextBuilder,
        settings: typing.Optional[Settings] = None,
    ) -> "DeserializeListener":
        if settings is None:
            settings = get_settings()
        return cls(deserializer, context_builder, settings.formats)

    def __init__(
        self,
        deserializer: Deserializer,
        context_builder: SerializerContextBuilder,
        formats: FormatTable,
    ):
        self.deserializer = deserializer
        self.context_builder = context_builder
        self.negotiator = FormatNegotiator(formats)

import typing

from .interfaces import SerializerContextBuilder as _SerializerContextBuilder
from .models import Request


class SerializerContextBuilder(_SerializerContextBuilder):
    """
    Builds (de)serialization options from the per-resource contexts
    configured for the API and the attributes of the request.

    :param resource_contexts: A mapping of resource class names to mappings that may hold
                              ``normalization_context`` and ``denormalization_context``.
    """

    resource_contexts: typing.Mapping[str, typing.Mapping[str, typing.Mapping[str, typing.Any]]]

    def create_from_request(
        self,
        request: Request,
        normalization: bool,
        extra: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> typing.Dict[str, typing.Any]:
        if extra is None:
            extra = request.attributes.as_context_options()

        context: typing.Dict[str, typing.Any] = {}
        resource_class = extra.get("resource_class")
        if resource_class is not None:
            resource_context = self.resource_contexts.get(resource_class, {})
            key = "normalization_context" if normalization else "denormalization_context"
            context.update(resource_context.get(key, {}))

        context.update(extra)
        context["request_uri"] = request.uri
        return context

    def __init__(
        self,
        resource_contexts: typing.Optional[
            typing.Mapping[str, typing.Mapping[str, typing.Mapping[str, typing.Any]]]
        ] = None,
    ):
        self.resource_contexts = resource_contexts if resource_contexts is not None else {}

from loguru import logger

from .exceptions import (  # noqa: F401
    ConfigurationError,
    DeserializationError,
    DeserializationErrorItem,
    InvalidArgumentError,
    ResourceClassNotFoundError,
    RestBridgeException,
    UnsupportedFormatError,
)
from .filters import AbstractFilter  # noqa: F401
from .listeners import OBJECT_TO_POPULATE, DeserializeListener  # noqa: F401
from .models import PropertyParts, Request, RequestAttributes  # noqa: F401
from .naming import QueryNameGenerator  # noqa: F401
from .negotiation import FormatNegotiator  # noqa: F401
from .serializer import SerializerContextBuilder  # noqa: F401

logger.disable(__name__)

from .http.errors import (
	HTTPMessageError,
	InvalidArgument,
	StreamCapabilityError,
	NotReadable,
	NotWritable,
	NotSeekable,
	StreamIOError,
	MissingBody,
)  # NOQA: F401
from .http.stream import Stream  # NOQA: F401
from .http.model import HTTPMethod, ServerRequest  # NOQA: F401
from .http.params import Params, UploadedFile, request  # NOQA: F401
from .utils.uri import URI  # NOQA: F401

__version__ = "1.0.0"

# EOF

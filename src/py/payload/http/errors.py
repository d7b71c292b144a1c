# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPMessageError(Exception):
	"""Base class for all the errors raised by requests and streams."""


class InvalidArgument(HTTPMessageError, ValueError):
	"""An unsupported value was given to a constructor or mutator, like an
	unknown HTTP method or a negative seek offset."""


class StreamCapabilityError(HTTPMessageError):
	"""The stream is detached, or does not support the operation."""


class NotReadable(StreamCapabilityError):
	pass


class NotWritable(StreamCapabilityError):
	pass


class NotSeekable(StreamCapabilityError):
	pass


class StreamIOError(HTTPMessageError, OSError):
	"""The underlying handle failed, the underlying error is available
	as `__cause__`."""


class MissingBody(HTTPMessageError, LookupError):
	"""The request has no body stream attached."""


# EOF

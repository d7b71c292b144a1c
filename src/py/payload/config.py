from os import getenv
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

# The protocol version given to requests created without one.
DEFAULT_PROTOCOL_VERSION: str = getenv("PAYLOAD_PROTOCOL_VERSION", "1.1")

# Logs a warning when a request body can't be decoded as a JSON object.
LOG_PARSE_ERRORS: bool = getenv("PAYLOAD_LOG_PARSE_ERRORS", "1") == "1"

# Upper bound of what is read from `wsgi.input` when extracting parameters.
MAX_BODY_SIZE: int = int(getenv("PAYLOAD_MAX_BODY_SIZE", 10 * 1024 * 1024))

# EOF

from enum import Enum
from typing import Any, Iterable, Mapping, Protocol

from mypy_extensions import mypyc_attr

from .. import config
from ..utils.json import unjsonobject
from ..utils.logging import warning
from .errors import InvalidArgument, MissingBody
from .stream import Stream

# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPMethod(Enum):
	"""The methods accepted by `ServerRequest.withMethod`."""

	GET = "GET"
	POST = "POST"
	PUT = "PUT"
	DELETE = "DELETE"

	@classmethod
	def Has(cls, method: Any) -> bool:
		return isinstance(method, str) and method in (_.value for _ in cls)


class TURI(Protocol):
	"""What a request expects from a URI value."""

	@property
	def host(self) -> str | None:
		...


class Unset:
	"""Marks a parsed body that was never set, as opposed to one that was
	explicitly set to `None`."""

	__slots__: list[str] = []

	def __repr__(self) -> str:
		return "UNSET"


UNSET: Unset = Unset()

THeaderValue = str | bytes | int | float | Iterable[str | bytes | int | float]


def headervalues(value: THeaderValue) -> list[str]:
	"""Normalizes a header value as a list of strings."""
	if isinstance(value, str):
		return [value]
	elif isinstance(value, bytes):
		return [value.decode(config.DEFAULT_ENCODING)]
	elif isinstance(value, (int, float)):
		return [str(value)]
	else:
		return [headervalue(_) for _ in value]


def headervalue(value: str | bytes | int | float) -> str:
	if isinstance(value, str):
		return value
	elif isinstance(value, bytes):
		return value.decode(config.DEFAULT_ENCODING)
	else:
		return str(value)


def bodycopy(value: Any) -> Any:
	"""Copies parsed bodies that are mappings, other values are opaque and
	returned as-is."""
	return dict(value) if isinstance(value, Mapping) else value


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class ServerRequest:
	"""An immutable HTTP server request. Every `with*` method returns a new
	request and leaves this one untouched, so instances can be freely
	shared. Containers are copied when they're given or returned, and a
	derived request only copies the container it changes."""

	__slots__ = [
		"_uri",
		"_attributes",
		"_cookieParams",
		"_queryParams",
		"_parsedBody",
		"_serverParams",
		"_uploadedFiles",
		"_requestTarget",
		"_method",
		"_protocolVersion",
		"_headers",
		"_body",
	]

	def __init__(
		self,
		uri: TURI,
		attributes: Mapping[str, Any] | None = None,
		cookieParams: Mapping[str, str] | None = None,
		queryParams: Mapping[str, str] | None = None,
		parsedBody: Any = UNSET,
		serverParams: Mapping[str, Any] | None = None,
		uploadedFiles: Iterable[Any] | None = None,
		requestTarget: str | None = None,
		method: str = "GET",
		protocolVersion: str | None = None,
		headers: Mapping[str, THeaderValue] | None = None,
		body: Stream | None = None,
	):
		init = object.__setattr__
		init(self, "_uri", uri)
		init(self, "_attributes", dict(attributes) if attributes else {})
		init(self, "_cookieParams", dict(cookieParams) if cookieParams else {})
		init(self, "_queryParams", dict(queryParams) if queryParams else {})
		init(self, "_parsedBody", bodycopy(parsedBody))
		init(self, "_serverParams", dict(serverParams) if serverParams else {})
		init(self, "_uploadedFiles", list(uploadedFiles) if uploadedFiles else [])
		init(self, "_requestTarget", requestTarget)
		init(self, "_method", method)
		init(
			self,
			"_protocolVersion",
			config.DEFAULT_PROTOCOL_VERSION if protocolVersion is None else protocolVersion,
		)
		init(
			self,
			"_headers",
			{k: headervalues(v) for k, v in headers.items()} if headers else {},
		)
		init(self, "_body", body)

	def _derive(self, **changes: Any) -> "ServerRequest":
		"""Returns a copy of this request with the given slots (named without
		their leading underscore) replaced. Containers passed in `changes`
		must already be fresh copies, the other ones are shared."""
		res = object.__new__(type(self))
		for slot in ServerRequest.__slots__:
			name = slot[1:]
			object.__setattr__(
				res, slot, changes[name] if name in changes else getattr(self, slot)
			)
		return res

	def __setattr__(self, name: str, value: Any) -> None:
		raise AttributeError(f"ServerRequest is immutable, can't set '{name}'")

	def __delattr__(self, name: str) -> None:
		raise AttributeError(f"ServerRequest is immutable, can't delete '{name}'")

	# =========================================================================
	# PARAMS
	# =========================================================================

	def getServerParams(self) -> dict[str, Any]:
		return dict(self._serverParams)

	def getCookieParams(self) -> dict[str, str]:
		return dict(self._cookieParams)

	def withCookieParams(self, cookies: Mapping[str, str]) -> "ServerRequest":
		return self._derive(cookieParams=dict(cookies))

	def getQueryParams(self) -> dict[str, str]:
		return dict(self._queryParams)

	def withQueryParams(self, query: Mapping[str, str]) -> "ServerRequest":
		return self._derive(queryParams=dict(query))

	def getUploadedFiles(self) -> list[Any]:
		return list(self._uploadedFiles)

	def withUploadedFiles(self, uploadedFiles: Iterable[Any]) -> "ServerRequest":
		return self._derive(uploadedFiles=list(uploadedFiles))

	# =========================================================================
	# BODY
	# =========================================================================

	def getParsedBody(self) -> Any:
		"""Returns the parsed body when it was set, otherwise decodes the
		body stream as a JSON object, falling back to `{}`.

		The decoded value is not cached: each call reads the body again.
		A seekable body is rewound first, but a non-seekable one is read
		from wherever the previous call left it, which usually means that
		a second call returns `{}`."""
		if self._parsedBody is not UNSET:
			return bodycopy(self._parsedBody)
		if self._body is None:
			return None
		payload = bytes(self._body)
		res = unjsonobject(payload) if payload else None
		if res is None:
			if payload and config.LOG_PARSE_ERRORS:
				warning(
					"Request body is not a JSON object, using an empty one",
					Length=len(payload),
				)
			return {}
		return res

	def withParsedBody(self, data: Any) -> "ServerRequest":
		return self._derive(parsedBody=bodycopy(data))

	def getBody(self) -> Stream:
		if self._body is None:
			raise MissingBody("The body stream is missing")
		return self._body

	def withBody(self, body: Stream) -> "ServerRequest":
		return self._derive(body=body)

	# =========================================================================
	# ATTRIBUTES
	# =========================================================================

	def getAttributes(self) -> dict[str, Any]:
		return dict(self._attributes)

	def getAttribute(self, name: str, default: Any = None) -> Any:
		return self._attributes.get(name, default)

	def withAttribute(self, name: str, value: Any) -> "ServerRequest":
		return self._derive(attributes=self._attributes | {name: value})

	def withoutAttribute(self, name: str) -> "ServerRequest":
		return self._derive(
			attributes={k: v for k, v in self._attributes.items() if k != name}
		)

	# =========================================================================
	# REQUEST LINE
	# =========================================================================

	def getRequestTarget(self) -> str:
		return "/" if self._requestTarget is None else self._requestTarget

	def withRequestTarget(self, requestTarget: str) -> "ServerRequest":
		if not isinstance(requestTarget, str):
			raise InvalidArgument(
				f"Invalid request target provided, must be a string: {requestTarget!r}"
			)
		return self._derive(requestTarget=requestTarget)

	def getMethod(self) -> str:
		return self._method

	def withMethod(self, method: str) -> "ServerRequest":
		if not HTTPMethod.Has(method):
			raise InvalidArgument(
				f"ServerRequest.withMethod expects a valid HTTP method, received {method!r}"
			)
		return self._derive(method=method)

	def getUri(self) -> TURI:
		return self._uri

	def withUri(self, uri: TURI, preserveHost: bool = False) -> "ServerRequest":
		res = self._derive(uri=uri)
		if preserveHost and res.hasHeader("Host"):
			return res
		return res.withHeader("Host", uri.host or "")

	def getProtocolVersion(self) -> str:
		return self._protocolVersion

	def withProtocolVersion(self, protocolVersion: str) -> "ServerRequest":
		return self._derive(protocolVersion=protocolVersion)

	# =========================================================================
	# HEADERS
	# =========================================================================

	def _headerKey(self, name: str) -> str | None:
		"""Returns the stored key matching `name`, preferring an exact match
		over the first case-insensitive one."""
		if name in self._headers:
			return name
		key = name.casefold()
		for k in self._headers:
			if k.casefold() == key:
				return k
		return None

	def getHeaders(self) -> dict[str, list[str]]:
		return {k: list(v) for k, v in self._headers.items()}

	def hasHeader(self, name: str) -> bool:
		return self._headerKey(name) is not None

	def getHeader(self, name: str) -> list[str]:
		key = self._headerKey(name)
		return [] if key is None else list(self._headers[key])

	def getHeaderLine(self, name: str) -> str:
		return ", ".join(self.getHeader(name))

	def withHeader(self, name: str, value: THeaderValue) -> "ServerRequest":
		# NOTE: Only the exact key is replaced, so "content-type" and
		# "Content-Type" can coexist.
		return self._derive(headers=self._headers | {name: headervalues(value)})

	def withAddedHeader(self, name: str, value: THeaderValue) -> "ServerRequest":
		return self._derive(
			headers=self._headers
			| {name: self._headers.get(name, []) + headervalues(value)}
		)

	def withoutHeader(self, name: str) -> "ServerRequest":
		# NOTE: The key is kept with no values, `hasHeader` is still true.
		return self.withHeader(name, [])

	# =========================================================================
	# API
	# =========================================================================

	def __str__(self) -> str:
		return f"ServerRequest({self._method} {self.getRequestTarget()} HTTP/{self._protocolVersion} {self._uri})"

	def __repr__(self) -> str:
		return str(self)


# EOF

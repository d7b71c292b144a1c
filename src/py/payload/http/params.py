from http.cookies import CookieError, SimpleCookie
from typing import IO, Any, Iterable, Mapping, NamedTuple
from urllib.parse import parse_qsl, urlsplit

from .. import config
from ..utils.io import asString
from ..utils.json import unjsonobject
from ..utils.logging import debug
from ..utils.uri import URI
from .errors import StreamIOError
from .model import UNSET, ServerRequest
from .stream import Stream

# --
# == Raw parameter extraction
#
# Python's equivalent of the query/post/files tables is the WSGI (or CGI)
# `environ`. The `Params` class wraps these raw sources, and `request()`
# bootstraps a `ServerRequest` out of them.

FORM_CONTENT_TYPE: str = "application/x-www-form-urlencoded"
TEnviron = Mapping[str, Any]


def headername(name: str) -> str:
	"""Converts a CGI variable name like `CONTENT_TYPE` to `Content-Type`."""
	return "-".join(_.capitalize() for _ in name.lower().split("_"))


def sanitizeInt(value: Any) -> int:
	"""Keeps only the digits and sign characters of `value`, returning 0
	when nothing usable is left."""
	digits = "".join(_ for _ in asString(value) if _.isdigit() or _ in "+-")
	try:
		return int(digits)
	except ValueError:
		return 0


# -----------------------------------------------------------------------------
#
# UPLOADED FILES
#
# -----------------------------------------------------------------------------


class UploadedFile(NamedTuple):
	"""A file uploaded as part of a multipart request, as found in the raw
	files table."""

	name: str
	size: int
	path: str
	contentType: str

	@staticmethod
	def FromDict(info: Mapping[str, Any]) -> "UploadedFile":
		return UploadedFile(
			name=asString(info.get("name")),
			size=sanitizeInt(info.get("size")),
			path=asString(info.get("tmp_name")),
			contentType=asString(info.get("type")),
		)


# -----------------------------------------------------------------------------
#
# PARAMS
#
# -----------------------------------------------------------------------------


class Params:
	"""Extracts parameters from the raw query, post and files tables, and
	from the raw request body."""

	__slots__ = ["query", "post", "files", "_input", "_raw"]

	@staticmethod
	def FromEnviron(environ: TEnviron) -> "Params":
		query = dict(
			parse_qsl(asString(environ.get("QUERY_STRING")), keep_blank_values=True)
		)
		raw = readInput(environ)
		post: dict[str, str] = {}
		if contentType(environ) == FORM_CONTENT_TYPE:
			post = dict(
				parse_qsl(
					raw.decode(config.DEFAULT_ENCODING, errors="replace"),
					keep_blank_values=True,
				)
			)
		return Params(
			query=query,
			post=post,
			files=environ.get("payload.files") or [],
			input=raw,
		)

	def __init__(
		self,
		query: Mapping[str, str] | None = None,
		post: Mapping[str, str] | None = None,
		files: Iterable[Any] | Mapping[str, Any] | None = None,
		input: bytes | IO[bytes] | None = None,
	):
		self.query: Any = query
		self.post: Any = post
		self.files: Any = files
		self._input: bytes | IO[bytes] | None = input
		self._raw: bytes | None = None

	def getFiles(self) -> list[UploadedFile]:
		entries: Iterable[Any] = (
			self.files.values() if isinstance(self.files, Mapping) else self.files or ()
		)
		res: list[UploadedFile] = []
		for entry in entries:
			if isinstance(entry, UploadedFile):
				res.append(entry)
			elif isinstance(entry, Mapping):
				res.append(UploadedFile.FromDict(entry))
			else:
				debug("Skipping malformed uploaded file entry", Type=type(entry).__name__)
		return res

	def getQueryParams(self) -> dict[str, str]:
		return dict(self.query) if isinstance(self.query, Mapping) else {}

	def getPostParams(self) -> dict[str, str]:
		return dict(self.post) if isinstance(self.post, Mapping) else {}

	def getRawBody(self) -> bytes:
		"""Returns the raw body, reading the input on first access only."""
		if self._raw is None:
			source = self._input
			if source is None:
				self._raw = b""
			elif isinstance(source, (bytes, bytearray)):
				self._raw = bytes(source)
			else:
				try:
					self._raw = source.read()
				except OSError as e:
					raise StreamIOError("Unable to read request input") from e
		return self._raw

	def getRequestBody(self) -> dict[str, Any]:
		raw = self.getRawBody()
		return (unjsonobject(raw) if raw else None) or {}

	def getAllParams(self) -> dict[str | int, Any]:
		"""Merges query, post, files and body parameters, in that order, the
		later ones taking precedence."""
		res: dict[str | int, Any] = {}
		res.update(self.getQueryParams())
		res.update(self.getPostParams())
		res.update(enumerate(self.getFiles()))
		res.update(self.getRequestBody())
		return res


# -----------------------------------------------------------------------------
#
# ENVIRON
#
# -----------------------------------------------------------------------------


def contentType(environ: TEnviron) -> str:
	return asString(environ.get("CONTENT_TYPE")).split(";", 1)[0].strip().lower()


def contentLength(environ: TEnviron) -> int:
	try:
		return max(0, int(environ.get("CONTENT_LENGTH") or 0))
	except ValueError:
		return 0


def readInput(environ: TEnviron) -> bytes:
	"""Reads the request body from `wsgi.input`, up to `CONTENT_LENGTH`
	bytes and never more than `MAX_BODY_SIZE`."""
	stream = environ.get("wsgi.input")
	length = min(contentLength(environ), config.MAX_BODY_SIZE)
	if stream is None or not length:
		return b""
	try:
		return bytes(stream.read(length))
	except OSError as e:
		raise StreamIOError("Unable to read request input") from e


def environURI(environ: TEnviron) -> URI:
	scheme = asString(environ.get("wsgi.url_scheme")) or "http"
	authority = asString(environ.get("HTTP_HOST"))
	if not authority:
		authority = asString(environ.get("SERVER_NAME"))
		port = asString(environ.get("SERVER_PORT"))
		if port and port != {"http": "80", "https": "443"}.get(scheme):
			authority = f"{authority}:{port}"
	url = urlsplit(f"//{authority}")
	try:
		port_number = url.port
	except ValueError:
		port_number = None
	return URI(
		scheme=scheme,
		host=url.hostname,
		port=port_number,
		path=asString(environ.get("PATH_INFO")) or "/",
		query=asString(environ.get("QUERY_STRING")) or None,
	)


def environHeaders(environ: TEnviron) -> dict[str, str]:
	res: dict[str, str] = {}
	for k, v in environ.items():
		if k.startswith("HTTP_"):
			res[headername(k[5:])] = asString(v)
		elif k in ("CONTENT_TYPE", "CONTENT_LENGTH") and v:
			res[headername(k)] = asString(v)
	return res


def environCookies(environ: TEnviron) -> dict[str, str]:
	header = asString(environ.get("HTTP_COOKIE"))
	if not header:
		return {}
	cookies: SimpleCookie = SimpleCookie()
	try:
		cookies.load(header)
	except CookieError as e:
		debug("Skipping malformed cookie header", Reason=str(e))
		return {}
	return {k: v.value for k, v in cookies.items()}


def request(environ: TEnviron) -> ServerRequest:
	"""Creates the initial request out of a WSGI/CGI environ. Form posts
	get their parsed body from the post params, other bodies are decoded
	lazily by `ServerRequest.getParsedBody`."""
	params = Params.FromEnviron(environ)
	uri = environURI(environ)
	protocol = asString(environ.get("SERVER_PROTOCOL")) or "HTTP/1.1"
	return ServerRequest(
		uri=uri,
		cookieParams=environCookies(environ),
		queryParams=params.getQueryParams(),
		parsedBody=(
			params.getPostParams()
			if contentType(environ) == FORM_CONTENT_TYPE
			else UNSET
		),
		serverParams={k: v for k, v in environ.items() if isinstance(v, str)},
		uploadedFiles=params.getFiles(),
		requestTarget=asString(environ.get("REQUEST_URI")) or uri.target,
		method=asString(environ.get("REQUEST_METHOD")) or "GET",
		protocolVersion=protocol.removeprefix("HTTP/"),
		headers=environHeaders(environ),
		body=Stream.FromBytes(params.getRawBody()),
	)


# EOF

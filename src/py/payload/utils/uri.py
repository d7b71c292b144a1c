from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit


class URI:
	"""A minimal URI value, this is what `ServerRequest.withUri` expects,
	although any object with a `host` attribute would do."""

	__slots__ = (
		"path",
		"scheme",
		"host",
		"port",
		"query",
		"fragment",
	)

	@classmethod
	def Parse(cls, link: "URI|str") -> "URI":
		if isinstance(link, URI):
			return link
		# NOTE: A link without a scheme like "example.com/hello" is parsed
		# as a path, which is what `urlsplit` does too.
		res = urlsplit(link)
		return URI(
			scheme=res.scheme or None,
			host=res.hostname,
			port=res.port,
			path=res.path,
			query=res.query or None,
			fragment=res.fragment or None,
		)

	def __init__(
		self,
		*,
		path: str | None = None,
		scheme: str | None = None,
		host: str | None = None,
		port: int | None = None,
		query: str | None = None,
		fragment: str | None = None,
	):
		self.path = path
		self.scheme = scheme
		self.host = host
		self.port = port
		self.query = query
		self.fragment = fragment

	@property
	def authority(self) -> str:
		"""The `host[:port]` part, as it would appear in a `Host` header."""
		if not self.host:
			return ""
		return f"{self.host}:{self.port}" if self.port else self.host

	@property
	def target(self) -> str:
		"""The origin-form request target, ie. the path and query."""
		path = self.path or "/"
		return f"{path}?{self.query}" if self.query else path

	def derive(
		self,
		path: str | None = None,
		scheme: str | None = None,
		host: str | None = None,
		port: int | None = None,
		query: str | None = None,
		fragment: str | None = None,
	) -> "URI":
		return URI(
			path=self.path if path is None else path,
			scheme=self.scheme if scheme is None else scheme,
			host=self.host if host is None else host,
			port=self.port if port is None else port,
			query=self.query if query is None else query,
			fragment=self.fragment if fragment is None else fragment,
		)

	def asDict(self) -> dict[str, Any]:
		return {
			k: v
			for k, v in dict(
				path=self.path,
				scheme=self.scheme,
				host=self.host,
				port=self.port,
				query=self.query,
				fragment=self.fragment,
			).items()
			if v is not None
		}

	def __eq__(self, other: Any) -> bool:
		if isinstance(other, str):
			return str(self) == other
		elif isinstance(other, URI):
			return self.asDict() == other.asDict()
		else:
			return False

	def __hash__(self) -> int:
		return hash(str(self))

	def __repr__(self) -> str:
		return f"URI({' '.join(f'{k}={v}' for k, v in self.asDict().items())})"

	def __str__(self) -> str:
		res: list[str] = []
		if self.scheme:
			res.append(self.scheme)
			res.append("://")
		if self.host:
			res.append(self.authority)
		if self.path:
			res.append(self.path)
		if self.query:
			res.append("?")
			res.append(self.query)
		if self.fragment:
			res.append("#")
			res.append(self.fragment)
		return "".join(res)


def uri(value: str | URI) -> URI:
	return value if isinstance(value, URI) else URI.Parse(value)


# EOF

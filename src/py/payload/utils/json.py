from typing import Any, TypeAlias, cast
import json as basejson

TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def unjson(value: bytes | str) -> TJSON:
	"""Converts JSON-encoded to a value, raises `ValueError` when the
	payload is not valid JSON."""
	return cast(TJSON, basejson.loads(value))


def unjsonobject(value: bytes | str) -> dict[str, Any] | None:
	"""Decodes the given JSON payload, returning `None` when it can't be
	decoded or when it does not decode to an object."""
	try:
		res = unjson(value)
	except ValueError:
		return None
	return res if isinstance(res, dict) else None


# EOF

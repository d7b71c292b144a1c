from typing import Any

DEFAULT_ENCODING: str = "utf8"


def asBytes(value: str | bytes | bytearray | memoryview | None) -> bytes:
	if isinstance(value, bytes):
		return value
	elif isinstance(value, (bytearray, memoryview)):
		return bytes(value)
	elif isinstance(value, str):
		return bytes(value, DEFAULT_ENCODING)
	elif value is None:
		return b""
	else:
		raise ValueError(f"Expected bytes or str, got: {value}")


def asString(value: Any) -> str:
	if isinstance(value, str):
		return value
	elif isinstance(value, (bytes, bytearray)):
		return bytes(value).decode(DEFAULT_ENCODING, errors="replace")
	elif value is None:
		return ""
	else:
		return str(value)


# EOF

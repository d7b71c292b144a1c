from io import StringIO

import pytest

from payload.utils.io import asBytes, asString
from payload.utils.json import unjson, unjsonobject
from payload.utils.logging import LogLevel, LogOutput, debug, error, info, warning
from payload.utils.uri import URI, uri


def test_uri_parse():
	value = URI.Parse("https://example.com:8443/users?q=x#top")
	assert value.scheme == "https"
	assert value.host == "example.com"
	assert value.port == 8443
	assert value.path == "/users"
	assert value.query == "q=x"
	assert value.fragment == "top"
	assert value.authority == "example.com:8443"
	assert value.target == "/users?q=x"
	assert str(value) == "https://example.com:8443/users?q=x#top"
	assert value == "https://example.com:8443/users?q=x#top"
	assert uri(value) is value
	assert uri("/local").host is None


def test_uri_derive():
	value = URI.Parse("http://example.com/users")
	other = value.derive(host="other.org", port=8080)
	assert str(other) == "http://other.org:8080/users"
	assert str(value) == "http://example.com/users"
	assert value.asDict() == {"scheme": "http", "host": "example.com", "path": "/users"}


def test_bytes_and_strings():
	assert asBytes("é") == "é".encode("utf8")
	assert asBytes(bytearray(b"ab")) == b"ab"
	assert asBytes(None) == b""
	with pytest.raises(ValueError):
		asBytes(42)  # type: ignore
	assert asString(b"ab") == "ab"
	assert asString(None) == ""
	assert asString(8080) == "8080"


def test_json():
	assert unjson(b'{"a": [1, 2]}') == {"a": [1, 2]}
	with pytest.raises(ValueError):
		unjson("{")
	assert unjsonobject("{") is None
	assert unjsonobject("[]") is None
	assert unjsonobject('{"a": 1}') == {"a": 1}


def test_logging_output():
	output = StringIO()
	token = LogOutput.set(output)
	try:
		entry = warning("Body is not JSON", Length=3)
		debug("Skipping entry")
		info("Request created", Method="GET")
		failure = error("Unable to read", "EINPUT", Reason="reset")
	finally:
		LogOutput.reset(token)
	assert entry.level == LogLevel.Warning
	assert entry.origin == "payload"
	assert entry.context == {"Length": 3}
	assert failure.code == "EINPUT"
	lines = output.getvalue().splitlines()
	assert len(lines) == 4
	assert "[payload]" in lines[0] and "Body is not JSON" in lines[0]
	assert "Length" in lines[0] and "=3" in lines[0]
	assert "Request created" in lines[2] and "=GET" in lines[2]
	assert "[EINPUT]" in lines[3] and "=reset" in lines[3]


# EOF

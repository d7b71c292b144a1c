import io
from io import StringIO
from typing import Any

import pytest

from payload import Params, ServerRequest, StreamIOError, UploadedFile, request
from payload.http.params import environURI, headername
from payload.utils.logging import LogOutput


def environ(**extra: Any) -> dict[str, Any]:
	res: dict[str, Any] = {
		"REQUEST_METHOD": "GET",
		"PATH_INFO": "/",
		"QUERY_STRING": "",
		"SERVER_NAME": "localhost",
		"SERVER_PORT": "80",
		"SERVER_PROTOCOL": "HTTP/1.1",
		"wsgi.url_scheme": "http",
		"wsgi.input": io.BytesIO(b""),
	}
	res.update(extra)
	return res


class FailingInput:
	def read(self, size: int = -1) -> bytes:
		raise OSError("connection reset")


# -----------------------------------------------------------------------------
#
# UPLOADED FILES
#
# -----------------------------------------------------------------------------


def test_uploaded_file_is_sanitized():
	file = UploadedFile.FromDict(
		{"name": "report.pdf", "size": "12 bytes", "tmp_name": "/tmp/php1", "type": "application/pdf"}
	)
	assert file == UploadedFile("report.pdf", 12, "/tmp/php1", "application/pdf")
	assert UploadedFile.FromDict({}) == UploadedFile("", 0, "", "")
	assert UploadedFile.FromDict({"size": "n/a"}).size == 0


def test_files_table():
	params = Params(
		files={
			"avatar": {"name": "me.png", "size": 10, "tmp_name": "/tmp/a", "type": "image/png"},
			"broken": "not a file",
		}
	)
	assert params.getFiles() == [UploadedFile("me.png", 10, "/tmp/a", "image/png")]
	existing = UploadedFile("a.txt", 1, "/tmp/b", "text/plain")
	assert Params(files=[existing]).getFiles() == [existing]
	assert Params().getFiles() == []


# -----------------------------------------------------------------------------
#
# PARAMS
#
# -----------------------------------------------------------------------------


def test_params_sources():
	params = Params(query={"q": "x"}, post={"name": "y"})
	assert params.getQueryParams() == {"q": "x"}
	assert params.getPostParams() == {"name": "y"}
	assert Params(query="q=x", post=None).getQueryParams() == {}
	assert Params(post=["a"]).getPostParams() == {}


def test_request_body():
	assert Params(input=b'{"a": 1}').getRequestBody() == {"a": 1}
	assert Params(input=b"not json").getRequestBody() == {}
	assert Params(input=b"[1]").getRequestBody() == {}
	assert Params().getRequestBody() == {}


def test_input_is_read_once():
	source = io.BytesIO(b'{"a": 1}')
	params = Params(input=source)
	assert params.getRawBody() == b'{"a": 1}'
	assert params.getRequestBody() == {"a": 1}
	assert source.read() == b""


def test_input_failures():
	output = StringIO()
	token = LogOutput.set(output)
	try:
		with pytest.raises(StreamIOError) as e:
			Params(input=FailingInput()).getRawBody()  # type: ignore
	finally:
		LogOutput.reset(token)
	assert isinstance(e.value.__cause__, OSError)
	# Raised errors are left to the caller to report
	assert output.getvalue() == ""


def test_all_params_are_merged_in_order():
	file = UploadedFile("a.txt", 1, "/tmp/a", "text/plain")
	params = Params(
		query={"a": "query", "b": "query"},
		post={"b": "post", "c": "post"},
		files=[file],
		input=b'{"c": "body", "d": 4}',
	)
	assert params.getAllParams() == {
		"a": "query",
		"b": "post",
		0: file,
		"c": "body",
		"d": 4,
	}


# -----------------------------------------------------------------------------
#
# ENVIRON
#
# -----------------------------------------------------------------------------


def test_headername():
	assert headername("CONTENT_TYPE") == "Content-Type"
	assert headername("X_REQUEST_ID") == "X-Request-Id"


def test_params_from_environ():
	params = Params.FromEnviron(
		environ(
			QUERY_STRING="q=x&empty=&q=z",
			CONTENT_TYPE="application/x-www-form-urlencoded; charset=utf-8",
			CONTENT_LENGTH="15",
			**{"wsgi.input": io.BytesIO(b"name=y&age=3&ignored")},
		)
	)
	assert params.getQueryParams() == {"q": "z", "empty": ""}
	# The body is truncated to the content length
	assert params.getPostParams() == {"name": "y", "age": "3", "ig": ""}
	assert params.getRawBody() == b"name=y&age=3&ig"


def test_environ_uri():
	uri = environURI(environ(HTTP_HOST="example.com:8080", PATH_INFO="/users", QUERY_STRING="q=x"))
	assert (uri.host, uri.port, uri.path, uri.query) == ("example.com", 8080, "/users", "q=x")
	fallback = environURI(environ(SERVER_NAME="api.local", SERVER_PORT="8000"))
	assert (fallback.host, fallback.port) == ("api.local", 8000)
	default = environURI(environ(**{"wsgi.url_scheme": "https", "SERVER_PORT": "443"}))
	assert str(default) == "https://localhost/"


def test_request_from_environ():
	body = b'{"name": "x"}'
	res = request(
		environ(
			REQUEST_METHOD="POST",
			PATH_INFO="/users",
			QUERY_STRING="q=x",
			HTTP_HOST="example.com:8080",
			HTTP_COOKIE="session=abc; theme=dark",
			HTTP_X_REQUEST_ID="42",
			CONTENT_TYPE="application/json",
			CONTENT_LENGTH=str(len(body)),
			SERVER_PROTOCOL="HTTP/1.0",
			**{"wsgi.url_scheme": "https", "wsgi.input": io.BytesIO(body)},
		)
	)
	assert isinstance(res, ServerRequest)
	assert res.getMethod() == "POST"
	assert res.getUri().host == "example.com"
	assert res.getRequestTarget() == "/users?q=x"
	assert res.getProtocolVersion() == "1.0"
	assert res.getQueryParams() == {"q": "x"}
	assert res.getCookieParams() == {"session": "abc", "theme": "dark"}
	assert res.getHeaderLine("x-request-id") == "42"
	assert res.getHeader("Content-Type") == ["application/json"]
	assert res.getHeader("Host") == ["example.com:8080"]
	assert res.getParsedBody() == {"name": "x"}
	assert res.getBody().getSize() == len(body)
	assert res.getServerParams()["PATH_INFO"] == "/users"
	assert "wsgi.input" not in res.getServerParams()


def test_request_from_form_environ():
	res = request(
		environ(
			REQUEST_METHOD="PATCH",
			REQUEST_URI="/users/1",
			CONTENT_TYPE="application/x-www-form-urlencoded",
			CONTENT_LENGTH="12",
			**{
				"wsgi.input": io.BytesIO(b"name=y&age=3"),
				"payload.files": [{"name": "a.txt", "size": "1", "tmp_name": "/tmp/a", "type": "text/plain"}],
			},
		)
	)
	# The bootstrap does not validate the method
	assert res.getMethod() == "PATCH"
	assert res.getRequestTarget() == "/users/1"
	assert res.getParsedBody() == {"name": "y", "age": "3"}
	assert res.getUploadedFiles() == [UploadedFile("a.txt", 1, "/tmp/a", "text/plain")]
	assert str(res.getBody()) == "name=y&age=3"


def test_request_from_minimal_environ():
	res = request({})
	assert res.getMethod() == "GET"
	assert res.getRequestTarget() == "/"
	assert res.getCookieParams() == {}
	assert res.getParsedBody() == {}
	assert res.getBody().getSize() == 0


def test_malformed_cookies_are_ignored():
	res = request(environ(HTTP_COOKIE='bad"cookie'))
	assert res.getCookieParams() == {}


def test_input_read_failures():
	with pytest.raises(StreamIOError):
		request(environ(CONTENT_LENGTH="10", **{"wsgi.input": FailingInput()}))


# EOF

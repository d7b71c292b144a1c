import io
import os
import stat
from pathlib import Path
from typing import IO, Any

from mypy_extensions import mypyc_attr

from ..utils.io import DEFAULT_ENCODING, asBytes
from .errors import (
	InvalidArgument,
	NotReadable,
	NotSeekable,
	NotWritable,
	StreamIOError,
)

# -----------------------------------------------------------------------------
#
# STREAM
#
# -----------------------------------------------------------------------------

WRITABLE_MODES: str = "xwca+"
READABLE_MODES: str = "r+"
WHENCES: tuple[int, int, int] = (io.SEEK_SET, io.SEEK_CUR, io.SEEK_END)
HANDLE_METHODS: tuple[str, ...] = (
	"read",
	"write",
	"seek",
	"tell",
	"seekable",
	"readable",
	"writable",
	"close",
)


def isHandle(value: Any) -> bool:
	"""Tells if the given value is an open binary file-like object that can
	be wrapped by a stream."""
	if isinstance(value, io.TextIOBase):
		return False
	elif isinstance(value, io.IOBase):
		return not value.closed
	return (
		all(callable(getattr(value, _, None)) for _ in HANDLE_METHODS)
		and getattr(value, "closed", False) is False
	)


@mypyc_attr(allow_interpreted_subclasses=True)
class Stream:
	"""Wraps a byte-oriented file handle with uniform read/write/seek
	operations. The stream owns the handle until it is closed or detached,
	after which data operations fail and capability queries return
	defaults."""

	__slots__ = ["_handle"]

	@staticmethod
	def FromBytes(data: bytes | str = b"") -> "Stream":
		"""Returns a readable and writable in-memory stream positioned at
		the start of `data`."""
		return Stream(io.BytesIO(asBytes(data)))

	@staticmethod
	def Open(path: str | Path, mode: str = "rb") -> "Stream":
		return Stream(open(path, mode if "b" in mode else f"{mode}b"))

	def __init__(self, handle: IO[bytes]):
		if not isHandle(handle):
			raise InvalidArgument(f"Invalid handle provided: {handle!r}")
		self._handle: IO[bytes] | None = handle

	# =========================================================================
	# CAPABILITIES
	# =========================================================================

	@property
	def mode(self) -> str:
		"""The handle's mode, synthesized from `readable()`/`writable()` for
		handles like `BytesIO` that don't have a string mode."""
		handle = self._handle
		if handle is None:
			return ""
		try:
			mode = getattr(handle, "mode", None)
			if isinstance(mode, str):
				return mode
			r, w = handle.readable(), handle.writable()
		except ValueError:
			return ""
		return "rb+" if r and w else "rb" if r else "wb" if w else ""

	def isSeekable(self) -> bool:
		if self._handle is None:
			return False
		try:
			return bool(self._handle.seekable())
		except ValueError:
			# Raised when the handle was closed behind our back
			return False

	def isWritable(self) -> bool:
		mode = self.mode
		return any(_ in mode for _ in WRITABLE_MODES)

	def isReadable(self) -> bool:
		mode = self.mode
		return any(_ in mode for _ in READABLE_MODES)

	# =========================================================================
	# DATA
	# =========================================================================

	def read(self, length: int) -> bytes:
		if self._handle is None or not self.isReadable():
			raise NotReadable("Stream is not readable")
		try:
			res = self._handle.read(max(0, length))
		except (OSError, ValueError) as e:
			raise StreamIOError("Unable to read from stream") from e
		return asBytes(res)

	def write(self, data: bytes | str) -> int:
		if self._handle is None or not self.isWritable():
			raise NotWritable("Stream is not writable")
		try:
			res = self._handle.write(asBytes(data))
		except (OSError, ValueError) as e:
			raise StreamIOError("Unable to write to stream") from e
		# NOTE: Raw non-blocking handles return None when nothing was written
		return res or 0

	def getContents(self) -> bytes:
		"""Reads everything from the current position, not from the start."""
		if self._handle is None:
			raise StreamIOError("Unable to read from detached stream")
		try:
			res = self._handle.read()
		except (OSError, ValueError) as e:
			raise StreamIOError("Unable to read from stream") from e
		return asBytes(res)

	# =========================================================================
	# POSITION
	# =========================================================================

	def eof(self) -> bool:
		handle = self._handle
		if handle is None:
			return True
		try:
			if handle.seekable():
				pos = handle.tell()
				end = handle.seek(0, io.SEEK_END)
				handle.seek(pos, io.SEEK_SET)
				return pos >= end
			peek = getattr(handle, "peek", None)
			return not peek(1) if peek else False
		except (OSError, ValueError):
			return True

	def tell(self) -> int:
		if self._handle is None:
			raise StreamIOError("Unable to determine position of detached stream")
		try:
			return self._handle.tell()
		except (OSError, ValueError) as e:
			raise StreamIOError("Unable to determine stream position") from e

	def rewind(self) -> None:
		if self._handle is None:
			raise StreamIOError("Unable to rewind detached stream")
		self.seek(0, io.SEEK_SET)

	def seek(self, offset: int, whence: int = io.SEEK_SET) -> None:
		if offset < 0:
			raise InvalidArgument("Invalid seek offset: must be non-negative")
		if whence not in WHENCES:
			raise InvalidArgument(f"Invalid seek whence: {whence}")
		if self._handle is None:
			raise StreamIOError("Unable to seek detached stream")
		if not self.isSeekable():
			raise NotSeekable("Stream is not seekable")
		try:
			self._handle.seek(offset, whence)
		except (OSError, ValueError) as e:
			raise StreamIOError("Unable to seek stream") from e

	# =========================================================================
	# METADATA
	# =========================================================================

	def getSize(self) -> int | None:
		handle = self._handle
		if handle is None:
			return None
		getbuffer = getattr(handle, "getbuffer", None)
		if getbuffer:
			try:
				with getbuffer() as buffer:
					return buffer.nbytes
			except ValueError:
				return None
		try:
			if self.isWritable():
				handle.flush()
			info = os.fstat(handle.fileno())
		except (OSError, ValueError, AttributeError):
			return None
		return info.st_size if stat.S_ISREG(info.st_mode) else None

	def getMetadata(self, key: str | None = None) -> Any:
		if self._handle is None:
			return None if key else {}
		name = getattr(self._handle, "name", None)
		meta: dict[str, Any] = {
			"mode": self.mode,
			"seekable": self.isSeekable(),
			"uri": name if isinstance(name, str) else None,
			"stream_type": type(self._handle).__name__,
			"eof": self.eof(),
			"closed": bool(getattr(self._handle, "closed", False)),
		}
		return meta if key is None else meta.get(key)

	# =========================================================================
	# LIFECYCLE
	# =========================================================================

	def close(self) -> None:
		handle = self._handle
		if handle is None:
			return
		self._handle = None
		if not getattr(handle, "closed", False):
			handle.close()

	def detach(self) -> IO[bytes] | None:
		"""Returns the underlying handle, which the caller now owns. The
		stream is unusable afterwards."""
		handle = self._handle
		self._handle = None
		return handle

	# =========================================================================
	# API
	# =========================================================================

	def __bytes__(self) -> bytes:
		# NOTE: Failures to rewind or read propagate to the caller.
		if self.isSeekable():
			self.rewind()
		return self.getContents()

	def __str__(self) -> str:
		return bytes(self).decode(DEFAULT_ENCODING, errors="replace")

	def __repr__(self) -> str:
		kind = type(self._handle).__name__ if self._handle is not None else "detached"
		return f"Stream({kind} {self.mode})"


# EOF

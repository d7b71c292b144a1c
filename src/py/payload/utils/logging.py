import sys
import time
from enum import Enum
from typing import NamedTuple, Any, TextIO
from contextvars import ContextVar
from .primitives import TPrimitive
from .term import Term

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="payload")
LogOutput: ContextVar[TextIO | None] = ContextVar("LogOutput", default=None)


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
}


class LogEntry(NamedTuple):
	origin: str
	time: float
	level: LogLevel = LogLevel.Info
	message: str | None = None
	code: int | str | None = None
	context: dict[str, TPrimitive] | None = None


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	# NOTE: The output is resolved on each call so that tests can redirect it.
	out: TextIO = LogOutput.get() or sys.stderr
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	code: str = f" [{entry.code}]" if entry.code is not None else ""
	out.write(
		f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET}{code} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
	)
	out.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	at: float | None = None,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	code: int | str | None = None,
	context: dict[str, TPrimitive],
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time() if at is None else at,
		level=level,
		message=message,
		code=code,
		context=context,
	)


def debug(
	message: str,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Debug,
			origin=origin,
			at=at,
			context=context,
		)
	)


def info(
	message: str,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(entry(message=message, origin=origin, at=at, context=context))


def warning(
	message: str,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Warning,
			origin=origin,
			at=at,
			context=context,
		)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			code=code,
			level=LogLevel.Error,
			origin=origin,
			at=at,
			context=context,
		)
	)


# EOF

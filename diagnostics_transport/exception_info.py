"""Exception extraction — structured exception info from exceptions or stack text.

Stack text carries no stable grammar, so the parsing here is a small set of
best-effort heuristics:

* The header line is assumed to look like ``TypeName: message``. The type is
  only taken when the first colon appears before the first newline, so a
  header without a colon yields no type, and a message that itself contains
  a colon (``ValueError: bad value: 3``) still splits at the first one.
* Everything after the first newline is treated as the stack trace.
"""

import json
import logging
import traceback
from typing import Any, Optional

from diagnostics_transport.environment import EnvironmentProvider
from diagnostics_transport.models import ExceptionInfo, KeyValueTag, ProcessInfo

logger = logging.getLogger(__name__)

DEFAULT_STACK_MESSAGE = "Error: An exception has been thrown."

_MEMORY_KEYS = ("rss", "heapTotal", "heapUsed")


def split_header(text: str) -> tuple[Optional[str], str, Optional[str]]:
    """Split stack text into (exception_type, header_line, remainder)."""
    newline = text.find("\n")
    if newline == -1:
        header, remainder = text, None
    else:
        header, remainder = text[:newline], text[newline + 1:] or None

    exception_type = None
    colon = header.find(":")
    if colon != -1:
        exception_type = header[:colon].strip() or None
    return exception_type, header, remainder


def format_stack(exc: BaseException) -> str:
    """Render *exc* as ``TypeName: message`` followed by its traceback frames."""
    header = f"{type(exc).__name__}: {exc}"
    frames = traceback.format_tb(exc.__traceback__) if exc.__traceback__ else []
    if not frames:
        return header
    return header + "\n" + "".join(frames).rstrip("\n")


def _exception_source(exc: BaseException) -> Optional[str]:
    code = getattr(exc, "code", None)
    if code is None and isinstance(exc, OSError):
        code = exc.errno
    return None if code is None else str(code)


def process_tags(info: ProcessInfo) -> list[KeyValueTag]:
    tags = [
        KeyValueTag("cwd", info.cwd),
        KeyValueTag("execPath", info.exec_path),
        KeyValueTag("version", info.version),
        KeyValueTag("argv", json.dumps(info.argv)),
    ]
    if info.memory:
        for key in _MEMORY_KEYS:
            if key in info.memory:
                tags.append(KeyValueTag(key, str(info.memory[key])))
    return tags


def from_exception(
    exc: BaseException,
    environment: Optional[EnvironmentProvider] = None,
    process_info: Optional[ProcessInfo] = None,
) -> ExceptionInfo:
    """Build ExceptionInfo from a live exception.

    Runtime context comes from *process_info* when the caller captured it
    up front, otherwise from *environment*. With neither, ``data`` is empty.
    """
    message = str(exc) or None
    exception_type, _header, stack_trace = split_header(format_stack(exc))

    info = ExceptionInfo(
        exception_type=exception_type,
        message=message,
        source=_exception_source(exc),
        stack_trace=stack_trace,
    )

    if process_info is None and environment is not None:
        process_info = environment.process_info()
    if process_info is not None:
        info.data.extend(process_tags(process_info))
    return info


def from_stack_text(stack: Any) -> ExceptionInfo:
    """Build ExceptionInfo from a raw ``stack`` field."""
    try:
        _type, header, stack_trace = split_header(stack)
    except (AttributeError, TypeError):
        logger.warning("Unparseable stack value of type %s", type(stack).__name__)
        return ExceptionInfo(message=DEFAULT_STACK_MESSAGE, stack_trace=str(stack))

    # Free-form stack text names no type; only live exceptions carry one.
    return ExceptionInfo(
        exception_type=None,
        message=header,
        source=None,
        stack_trace=stack_trace,
    )


def resolve_exception(
    value: Any,
    stack: Any = None,
    environment: Optional[EnvironmentProvider] = None,
) -> Any:
    """Resolve the exception attribute of a normalized item.

    A live exception is converted and enriched; an ExceptionInfo-shaped mapping
    or any other value is kept as-is. Raw stack text is used only when no
    exception value was supplied.
    """
    if isinstance(value, BaseException):
        return from_exception(value, environment=environment)
    if value is not None:
        return value
    if stack is not None:
        return from_stack_text(stack)
    return None

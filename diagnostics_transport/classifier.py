"""Content classifier — separates readable messages from embedded payloads.

Two heuristics are applied to any non-blank message. Either one that fires
replaces the trace data resolved from the record:

* Object-like: text starting with ``{`` or ``[`` (ignoring leading
  whitespace) is treated as serialized data in its entirety.
* Markup-like: text containing at least two angle-bracket tags is split at
  the first tag; the head stays the message, the rest becomes trace data.

Known false positives: a message quoting two unrelated tags, e.g.
``"use <b> or <i> for emphasis"``, is split, and any bracketed text such as
``"[retry] connection lost"`` is treated as a payload. A single tag pair
(``"<br>"`` alone) is left untouched.
"""

import re
from typing import Any

OBJECT_PREFIX = "[OBJECT] -> "

PREVIEW_LENGTH = 100

TAG_PATTERN = re.compile(r"</?[A-Za-z][\w:.-]*(?:\s[^<>]*)?/?>")


def preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def classify(message: Any, trace_data: Any) -> tuple[Any, Any]:
    """Return the (message, trace_data) pair after classification."""
    if not isinstance(message, str) or not message.strip():
        return message, trace_data

    if message.lstrip()[0] in "{[":
        trace_data = message
        message = ""
    else:
        matches = list(TAG_PATTERN.finditer(message))
        if len(matches) < 2:
            return message, trace_data
        start = matches[0].start()
        trace_data = message[start:]
        message = message[:max(start - 1, 0)]

    if not message.strip():
        message = OBJECT_PREFIX + preview(trace_data)
    return message, trace_data

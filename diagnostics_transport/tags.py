"""Tag merging — metadata, trace tags, duration and residual field folding."""

import json
import logging
from typing import Any, Mapping, Optional

from diagnostics_transport.models import KeyValueTag

logger = logging.getLogger(__name__)

DURATION_FIELD = "durationMs"


def to_text(value: Any) -> str:
    """Strings pass through verbatim; everything else becomes JSON text."""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def _as_tag(value: Any) -> Optional[KeyValueTag]:
    if isinstance(value, KeyValueTag):
        return value
    if isinstance(value, Mapping) and "key" in value and "value" in value:
        key = value["key"]
        if isinstance(key, str):
            return KeyValueTag(key, to_text(value["value"]))
    return None


def as_tag_list(value: Any) -> Optional[list[KeyValueTag]]:
    """Return *value* as tags if it is a list of well-formed tags, else None."""
    if not isinstance(value, (list, tuple)):
        return None
    tags = []
    for element in value:
        tag = _as_tag(element)
        if tag is None:
            return None
        tags.append(tag)
    return tags


def coerce_tags(value: Any) -> list[KeyValueTag]:
    """Coerce a tag list or an alias sub-mapping into a flat list of tags."""
    if value is None:
        return []

    tags = as_tag_list(value)
    if tags is not None:
        return tags

    if isinstance(value, Mapping):
        merged: list[KeyValueTag] = []
        for key, entry in value.items():
            spliced = as_tag_list(entry)
            if spliced is not None:
                merged.extend(spliced)
            else:
                merged.append(KeyValueTag(str(key), to_text(entry)))
        return merged

    logger.debug("Cannot coerce %s to tags", type(value).__name__)
    return []


def duration_tag(record: dict) -> Optional[KeyValueTag]:
    """Consume a numeric ``durationMs`` field and return it as a tag."""
    duration = record.get(DURATION_FIELD)
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        return None
    del record[DURATION_FIELD]
    return KeyValueTag("duration", f"{duration} ms")


def fold_residual(
    residual: dict,
    trace_data: Any,
    trace_tags: Optional[list[KeyValueTag]],
) -> tuple[Any, Optional[list[KeyValueTag]]]:
    """Fold unconsumed record fields into the trace payload.

    Returns the updated (trace_data, trace_tags) pair.
    """
    if isinstance(trace_data, str):
        if residual:
            trace_tags = list(trace_tags or [])
            trace_tags.extend(coerce_tags(residual))
    elif trace_data is not None:
        trace_data = to_text(trace_data)
    elif residual:
        trace_data = json.dumps(residual, default=str)
    return trace_data, trace_tags

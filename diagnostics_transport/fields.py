"""Alias-list field resolution over loosely shaped raw records.

Every helper *consumes* what it returns: matched keys are removed from the
record so that whatever is left afterwards is the residual, which the tag
merger folds into the trace payload.
"""

from typing import Any, Iterable, MutableMapping

_MISSING = object()


def value_or_default(record: MutableMapping, key: str, default: Any = None) -> Any:
    """Pop ``record[key]`` if present, otherwise return *default*."""
    value = record.pop(key, _MISSING)
    if value is _MISSING:
        return default
    return value


def first_of(record: MutableMapping, aliases: Iterable[str]) -> Any:
    """Pop and return the value of the first alias present in *record*.

    Aliases later in the list are left untouched, so they remain part of the
    residual record. Returns None when no alias is present.
    """
    for alias in aliases:
        if alias in record:
            return record.pop(alias)
    return None


def all_of(record: MutableMapping, aliases: Iterable[str]) -> dict:
    """Pop every alias present in *record*, keyed by the alias name."""
    found = {}
    for alias in aliases:
        if alias in record:
            found[alias] = record.pop(alias)
    return found


def drop(record: MutableMapping, aliases: Iterable[str]) -> None:
    """Discard every alias present in *record*."""
    for alias in aliases:
        record.pop(alias, None)

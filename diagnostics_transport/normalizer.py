"""Normalizer — turns a raw record into a NormalizedItem.

Extraction order matters: every resolved field is removed from a private copy
of the record, and whatever is left at the end (minus the ignore list) is the
residual that gets folded into the trace payload.
"""

import datetime
import logging
from typing import Callable, Mapping, Optional

from diagnostics_transport import classifier, tags
from diagnostics_transport.config import SinkConfig
from diagnostics_transport.environment import EnvironmentProvider, SystemEnvironment
from diagnostics_transport.exception_info import resolve_exception
from diagnostics_transport.fields import all_of, drop, first_of, value_or_default
from diagnostics_transport.levels import DEFAULT_LEVEL, map_level
from diagnostics_transport.models import NormalizedItem

logger = logging.getLogger(__name__)

STACK_FIELD = "stack"


def local_timestamp() -> str:
    """Local wall-clock time as ISO-8601 with milliseconds and no offset."""
    return datetime.datetime.now().isoformat(timespec="milliseconds")


class Normalizer:
    """Resolves canonical fields from raw records using the configured aliases."""

    def __init__(
        self,
        config: SinkConfig,
        environment: Optional[EnvironmentProvider] = None,
        clock: Callable[[], str] = local_timestamp,
    ):
        self._config = config
        self._environment = environment or SystemEnvironment()
        self._clock = clock
        self._machine = config.machine or self._environment.hostname()
        self._process_name = config.process_name or self._environment.process_title()

    def normalize(self, raw: Mapping) -> NormalizedItem:
        cfg = self._config
        record = dict(raw)

        item = NormalizedItem(timestamp=self._clock())
        item.environment_name = value_or_default(record, "environment", cfg.environment)
        item.machine_name = value_or_default(record, "machine", self._machine)
        item.application_name = value_or_default(record, "application", cfg.application)
        item.process_name = value_or_default(record, "processName", self._process_name)
        item.assembly_name = first_of(record, cfg.assembly_field)
        item.type_name = first_of(record, cfg.type_field)
        item.level = map_level(value_or_default(record, "level", DEFAULT_LEVEL))
        item.code = first_of(record, cfg.code_field)
        item.message = first_of(record, cfg.message_field)
        item.group_name = first_of(record, cfg.group_field)
        exception = first_of(record, cfg.exception_field)
        item.metadata = tags.coerce_tags(all_of(record, cfg.metadata_field)) or None
        item.trace_name = first_of(record, cfg.trace_name_field)
        item.trace_data = first_of(record, cfg.trace_data_field)
        trace_tags = tags.coerce_tags(all_of(record, cfg.tags_field))

        duration = tags.duration_tag(record)
        if duration is not None:
            trace_tags.append(duration)

        stack = value_or_default(record, STACK_FIELD, None)
        item.exception = resolve_exception(exception, stack, self._environment)

        drop(record, cfg.ignore_field)

        item.message, item.trace_data = classifier.classify(item.message, item.trace_data)
        item.trace_data, trace_tags = tags.fold_residual(
            record, item.trace_data, trace_tags
        )
        item.trace_tags = trace_tags or None

        if not item.group_name and cfg.group_resolver is not None:
            try:
                item.group_name = cfg.group_resolver(item)
            except Exception:
                logger.exception("group_resolver failed, leaving groupName unset")

        if item.trace_data and not item.trace_name:
            item.trace_name = item.message

        return item

"""Event summarization for workflow executions."""

from .dedupe import content_key, deduplicate_events
from .filters import (
    FilterArgumentError,
    TimeWindow,
    matches_resource,
    matches_step_name,
    matches_time_window,
    parse_time_window,
    parse_timestamp,
)
from .status import derive_step_status
from .summary import summarize_execution

__all__ = [
    "FilterArgumentError",
    "TimeWindow",
    "content_key",
    "deduplicate_events",
    "derive_step_status",
    "matches_resource",
    "matches_step_name",
    "matches_time_window",
    "parse_time_window",
    "parse_timestamp",
    "summarize_execution",
]

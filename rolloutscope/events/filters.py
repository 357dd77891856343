"""Predicates deciding which resources, steps and events reach the summary."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from rolloutscope.models import ResourceExecution, WorkflowEvent


class FilterArgumentError(ValueError):
    """Raised when a caller-supplied filter value cannot be parsed."""


@dataclass(frozen=True)
class TimeWindow:
    since: Optional[datetime] = None
    until: Optional[datetime] = None

    @property
    def bounded(self) -> bool:
        return self.since is not None or self.until is not None


RFC3339_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})$",
    re.ASCII,
)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 ``date-time``.

    Other ISO 8601 forms (week dates, basic format, missing seconds or
    offset, space separator) are rejected.
    """

    match = RFC3339_PATTERN.fullmatch(value)
    if match is None:
        raise ValueError(f"timestamp {value!r} is not RFC3339")

    # datetime carries microseconds only; extra digits are truncated.
    fraction = match.group("fraction")
    fraction = f".{fraction[:6].ljust(6, '0')}" if fraction else ""
    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"
    return datetime.fromisoformat(f"{match.group('date')}T{match.group('time')}{fraction}{offset}")


def parse_time_window(since: str = "", until: str = "") -> TimeWindow:
    bounds = {}
    for name, raw in (("since", since), ("until", until)):
        if not raw:
            bounds[name] = None
            continue
        try:
            bounds[name] = parse_timestamp(raw)
        except ValueError as exc:
            raise FilterArgumentError(
                f"invalid {name} time format {raw!r}, expected RFC3339 (e.g. 2024-01-15T10:00:00Z): {exc}"
            ) from exc
    return TimeWindow(since=bounds["since"], until=bounds["until"])


def matches_resource(resource: ResourceExecution, resource_id: str = "", resource_key: str = "") -> bool:
    if resource_id and resource.resource_id != resource_id:
        return False
    if resource_key and resource.resource_key != resource_key:
        return False
    return True


def matches_step_name(step_name: str, allowed_names: Sequence[str]) -> bool:
    if not allowed_names:
        return True
    folded = step_name.casefold()
    return any(folded == name.casefold() for name in allowed_names)


def matches_time_window(event: WorkflowEvent, window: TimeWindow) -> bool:
    """Return whether the event falls in ``[since, until)``.

    Events whose own timestamp cannot be parsed are kept.
    """

    if not window.bounded:
        return True
    try:
        event_time = parse_timestamp(event.event_time)
    except ValueError:
        return True

    if window.since is not None and event_time < window.since:
        return False
    if window.until is not None and event_time >= window.until:
        return False
    return True

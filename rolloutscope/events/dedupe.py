"""Collapse repeated step events into occurrence-annotated records."""

from __future__ import annotations

import hashlib
import json
from collections import OrderedDict
from typing import Dict, Iterable, List, Set, Union

from rolloutscope.models import DedupedEvent, WorkflowEvent

EventLike = Union[WorkflowEvent, DedupedEvent]


def content_key(event_type: str, message: str) -> str:
    """SHA-256 over the (type, message) pair."""

    # ASCII escaping keeps lone surrogates encodable.
    encoded = json.dumps([event_type, message])
    return hashlib.sha256(encoded.encode("ascii")).hexdigest()


def _collapse(events: Iterable[EventLike]) -> "OrderedDict[str, Dict[str, object]]":
    records: "OrderedDict[str, Dict[str, object]]" = OrderedDict()

    for event in events:
        occurrences = getattr(event, "occurrences", None) or 1
        first_seen = getattr(event, "first_seen", None) or event.event_time
        last_seen = getattr(event, "last_seen", None) or event.event_time

        key = content_key(event.event_type, event.message)
        record = records.get(key)
        if record is None:
            records[key] = {
                "event_time": event.event_time,
                "event_type": event.event_type,
                "message": event.message,
                "occurrences": occurrences,
                "first_seen": first_seen,
                "last_seen": last_seen,
            }
            continue

        record["occurrences"] = int(record["occurrences"]) + occurrences
        record["last_seen"] = last_seen

    return records


def _retained_keys(records: "OrderedDict[str, Dict[str, object]]", max_per_type: int) -> Set[str]:
    by_type: Dict[str, List[str]] = {}
    for key, record in records.items():
        by_type.setdefault(str(record["event_type"]), []).append(key)

    keep: Set[str] = set()
    for keys in by_type.values():
        keep.update(keys[-max_per_type:])
    return keep


def deduplicate_events(events: Iterable[EventLike], max_per_type: int = 0) -> List[DedupedEvent]:
    """Deduplicate events by content, keeping first-introduction order.

    With ``max_per_type > 0`` only the most recently introduced distinct
    contents of each event type survive; older ones are dropped together with
    their counts. Records seen once are returned without occurrence fields.
    """

    records = _collapse(events)
    if max_per_type > 0:
        keep = _retained_keys(records, max_per_type)
    else:
        keep = set(records)

    deduped: List[DedupedEvent] = []
    for key, record in records.items():
        if key not in keep:
            continue
        if int(record["occurrences"]) > 1:
            deduped.append(DedupedEvent(**record))
        else:
            deduped.append(
                DedupedEvent(
                    event_time=record["event_time"],
                    event_type=record["event_type"],
                    message=record["message"],
                )
            )
    return deduped

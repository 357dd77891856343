from datetime import timedelta

import pytest

from rolloutscope.events.filters import (
    FilterArgumentError,
    TimeWindow,
    matches_resource,
    matches_step_name,
    matches_time_window,
    parse_time_window,
    parse_timestamp,
)
from rolloutscope.models import ResourceExecution, WorkflowEvent


@pytest.fixture
def resource():
    return ResourceExecution(resource_id="res-123", resource_key="mydb", resource_name="database")


def _event(ts: str) -> WorkflowEvent:
    return WorkflowEvent(event_time=ts, event_type="WorkflowStepDebug", message="tick")


def test_resource_filter_matches_id_and_key(resource):
    assert matches_resource(resource, "res-123", "")
    assert matches_resource(resource, "", "mydb")
    assert matches_resource(resource, "res-123", "mydb")
    assert matches_resource(resource)


def test_resource_filter_requires_both_when_both_supplied(resource):
    assert not matches_resource(resource, "res-456", "")
    assert not matches_resource(resource, "", "otherdb")
    assert not matches_resource(resource, "res-123", "otherdb")
    assert not matches_resource(resource, "res-456", "mydb")


def test_step_name_filter_is_case_insensitive():
    assert matches_step_name("Bootstrap", [])
    assert matches_step_name("Bootstrap", ["bootstrap"])
    assert matches_step_name("DEPLOYMENT", ["Network", "deployment"])
    assert not matches_step_name("Bootstrap", ["Boot"])
    assert not matches_step_name("Storage", ["Network", "Compute"])


def test_parse_timestamp_accepts_rfc3339_variants():
    utc = parse_timestamp("2024-01-15T10:00:00Z")
    offset = parse_timestamp("2024-01-15T12:00:00+02:00")
    fractional = parse_timestamp("2024-01-15T10:00:00.250Z")

    assert utc == offset
    assert fractional - utc == timedelta(milliseconds=250)


NON_RFC3339 = [
    "yesterday",
    "2024-01-15",
    "2024-01-15T10:00:00",
    "",
    "2024-01-15T10:00Z",
    "2024-W03-1T10:00:00Z",
    "20240115T100000Z",
    "2024-01-15 10:00:00Z",
    " 2024-01-15T10:00:00Z",
    "2024-01-15T10:00:00Z\n",
    "2024-13-01T10:00:00Z",
]


@pytest.mark.parametrize("value", NON_RFC3339)
def test_parse_timestamp_rejects_non_rfc3339(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


@pytest.mark.parametrize("value", NON_RFC3339[4:8])
def test_iso_but_not_rfc3339_filter_arguments_fail_closed(value):
    with pytest.raises(FilterArgumentError, match="since"):
        parse_time_window(since=value)


def test_parse_timestamp_accepts_lowercase_separators_and_nanoseconds():
    parsed = parse_timestamp("2024-01-15t10:00:00.123456789z")

    assert parsed == parse_timestamp("2024-01-15T10:00:00.123456Z")


def test_parse_time_window_names_the_bad_argument():
    with pytest.raises(FilterArgumentError, match="until"):
        parse_time_window("2024-01-15T10:00:00Z", "not-a-time")


def test_parse_time_window_unset_bounds():
    window = parse_time_window("", "")

    assert window == TimeWindow()
    assert not window.bounded


def test_time_window_is_inclusive_exclusive():
    window = parse_time_window("2024-01-15T10:00:00Z", "2024-01-15T11:00:00Z")

    assert matches_time_window(_event("2024-01-15T10:00:00Z"), window)
    assert matches_time_window(_event("2024-01-15T10:59:59Z"), window)
    assert not matches_time_window(_event("2024-01-15T11:00:00Z"), window)
    assert not matches_time_window(_event("2024-01-15T09:59:59Z"), window)


def test_time_window_compares_across_offsets():
    window = parse_time_window(since="2024-01-15T10:00:00Z")

    assert matches_time_window(_event("2024-01-15T12:30:00+02:00"), window)
    assert not matches_time_window(_event("2024-01-15T11:30:00+02:00"), window)


def test_time_window_fails_open_on_bad_event_timestamp():
    window = parse_time_window("2024-01-15T10:00:00Z", "2024-01-15T11:00:00Z")

    assert matches_time_window(_event("garbage"), window)
    assert matches_time_window(_event("2024-01-15T09:00Z"), window)
    assert matches_time_window(_event("2024-01-15 09:00:00Z"), window)
    assert matches_time_window(_event(""), window)


def test_unbounded_window_keeps_everything():
    assert matches_time_window(_event("garbage"), TimeWindow())
    assert matches_time_window(_event("1999-01-01T00:00:00Z"), TimeWindow())

"""Utilities for turning a workflow event tree into a per-step summary."""

from __future__ import annotations

import logging
from typing import List, Optional

from rolloutscope.events.dedupe import deduplicate_events
from rolloutscope.events.filters import (
    TimeWindow,
    matches_resource,
    matches_step_name,
    matches_time_window,
    parse_time_window,
)
from rolloutscope.events.status import derive_step_status
from rolloutscope.models import (
    ExecutionSummary,
    FilterOptions,
    FilterStats,
    ResourceSummary,
    StepSummary,
    WorkflowExecution,
    WorkflowStep,
)

logger = logging.getLogger(__name__)


def _summarize_step(step: WorkflowStep, window: TimeWindow, options: FilterOptions) -> Optional[StepSummary]:
    relevant = [event for event in step.events if matches_time_window(event, window)]
    if not relevant:
        return None

    summary = StepSummary(
        step_name=step.step_name,
        status=derive_step_status(relevant),
        start_time=relevant[0].event_time or None,
        end_time=relevant[-1].event_time or None,
        event_count=len(relevant),
    )
    if options.detail:
        summary.detail = deduplicate_events(relevant, options.max_events)
    return summary


def summarize_execution(
    execution: WorkflowExecution,
    options: Optional[FilterOptions] = None,
) -> ExecutionSummary:
    """Filter, deduplicate and status-tag a workflow execution.

    Raises :class:`~rolloutscope.events.filters.FilterArgumentError` when
    ``since``/``until`` are malformed; nothing is traversed in that case.
    """

    options = options or FilterOptions()
    window = parse_time_window(options.since, options.until)

    stats = FilterStats(total_resources=len(execution.resources))
    resources: List[ResourceSummary] = []

    for resource in execution.resources:
        stats.total_steps += len(resource.steps)
        stats.total_events += sum(len(step.events) for step in resource.steps)

        if not matches_resource(resource, options.resource_id, options.resource_key):
            continue

        steps: List[StepSummary] = []
        for step in resource.steps:
            if not matches_step_name(step.step_name, options.step_names):
                continue
            step_summary = _summarize_step(step, window, options)
            if step_summary is None:
                continue
            steps.append(step_summary)
            stats.filtered_steps += 1
            stats.filtered_events += step_summary.event_count

        if not steps:
            continue
        resources.append(
            ResourceSummary(
                resource_id=resource.resource_id,
                resource_key=resource.resource_key,
                resource_name=resource.resource_name,
                steps=steps,
            )
        )

    stats.filtered_resources = len(resources)
    logger.debug(
        "Summarized workflow %s: resources %s/%s, steps %s/%s, events %s/%s",
        execution.workflow_id,
        stats.filtered_resources,
        stats.total_resources,
        stats.filtered_steps,
        stats.total_steps,
        stats.filtered_events,
        stats.total_events,
    )

    summary = ExecutionSummary(
        workflow_id=execution.workflow_id,
        environment_id=execution.environment_id,
        service_id=execution.service_id,
        resources=resources,
    )
    if options.has_filters:
        summary.stats = stats
        summary.applied_filters = options.applied()
    return summary

from __future__ import annotations

from typing import Iterable

from rolloutscope.models import StepStatus, WorkflowEvent

STEP_STARTED = "WorkflowStepStarted"
STEP_COMPLETED = "WorkflowStepCompleted"
STEP_FAILED = "WorkflowStepFailed"


def derive_step_status(events: Iterable[WorkflowEvent]) -> StepStatus:
    """Resolve a step status from its lifecycle markers.

    A failure marker wins over a completion marker regardless of arrival
    order, so a step that completed and later failed a post-check reports
    ``failed``.
    """

    started = completed = failed = False
    for event in events:
        if event.event_type == STEP_STARTED:
            started = True
        elif event.event_type == STEP_COMPLETED:
            completed = True
        elif event.event_type == STEP_FAILED:
            failed = True

    if failed:
        return "failed"
    if completed:
        return "success"
    if started:
        return "in-progress"
    return "unknown"

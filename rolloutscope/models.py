from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

StepStatus = Literal["unknown", "in-progress", "success", "failed"]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WorkflowEvent(_WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    event_time: str = Field(default="", alias="eventTime")
    event_type: str = Field(default="", alias="eventType")
    message: str = ""

    @field_validator("event_time", mode="before")
    @classmethod
    def _coerce_time(cls, value: Any) -> Any:
        # YAML snapshots hand over unquoted timestamps as datetime objects.
        if isinstance(value, datetime):
            return value.isoformat()
        return "" if value is None else value


class WorkflowStep(_WireModel):
    step_name: str = Field(default="", alias="stepName")
    events: List[WorkflowEvent] = Field(default_factory=list)

    @field_validator("events", mode="before")
    @classmethod
    def _null_events(cls, value: Any) -> Any:
        return [] if value is None else value


class ResourceExecution(_WireModel):
    resource_id: str = Field(default="", alias="resourceId")
    resource_key: str = Field(default="", alias="resourceKey")
    resource_name: str = Field(default="", alias="resourceName")
    steps: List[WorkflowStep] = Field(
        default_factory=list,
        validation_alias=AliasChoices("workflowSteps", "steps"),
    )

    @field_validator("steps", mode="before")
    @classmethod
    def _null_steps(cls, value: Any) -> Any:
        return [] if value is None else value


class WorkflowExecution(_WireModel):
    workflow_id: str = Field(default="", validation_alias=AliasChoices("id", "workflowId"))
    environment_id: str = Field(default="", alias="environmentId")
    service_id: str = Field(default="", alias="serviceId")
    resources: List[ResourceExecution] = Field(default_factory=list)

    @field_validator("resources", mode="before")
    @classmethod
    def _null_resources(cls, value: Any) -> Any:
        return [] if value is None else value


class DedupedEvent(_WireModel):
    """A distinct (type, message) pair with its occurrence window.

    Singleton events keep ``occurrences``, ``first_seen`` and ``last_seen`` as
    ``None`` so they serialize as a bare event.
    """

    event_time: str = Field(alias="eventTime")
    event_type: str = Field(alias="eventType")
    message: str
    occurrences: Optional[int] = None
    first_seen: Optional[str] = Field(default=None, alias="firstSeen")
    last_seen: Optional[str] = Field(default=None, alias="lastSeen")


class StepSummary(_WireModel):
    step_name: str = Field(alias="stepName")
    status: StepStatus = "unknown"
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    event_count: int = Field(default=0, alias="eventCount")
    detail: Optional[List[DedupedEvent]] = None


class ResourceSummary(_WireModel):
    resource_id: str = Field(alias="resourceId")
    resource_key: str = Field(alias="resourceKey")
    resource_name: str = Field(alias="resourceName")
    steps: List[StepSummary] = Field(default_factory=list)


class FilterStats(_WireModel):
    total_resources: int = Field(default=0, alias="totalResources")
    filtered_resources: int = Field(default=0, alias="filteredResources")
    total_steps: int = Field(default=0, alias="totalSteps")
    filtered_steps: int = Field(default=0, alias="filteredSteps")
    total_events: int = Field(default=0, alias="totalEvents")
    filtered_events: int = Field(default=0, alias="filteredEvents")


class ExecutionSummary(_WireModel):
    workflow_id: str = Field(alias="workflowId")
    environment_id: str = Field(alias="environmentId")
    service_id: str = Field(alias="serviceId")
    resources: List[ResourceSummary] = Field(default_factory=list)
    stats: Optional[FilterStats] = None
    applied_filters: Optional[Dict[str, Any]] = Field(default=None, alias="appliedFilters")

    def to_payload(self) -> Dict[str, Any]:
        """Return the camelCase document handed to renderers."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FilterOptions(BaseModel):
    resource_id: str = ""
    resource_key: str = ""
    step_names: List[str] = Field(default_factory=list)
    detail: bool = False
    max_events: int = 3
    since: str = ""
    until: str = ""

    @property
    def has_filters(self) -> bool:
        return bool(
            self.resource_id
            or self.resource_key
            or self.step_names
            or self.since
            or self.until
            or self.detail
        )

    def applied(self) -> Dict[str, Any]:
        """Echo of the filters that were actually supplied."""
        applied: Dict[str, Any] = {}
        if self.resource_id:
            applied["resourceId"] = self.resource_id
        if self.resource_key:
            applied["resourceKey"] = self.resource_key
        if self.step_names:
            applied["stepNames"] = list(self.step_names)
        if self.since:
            applied["since"] = self.since
        if self.until:
            applied["until"] = self.until
        if self.detail:
            applied["detail"] = True
            applied["maxEvents"] = self.max_events
        return applied

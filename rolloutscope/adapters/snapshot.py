"""Load a workflow event tree saved to disk as JSON or YAML."""

from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from rolloutscope.models import WorkflowExecution


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read or does not describe an execution."""


def load_execution_file(path: Union[str, Path]) -> WorkflowExecution:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Unable to load snapshot {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} must define a mapping")

    try:
        return WorkflowExecution.model_validate(data)
    except ValidationError as exc:
        raise SnapshotError(f"Snapshot {path} is not a workflow execution: {exc}") from exc

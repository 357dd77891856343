import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rolloutscope.models import WorkflowExecution
from rolloutscope.settings import get_settings


@pytest.fixture(autouse=True)
def configure_test_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ROLLOUTSCOPE_API_BASE_URL", "http://fleet.test")
    monkeypatch.setenv("ROLLOUTSCOPE_API_TOKEN", "test-token")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def execution_builder():
    """Build a WorkflowExecution from ``{(id, key): {step: [(time, type, message)]}}``."""

    def _builder(resources=None, workflow_id="wf-1"):
        resources = resources or {}
        payload = {
            "id": workflow_id,
            "environmentId": "env-1",
            "serviceId": "svc-1",
            "resources": [
                {
                    "resourceId": resource_id,
                    "resourceKey": resource_key,
                    "resourceName": resource_key.title(),
                    "workflowSteps": [
                        {
                            "stepName": step_name,
                            "events": [
                                {"eventTime": ts, "eventType": event_type, "message": message}
                                for ts, event_type, message in events
                            ],
                        }
                        for step_name, events in steps.items()
                    ],
                }
                for (resource_id, resource_key), steps in resources.items()
            ],
        }
        return WorkflowExecution.model_validate(payload)

    return _builder


@pytest.fixture
def bootstrap_events():
    return [
        ("2024-01-15T10:00:00Z", "WorkflowStepStarted", "started"),
        ("2024-01-15T10:00:05Z", "WorkflowStepDebug", "A"),
        ("2024-01-15T10:00:06Z", "WorkflowStepDebug", "A"),
        ("2024-01-15T10:00:07Z", "WorkflowStepDebug", "B"),
        ("2024-01-15T10:00:08Z", "WorkflowStepCompleted", "done"),
    ]

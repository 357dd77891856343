"""Adapter for fetching workflow event trees from the fleet API."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from rolloutscope.models import WorkflowExecution

logger = logging.getLogger(__name__)

API_VERSION = "2022-09-01-00"
RETRYABLE_STATUS = {429}


class FleetAPIError(Exception):
    """Raised when the fleet API rejects a request or keeps failing."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class FleetClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str) -> Optional[Any]:
        url = self.base_url + path
        backoff = 1.0
        attempt = 0

        while True:
            attempt += 1
            try:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url, headers=self._headers())
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                if not response.content:
                    return None
                try:
                    return response.json()
                except ValueError as exc:
                    raise FleetAPIError(f"fleet API returned invalid JSON for {path}") from exc
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code < 500 and status_code not in RETRYABLE_STATUS:
                    raise FleetAPIError(
                        f"fleet API returned {status_code} for {path}",
                        status_code=status_code,
                        body=exc.response.text,
                    ) from exc
                error: Exception = exc
            except httpx.RequestError as exc:
                error = exc

            if attempt >= self.max_attempts:
                raise FleetAPIError(f"fleet API request to {path} failed after {attempt} attempts: {error}") from error

            logger.warning("Fleet API request %s failed (attempt %s/%s): %s", path, attempt, self.max_attempts, error)
            time.sleep(backoff)
            backoff = min(backoff * 2, 8.0)

    def get_workflow_events(
        self,
        service_id: str,
        environment_id: str,
        workflow_id: str,
    ) -> Optional[WorkflowExecution]:
        """Fetch the raw per-resource event tree, or ``None`` when it does not exist."""

        path = (
            f"/{API_VERSION}/fleet/service/{service_id}/environment/{environment_id}"
            f"/workflow/{workflow_id}/events"
        )
        data = self._get(path)
        if data is None:
            return None
        try:
            return WorkflowExecution.model_validate(data)
        except ValidationError as exc:
            raise FleetAPIError(f"unexpected workflow events payload: {exc}") from exc

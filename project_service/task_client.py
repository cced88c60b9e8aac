"""
project_service/task_client.py

HTTP client for the task service.

This module ensures:
1. Every call carries the caller's bearer token (pass-through, never validated here)
2. One blocking attempt per call with the configured timeout; no retries
3. Transport failures come back as TaskResponse(success=False) instead of
   exceptions, so ProjectService decides which domain error to raise
4. Tokens never appear in log output
"""

from __future__ import annotations

from typing import Literal, Optional
from urllib.parse import quote

import requests

from project_service.config import IS_DEV, TASK_SERVICE_TIMEOUT, TASK_SERVICE_URL
from project_service.schemas import TaskResponse

TASK_API_PREFIX = "/api/v1/task"


class TaskClient:
    """
    Client for the task service's project-level operations.

    Args:
        base_url: Task service root (defaults to TASK_SERVICE_URL)
        timeout: Request timeout in seconds (defaults to TASK_SERVICE_TIMEOUT)
        session: Optional requests.Session (shared connection pool, test double)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or TASK_SERVICE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else TASK_SERVICE_TIMEOUT
        self.session = session or requests.Session()

    def get_counts_by_project(self, access_token: str, project_code: str) -> TaskResponse:
        """Fetch completed / non-completed task counts for a project."""
        return self._request("GET", f"/count/project/{quote(project_code, safe='')}", access_token)

    def complete_by_project(self, access_token: str, project_code: str) -> TaskResponse:
        """Mark every task of a project as completed."""
        return self._request("PUT", f"/complete/project/{quote(project_code, safe='')}", access_token)

    def delete_by_project(self, access_token: str, project_code: str) -> TaskResponse:
        """Delete every task of a project."""
        return self._request("DELETE", f"/delete/project/{quote(project_code, safe='')}", access_token)

    def _request(
        self,
        method: Literal["GET", "PUT", "DELETE"],
        path: str,
        access_token: str,
    ) -> TaskResponse:
        url = f"{self.base_url}{TASK_API_PREFIX}{path}"
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            print(f"[TASK_CLIENT] Timeout on {method} {path} after {self.timeout}s")
            return TaskResponse(success=False, message="Task service timed out")
        except requests.exceptions.ConnectionError:
            print(f"[TASK_CLIENT] Connection error on {method} {path}")
            return TaskResponse(success=False, message="Task service unreachable")
        except requests.exceptions.RequestException as e:
            # Exception text can echo request headers; log the type only
            print(f"[TASK_CLIENT] Request failed on {method} {path}: {type(e).__name__}")
            return TaskResponse(success=False, message="Task service request failed")

        try:
            body = resp.json()
        except ValueError:
            print(f"[TASK_CLIENT] Non-JSON response on {method} {path}: HTTP {resp.status_code}")
            return TaskResponse(success=False, code=resp.status_code, message="Invalid task service response")

        if not isinstance(body, dict):
            return TaskResponse(success=False, code=resp.status_code, message="Invalid task service response")

        task_response = TaskResponse(**body)

        # A non-2xx status is a failure whatever the body claims
        if not resp.ok:
            task_response = task_response.model_copy(update={"success": False, "code": task_response.code or resp.status_code})

        if IS_DEV:
            print(f"[TASK_CLIENT] {method} {path} -> HTTP {resp.status_code}, success={task_response.success}")

        return task_response

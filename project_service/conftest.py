"""
Shared fixtures and test doubles for the project service test suite.

Environment is pinned before any project_service module is imported, so
config picks up a throwaway SQLite file and a test signing key.
"""

import os
import tempfile
from datetime import date

os.environ.setdefault("ENV", "dev")
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(), "projects_test.db"))
os.environ.setdefault("SECRET_KEY", "test-signing-key-0123456789abcdef0123456789abcdef")
os.environ.pop("DATABASE_URL", None)

import pytest

from project_service.db import init_db
from project_service.schemas import ProjectDTO, TaskResponse
from project_service.store import ProjectStore


class FakeIdentity:
    """Identity oracle double: one caller with a fixed role set."""

    def __init__(self, username, roles=(), token=None):
        self.username = username
        self.roles = set(roles)
        self.token = token or f"token-{username}"
        self.role_queries = []

    def current_username(self):
        return self.username

    def has_role(self, username, role):
        self.role_queries.append((username, role))
        return username == self.username and role in self.roles

    def current_access_token(self):
        return self.token


class FakeTaskClient:
    """TaskClient double that records calls and answers from fixed settings."""

    def __init__(self):
        self.counts = {}
        self.failing_count_codes = set()
        self.raw_count_data = {}
        self.complete_succeeds = True
        self.delete_succeeds = True
        self.calls = []

    def get_counts_by_project(self, access_token, project_code):
        self.calls.append(("counts", access_token, project_code))
        if project_code in self.failing_count_codes:
            return TaskResponse(success=False, message="boom")
        if project_code in self.raw_count_data:
            return TaskResponse(success=True, data=self.raw_count_data[project_code])
        completed, open_ = self.counts.get(project_code, (0, 0))
        return TaskResponse(
            success=True,
            data={"completedTaskCount": completed, "nonCompletedTaskCount": open_},
        )

    def complete_by_project(self, access_token, project_code):
        self.calls.append(("complete", access_token, project_code))
        return TaskResponse(success=self.complete_succeeds)

    def delete_by_project(self, access_token, project_code):
        self.calls.append(("delete", access_token, project_code))
        return TaskResponse(success=self.delete_succeeds)


class StaleLookupStore(ProjectStore):
    """Store whose code lookup always misses, as when a concurrent create lands
    between the existence check and the insert."""

    def find_by_code(self, project_code):
        return None


def make_dto(code="PRJ-1", name="Project One", **overrides):
    fields = {
        "project_code": code,
        "project_name": name,
        "start_date": date(2026, 1, 1),
        "end_date": date(2026, 6, 30),
        "project_detail": "Initial scope",
    }
    fields.update(overrides)
    return ProjectDTO(**fields)


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "projects.db")
    init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return ProjectStore(db_path)


@pytest.fixture
def task_client():
    return FakeTaskClient()

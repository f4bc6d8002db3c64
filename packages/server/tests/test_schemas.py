"""
Validation rules carried by the shared request schemas.
"""

from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from sitework_shared.schemas.common import ProjectStatus, TaskStatus
from sitework_shared.schemas.projects import ProjectCreate
from sitework_shared.schemas.tasks import DependencyAdd, TaskCreate, TaskStatusChange, TaskUpdate
from sitework_shared.schemas.tenants import TaskDefaultsSettings, TenantSettings


class TestStatusSpelling:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("in-progress", TaskStatus.IN_PROGRESS),
            ("in_progress", TaskStatus.IN_PROGRESS),
            ("on_hold", TaskStatus.ON_HOLD),
            ("completed", TaskStatus.COMPLETED),
        ],
    )
    def test_task_status_normalised(self, raw, expected):
        assert TaskStatusChange(status=raw).status is expected

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskStatusChange(status="done")

    def test_project_status_underscore_alias(self):
        assert ProjectStatus("on_track") is ProjectStatus.ON_TRACK
        assert ProjectCreate(name="Deck", status="on_hold").status is ProjectStatus.ON_HOLD


class TestTaskCreate:
    def test_tags_cleaned(self):
        task = TaskCreate(
            project_id=uuid.uuid4(),
            title="Pour slab",
            tags=[" concrete ", "", "slab", "concrete"],
        )
        assert task.tags == ["concrete", "slab"]

    def test_blank_assignee_is_none(self):
        task = TaskCreate(project_id=uuid.uuid4(), title="Pour slab", assignee_id="")
        assert task.assignee_id is None

    def test_defaults(self):
        task = TaskCreate(project_id=uuid.uuid4(), title="Pour slab")
        assert task.status is TaskStatus.PENDING
        assert task.priority is None
        assert task.position is None
        assert task.duration_days == 1

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(project_id=uuid.uuid4(), title="")

    def test_zero_duration_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(project_id=uuid.uuid4(), title="Pour slab", duration_days=0)

    def test_update_has_no_status(self):
        update = TaskUpdate(title="Renamed", status="completed")
        assert "status" not in update.model_dump(exclude_unset=True)


def test_dependency_lag_defaults_to_tenant_setting():
    body = DependencyAdd(depends_on_task_id=uuid.uuid4())
    assert body.lag_days is None
    assert body.dependency_type.value == "finish_to_start"


def test_project_dates_ordered():
    with pytest.raises(ValidationError):
        ProjectCreate(name="Deck", start_date="2026-05-10", end_date="2026-05-01")


class TestTenantSettings:
    def test_defaults(self):
        settings = TenantSettings()
        assert settings.task_defaults.default_priority.value == "medium"
        assert settings.task_defaults.default_lag_days == 0
        assert settings.task_defaults.block_on_unfinished_prerequisites is True

    def test_lag_bounds(self):
        with pytest.raises(ValidationError):
            TaskDefaultsSettings(default_lag_days=-1)
        with pytest.raises(ValidationError):
            TaskDefaultsSettings(default_lag_days=366)

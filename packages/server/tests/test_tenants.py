"""
Tenant service: creation, settings deep-merge and validation.
"""

from __future__ import annotations

import pytest

from app.core.errors import Conflict, NotFound, ValidationFailed
from app.services import tenants as tenant_service
from app.services.tenants import _deep_merge
from sitework_shared.schemas.tenants import TenantCreateRequest, TenantUpdateRequest


class TestDeepMerge:
    def test_nested_keys_merged(self):
        base = {"task_defaults": {"default_priority": "medium", "default_lag_days": 0}}
        patch = {"task_defaults": {"default_lag_days": 2}}
        assert _deep_merge(base, patch) == {
            "task_defaults": {"default_priority": "medium", "default_lag_days": 2}
        }

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"c": 2}})
        assert base == {"a": {"b": 1}}

    def test_non_dict_replaces(self):
        assert _deep_merge({"a": {"b": 1}}, {"a": 5}) == {"a": 5}

    def test_null_removes_key(self):
        """A null value drops the key so the settings default applies again."""
        base = {"task_defaults": {"default_priority": "high", "default_lag_days": 3}}
        patch = {"task_defaults": {"default_priority": None}}
        assert _deep_merge(base, patch) == {"task_defaults": {"default_lag_days": 3}}

    def test_null_for_missing_key_is_noop(self):
        assert _deep_merge({"a": 1}, {"b": None}) == {"a": 1}


async def test_create_fills_default_settings(session):
    tenant = await tenant_service.create_tenant(
        TenantCreateRequest(
            name="Harbor Homes",
            slug="harbor-homes",
            settings={"task_defaults": {"default_priority": "high"}},
        ),
        session,
    )
    assert tenant.settings["task_defaults"] == {
        "default_priority": "high",
        "default_lag_days": 0,
        "block_on_unfinished_prerequisites": True,
    }


async def test_duplicate_slug(session, tenant):
    with pytest.raises(Conflict):
        await tenant_service.create_tenant(
            TenantCreateRequest(name="Copy", slug=tenant.slug), session
        )


async def test_invalid_settings_rejected(session, tenant):
    with pytest.raises(ValidationFailed):
        await tenant_service.update_tenant(
            tenant,
            TenantUpdateRequest(settings={"task_defaults": {"default_lag_days": -4}}),
            session,
        )


async def test_update_merges_settings(session, tenant):
    tenant = await tenant_service.update_tenant(
        tenant,
        TenantUpdateRequest(
            name="Acme Builders Inc",
            settings={"task_defaults": {"block_on_unfinished_prerequisites": False}},
        ),
        session,
    )
    assert tenant.name == "Acme Builders Inc"
    assert tenant.settings["task_defaults"]["block_on_unfinished_prerequisites"] is False
    assert tenant.settings["task_defaults"]["default_priority"] == "medium"


async def test_unknown_slug(session):
    with pytest.raises(NotFound):
        await tenant_service.get_tenant("nobody", session)


async def test_null_setting_resets_to_default(session, tenant):
    """Clearing a setting with null falls back to the schema default."""
    tenant = await tenant_service.update_tenant(
        tenant,
        TenantUpdateRequest(settings={"task_defaults": {"default_priority": "high"}}),
        session,
    )
    assert tenant.settings["task_defaults"]["default_priority"] == "high"

    tenant = await tenant_service.update_tenant(
        tenant,
        TenantUpdateRequest(settings={"task_defaults": {"default_priority": None}}),
        session,
    )
    assert tenant.settings["task_defaults"]["default_priority"] == "medium"
    assert tenant.settings["task_defaults"]["block_on_unfinished_prerequisites"] is True

"""Tests for tenant visibility rules."""

import pytest

from src.project_state.core.config import Settings
from src.project_state.services.tenant_access import TenantPolicy, can_access

pytestmark = pytest.mark.unit

STRICT = TenantPolicy()
LENIENT = TenantPolicy(strict_validation=False, allow_unscoped_access=True)
OPEN = TenantPolicy(isolation_enabled=False)


@pytest.mark.parametrize(
    ("policy", "project_tenant", "caller_tenant", "expected"),
    [
        # Tenant-scoped projects
        (STRICT, "t1", "t1", True),
        (STRICT, "t1", "t2", False),
        (STRICT, "t1", None, False),
        (LENIENT, "t1", "t1", True),
        (LENIENT, "t1", "t2", False),
        (LENIENT, "t1", None, True),
        # Unscoped projects
        (STRICT, None, None, True),
        (STRICT, None, "t1", False),
        (LENIENT, None, None, True),
        (LENIENT, None, "t1", True),
        # Isolation disabled
        (OPEN, "t1", "t2", True),
        (OPEN, None, "t1", True),
    ],
)
def test_can_access(policy, project_tenant, caller_tenant, expected):
    assert can_access(project_tenant, caller_tenant, policy) is expected


def test_other_tenant_never_allowed_while_isolated():
    """No combination of flags lets one tenant read another's project."""
    for strict in (True, False):
        for unscoped in (True, False):
            policy = TenantPolicy(strict_validation=strict, allow_unscoped_access=unscoped)
            assert can_access("t1", "t2", policy) is False


def test_policy_from_settings():
    settings = Settings(
        _env_file=None,  # type: ignore[call-arg]
        tenant_isolation_enabled=True,
        strict_tenant_validation=False,
        allow_unscoped_access=True,
    )

    policy = TenantPolicy.from_settings(settings)

    assert policy == LENIENT


def test_policy_defaults_are_strict():
    policy = TenantPolicy.from_settings(Settings(_env_file=None))  # type: ignore[call-arg]

    assert policy.isolation_enabled is True
    assert policy.strict_validation is True
    assert policy.allow_unscoped_access is False

"""Tenant visibility rules for project records."""

from dataclasses import dataclass

from src.project_state.core.config import Settings, get_settings


@dataclass(frozen=True)
class TenantPolicy:
    """How tenant-scoped callers and projects see each other.

    Attributes:
        isolation_enabled: When False every caller sees every project.
        strict_validation: Hide projects without a tenant from tenant callers.
        allow_unscoped_access: Let callers without a tenant see tenant projects.
    """

    isolation_enabled: bool = True
    strict_validation: bool = True
    allow_unscoped_access: bool = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TenantPolicy":
        settings = settings or get_settings()
        return cls(
            isolation_enabled=settings.tenant_isolation_enabled,
            strict_validation=settings.strict_tenant_validation,
            allow_unscoped_access=settings.allow_unscoped_access,
        )


def can_access(
    project_tenant_id: str | None,
    caller_tenant_id: str | None,
    policy: TenantPolicy,
) -> bool:
    """Whether a caller scoped to ``caller_tenant_id`` may see the project."""
    if not policy.isolation_enabled:
        return True
    if project_tenant_id:
        if caller_tenant_id:
            return project_tenant_id == caller_tenant_id
        return policy.allow_unscoped_access
    if caller_tenant_id:
        return not policy.strict_validation
    return True

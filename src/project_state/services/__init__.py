from src.project_state.services.project_state_manager import (
    ProjectStateManager,
    get_project_state_manager,
    reset_project_state_manager,
)
from src.project_state.services.tenant_access import TenantPolicy, can_access

__all__ = [
    "ProjectStateManager",
    "TenantPolicy",
    "can_access",
    "get_project_state_manager",
    "reset_project_state_manager",
]

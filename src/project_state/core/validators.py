"""Input validators applied before any storage call."""

from typing import Final

from src.project_state.core.exceptions import InvalidInputError

MAX_PROJECT_ID_LENGTH: Final[int] = 128
MAX_FILE_PATH_LENGTH: Final[int] = 1024


def validate_project_id(project_id: str | None) -> str:
    """Validate an opaque project id.

    Ids are opaque, so only shape is checked: present, not blank, bounded, and
    free of whitespace so they can be embedded in storage keys.
    """
    if project_id is None or not isinstance(project_id, str) or not project_id.strip():
        raise InvalidInputError("Project ID is required")
    if len(project_id) > MAX_PROJECT_ID_LENGTH:
        raise InvalidInputError(
            f"Project ID exceeds {MAX_PROJECT_ID_LENGTH} characters",
            project_id=project_id[:MAX_PROJECT_ID_LENGTH],
        )
    if any(ch.isspace() for ch in project_id):
        raise InvalidInputError("Project ID must not contain whitespace", project_id=project_id)
    return project_id


def validate_file_path(path: str | None) -> str:
    """Validate a project-relative file path."""
    if path is None or not isinstance(path, str) or not path.strip():
        raise InvalidInputError("File path is required")
    if len(path) > MAX_FILE_PATH_LENGTH:
        raise InvalidInputError(f"File path exceeds {MAX_FILE_PATH_LENGTH} characters")
    return path


def normalize_tenant_id(tenant_id: str | None) -> str | None:
    """Treat blank tenant ids as absent."""
    if tenant_id is None:
        return None
    tenant_id = tenant_id.strip()
    return tenant_id or None

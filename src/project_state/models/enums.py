"""Shared enums for models."""

from enum import Enum


class StorageKind(str, Enum):
    """Storage backends, listed in selection priority order."""

    RELATIONAL = "relational"
    KEY_VALUE = "key_value"
    LOCAL = "local"
    MEMORY = "memory"


class DeploymentStatus(str, Enum):
    """Outcome of a deployment."""

    SUCCESS = "success"
    FAILED = "failed"
    IN_PROGRESS = "in-progress"


class SortField(str, Enum):
    """Fields the project list can be ordered by."""

    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ProjectStatus(str, Enum):
    """Lifecycle status carried by enhanced records."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class RequirementStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import ProjectStateFactory, ProjectFileFactory, ...
"""

from tests.factories.base import BaseFactory, generate_id, timestamp_ms
from tests.factories.project import (
    ProjectDeploymentFactory,
    ProjectFileFactory,
    ProjectStateFactory,
    RequirementsEntryFactory,
)

__all__ = [
    # Base
    "BaseFactory",
    "generate_id",
    "timestamp_ms",
    # Project state
    "ProjectDeploymentFactory",
    "ProjectFileFactory",
    "ProjectStateFactory",
    "RequirementsEntryFactory",
]

"""Project state factories for test data generation."""

from polyfactory import Use

from src.project_state.models.enums import DeploymentStatus
from src.project_state.models.project import (
    ProjectDeployment,
    ProjectFile,
    ProjectState,
    RequirementsEntry,
)
from tests.factories.base import BaseFactory, generate_id, timestamp_ms


class ProjectFileFactory(BaseFactory):
    """Factory for generating ProjectFile test data."""

    __model__ = ProjectFile

    path = Use(lambda: f"src/{generate_id()[:8]}.ts")
    content = Use(lambda: f"export const id = '{generate_id()}';\n")
    created_at = Use(timestamp_ms)
    updated_at = Use(timestamp_ms)
    is_deleted = False

    @classmethod
    def deleted(cls, **kwargs):
        """Create a soft-deleted file."""
        return cls.build(is_deleted=True, **kwargs)


class RequirementsEntryFactory(BaseFactory):
    __model__ = RequirementsEntry

    id = Use(generate_id)
    content = "Build a todo app with authentication"
    timestamp = Use(timestamp_ms)
    user_id = None
    metadata = None


class ProjectDeploymentFactory(BaseFactory):
    __model__ = ProjectDeployment

    id = Use(generate_id)
    url = Use(lambda: f"https://{generate_id()[:8]}.pages.dev")
    provider = "cloudflare-pages"
    timestamp = Use(timestamp_ms)
    status = DeploymentStatus.SUCCESS
    error_message = None
    metadata = None


class ProjectStateFactory(BaseFactory):
    """Factory for generating ProjectState test data."""

    __model__ = ProjectState

    id = Use(generate_id)
    name = Use(lambda: f"Test Project {generate_id()[-8:]}")
    created_at = Use(timestamp_ms)
    updated_at = Use(timestamp_ms)
    files = Use(lambda: ProjectFileFactory.batch(2))
    requirements = Use(lambda: RequirementsEntryFactory.batch(1))
    deployments = Use(list)
    current_deployment_id = None
    metadata = Use(dict)
    webhooks = Use(list)
    tenant_id = None

    @classmethod
    def deployed(cls, **kwargs):
        """Create a project with one current deployment."""
        deployment = ProjectDeploymentFactory.build()
        return cls.build(
            deployments=[deployment], current_deployment_id=deployment.id, **kwargs
        )

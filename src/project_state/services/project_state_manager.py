"""Project state manager - the single entry point for project state.

Every mutation goes through this service: it validates input before touching
storage, stamps timestamps from one monotonic clock, keeps requirements and
deployments append-only, soft-deletes files, applies tenant visibility, and
keeps the read-through cache in step with the active adapter.
"""

from typing import Any

from pydantic import BaseModel, ValidationError

from src.project_state.core.cache import ProjectCache
from src.project_state.core.config import Settings, get_settings
from src.project_state.core.exceptions import (
    InvalidInputError,
    ProjectNotFoundError,
    TenantAccessDeniedError,
)
from src.project_state.core.logging import get_logger
from src.project_state.core.validators import (
    normalize_tenant_id,
    validate_file_path,
    validate_project_id,
)
from src.project_state.models.base import MonotonicClock, new_id
from src.project_state.models.enhanced import EnhancedProjectState, SearchIndex
from src.project_state.models.enums import StorageKind
from src.project_state.models.project import (
    ProjectDeployment,
    ProjectFile,
    ProjectState,
    RequirementsEntry,
)
from src.project_state.schemas.pagination import (
    ListProjectsOptions,
    ProjectListResult,
    SearchProjectsOptions,
)
from src.project_state.schemas.project import (
    CreateProjectOptions,
    DeploymentCreate,
    FileUpsert,
    GetProjectFilesOptions,
    ProjectUpdateResult,
    UpdateProjectOptions,
)
from src.project_state.services.tenant_access import TenantPolicy, can_access
from src.project_state.storage.base import StorageAdapter
from src.project_state.storage.context import RuntimeContext
from src.project_state.storage.converter import SEARCH_INDEX_METADATA_KEY, to_enhanced
from src.project_state.storage.selector import AdapterFactory, select_adapter

logger = get_logger(__name__)


def _parse[M: BaseModel](model: type[M], value: M | dict[str, Any] | None) -> M:
    """Coerce caller options into ``model``, reporting failures as invalid input."""
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value or {})
    except ValidationError as e:
        raise InvalidInputError(
            f"Invalid {model.__name__}: {e.errors()[0]['msg']}",
            errors=e.errors(include_url=False),
        ) from e


class ProjectStateManager:
    """Project state service - business logic over a pluggable adapter.

    Args:
        context: Storage capabilities; defaults to an in-process store.
        settings: Cache and tenant policy configuration.
        clock: Timestamp source shared by every mutation.
        cache: Read-through cache; built from settings when omitted.
        policy: Tenant visibility policy; built from settings when omitted.
        factories: Adapter factories passed to the backend selector.
    """

    def __init__(
        self,
        context: RuntimeContext | None = None,
        *,
        settings: Settings | None = None,
        clock: MonotonicClock | None = None,
        cache: ProjectCache | None = None,
        policy: TenantPolicy | None = None,
        factories: dict[StorageKind, AdapterFactory] | None = None,
    ):
        settings = settings or get_settings()
        self.context = context or RuntimeContext()
        self.clock = clock or MonotonicClock()
        self.policy = policy or TenantPolicy.from_settings(settings)
        if cache is None and settings.cache_enabled:
            cache = ProjectCache(settings.cache_ttl_seconds, settings.cache_max_entries)
        self.cache = cache
        self._factories = factories
        self.adapter: StorageAdapter = select_adapter(self.context, factories)

    @property
    def storage_kind(self) -> StorageKind:
        return self.adapter.kind

    def refresh_adapter(self, context: RuntimeContext) -> StorageKind:
        """Re-run backend selection for a new context, keeping this instance.

        Returns:
            The kind of the adapter now in use.
        """
        previous = self.adapter.kind
        self.context = context
        self.adapter = select_adapter(context, self._factories)
        if self.cache is not None:
            self.cache.clear()
        logger.info(
            "Storage adapter refreshed",
            previous=previous.value,
            current=self.adapter.kind.value,
        )
        return self.adapter.kind

    # --- Cache and access helpers ---

    def _remember(self, project: ProjectState) -> None:
        if self.cache is not None:
            self.cache.put(project)

    def _forget(self, project_id: str) -> None:
        if self.cache is not None:
            self.cache.invalidate(project_id)

    async def _fetch(self, project_id: str, *, use_cache: bool) -> ProjectState | None:
        if use_cache and self.cache is not None:
            cached = self.cache.get(project_id)
            if cached is not None:
                return cached
        project = await self.adapter.get_project(project_id)
        if project is not None:
            self._remember(project)
        return project

    async def _load(
        self, project_id: str, tenant_id: str | None, *, use_cache: bool = True
    ) -> ProjectState | None:
        """Fetch a project visible to ``tenant_id``; denial looks like absence."""
        validate_project_id(project_id)
        tenant_id = normalize_tenant_id(tenant_id)
        project = await self._fetch(project_id, use_cache=use_cache)
        if project is None:
            return None
        if not can_access(project.tenant_id, tenant_id, self.policy):
            logger.debug("Project hidden from caller", project_id=project_id, tenant_id=tenant_id)
            return None
        return project

    async def _require(
        self, project_id: str, tenant_id: str | None, *, use_cache: bool = True
    ) -> ProjectState:
        project = await self._load(project_id, tenant_id, use_cache=use_cache)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _save(self, project: ProjectState) -> None:
        await self.adapter.save_project(project)
        self._remember(project)

    # --- Projects ---

    async def create_project(
        self, options: CreateProjectOptions | dict[str, Any]
    ) -> ProjectState:
        """Create a project, seeding one requirements entry if requirements are given."""
        options = _parse(CreateProjectOptions, options)
        project = await self.adapter.create_project(options, self.clock)
        self._remember(project)
        return project

    async def get_project(
        self, project_id: str, tenant_id: str | None = None
    ) -> ProjectState | None:
        """Get a project, or None if it is missing or hidden from ``tenant_id``."""
        return await self._load(project_id, tenant_id)

    async def get_enhanced_project(
        self, project_id: str, tenant_id: str | None = None
    ) -> EnhancedProjectState | None:
        project = await self._load(project_id, tenant_id)
        if project is None:
            return None
        return to_enhanced(project)

    async def project_exists(self, project_id: str, tenant_id: str | None = None) -> bool:
        return await self._load(project_id, tenant_id) is not None

    async def update_project(
        self,
        project_id: str,
        options: UpdateProjectOptions | dict[str, Any],
        tenant_id: str | None = None,
    ) -> ProjectUpdateResult:
        """Apply an update to the current stored record.

        The record is re-read from storage, never from the cache. File writes
        replace the active file at a path (keeping its ``created_at``) or add a
        new one; deletions are soft. ``updated_at`` is always rewritten.

        Raises:
            ProjectNotFoundError: If the project is missing or not visible.
            InvalidInputError: If the options are malformed.
        """
        options = _parse(UpdateProjectOptions, options)
        for upsert in options.updated_files or []:
            validate_file_path(upsert.path)
        for path in options.deleted_file_paths or []:
            validate_file_path(path)

        project = await self._require(project_id, tenant_id, use_cache=False)
        now = self.clock.now()
        result = ProjectUpdateResult(project=project)

        if options.name is not None:
            project.name = options.name

        for upsert in options.updated_files or []:
            existing = project.active_file(upsert.path)
            if existing is not None:
                existing.content = upsert.content
                existing.updated_at = now
                result.updated_files.append(existing)
            else:
                file = ProjectFile(
                    path=upsert.path,
                    content=upsert.content,
                    created_at=now,
                    updated_at=now,
                )
                project.files.append(file)
                result.new_files.append(file)

        for path in options.deleted_file_paths or []:
            existing = project.active_file(path)
            if existing is None:
                logger.debug("Skipping delete of missing file", project_id=project_id, path=path)
                continue
            existing.is_deleted = True
            existing.updated_at = now
            result.deleted_files.append(existing)

        if options.new_requirements:
            project.requirements.append(
                RequirementsEntry(
                    id=new_id(),
                    content=options.new_requirements,
                    timestamp=now,
                    user_id=project.user_id,
                )
            )

        if options.metadata:
            project.metadata.update(options.metadata)

        if options.webhooks is not None:
            project.webhooks = list(options.webhooks)

        project.updated_at = now
        await self._save(project)

        logger.info(
            "Project updated",
            project_id=project_id,
            new_files=len(result.new_files),
            updated_files=len(result.updated_files),
            deleted_files=len(result.deleted_files),
        )
        return result

    async def delete_project(self, project_id: str, tenant_id: str | None = None) -> bool:
        """Delete a project. Returns False if it is missing or not visible."""
        project = await self._load(project_id, tenant_id, use_cache=False)
        if project is None:
            self._forget(project_id)
            return False
        deleted = await self.adapter.delete_project(project_id)
        self._forget(project_id)
        logger.info("Project deleted", project_id=project_id, deleted=deleted)
        return deleted

    async def list_projects(
        self, options: ListProjectsOptions | dict[str, Any] | None = None
    ) -> ProjectListResult:
        """List projects visible to ``options.tenant_id``."""
        options = _parse(ListProjectsOptions, options)
        tenant_id = normalize_tenant_id(options.tenant_id)
        result = await self.adapter.list_projects(
            options,
            visible=lambda entry: can_access(entry.tenant_id, tenant_id, self.policy),
        )
        for project in result.projects:
            self._remember(project)
        return result

    # --- Search ---

    async def search_projects(
        self, options: SearchProjectsOptions | dict[str, Any] | None = None
    ) -> ProjectListResult:
        """Find projects visible to ``options.tenant_id`` by query and creation date."""
        options = _parse(SearchProjectsOptions, options)
        tenant_id = normalize_tenant_id(options.tenant_id)
        result = await self.adapter.search_projects(
            options,
            visible=lambda entry: can_access(entry.tenant_id, tenant_id, self.policy),
        )
        for project in result.projects:
            self._remember(project)
        logger.debug(
            "Projects searched",
            query=options.query,
            matches=result.total,
            backend=self.adapter.kind.value,
        )
        return result

    async def update_search_index(
        self,
        project_id: str,
        search_index: SearchIndex | dict[str, Any],
        tenant_id: str | None = None,
    ) -> SearchIndex:
        """Replace a project's search index and stamp ``last_indexed``.

        Raises:
            ProjectNotFoundError: If the project is missing or not visible.
        """
        search_index = _parse(SearchIndex, search_index)
        project = await self._require(project_id, tenant_id, use_cache=False)
        now = self.clock.now()

        search_index = search_index.model_copy(update={"last_indexed": now})
        project.metadata[SEARCH_INDEX_METADATA_KEY] = search_index.model_dump(
            mode="json", by_alias=True
        )
        project.updated_at = now
        await self._save(project)

        logger.info(
            "Search index updated",
            project_id=project_id,
            keywords=len(search_index.keywords),
            features=len(search_index.features),
            technologies=len(search_index.technologies),
        )
        return search_index

    # --- Files ---

    async def add_files(
        self, project_id: str, files: dict[str, str], tenant_id: str | None = None
    ) -> list[ProjectFile]:
        """Write files by path. Returns the written files in input order."""
        if not files:
            raise InvalidInputError("At least one file is required", project_id=project_id)
        upserts = []
        for path, content in files.items():
            validate_file_path(path)
            upserts.append(_parse(FileUpsert, {"path": path, "content": content}))
        result = await self.update_project(
            project_id, UpdateProjectOptions(updated_files=upserts), tenant_id
        )
        written = {f.path: f for f in result.new_files + result.updated_files}
        return [written[path] for path in files]

    async def delete_files(
        self, project_id: str, paths: list[str], tenant_id: str | None = None
    ) -> list[ProjectFile]:
        """Soft-delete files by path. Missing paths are ignored."""
        if not paths:
            raise InvalidInputError("At least one file path is required", project_id=project_id)
        for path in paths:
            validate_file_path(path)
        result = await self.update_project(
            project_id, UpdateProjectOptions(deleted_file_paths=list(paths)), tenant_id
        )
        return result.deleted_files

    async def get_project_files(
        self,
        project_id: str,
        options: GetProjectFilesOptions | dict[str, Any] | None = None,
        tenant_id: str | None = None,
    ) -> list[ProjectFile]:
        """Get a project's files, excluding soft-deleted ones unless asked.

        Raises:
            ProjectNotFoundError: If the project is missing or not visible.
        """
        options = _parse(GetProjectFilesOptions, options)
        project = await self._require(project_id, tenant_id)

        files = project.files
        if not options.include_deleted:
            files = [f for f in files if not f.is_deleted]
        if options.include_paths:
            files = [f for f in files if f.path in options.include_paths]
        if options.exclude_paths:
            files = [f for f in files if f.path not in options.exclude_paths]
        if options.pattern is not None:
            pattern = options.pattern
            files = [f for f in files if pattern.search(f.path)]  # type: ignore[union-attr]
        return files

    # --- Deployments ---

    async def add_deployment(
        self,
        project_id: str,
        deployment: DeploymentCreate | dict[str, Any],
        tenant_id: str | None = None,
    ) -> ProjectDeployment:
        """Record a deployment and make it the current one."""
        deployment = _parse(DeploymentCreate, deployment)
        project = await self._require(project_id, tenant_id, use_cache=False)
        now = self.clock.now()

        entry = ProjectDeployment(
            id=new_id(),
            url=deployment.url,
            provider=deployment.provider,
            timestamp=deployment.timestamp if deployment.timestamp is not None else now,
            status=deployment.status,
            error_message=deployment.error_message,
            metadata=deployment.metadata,
        )
        project.deployments.append(entry)
        project.current_deployment_id = entry.id
        project.updated_at = now
        await self._save(project)

        logger.info(
            "Deployment recorded",
            project_id=project_id,
            deployment_id=entry.id,
            provider=entry.provider,
            status=entry.status.value,
        )
        return entry

    async def get_project_deployments(
        self, project_id: str, tenant_id: str | None = None
    ) -> list[ProjectDeployment]:
        project = await self._require(project_id, tenant_id)
        return project.deployments

    async def get_current_deployment(
        self, project_id: str, tenant_id: str | None = None
    ) -> ProjectDeployment | None:
        project = await self._require(project_id, tenant_id)
        if not project.current_deployment_id:
            return None
        for deployment in project.deployments:
            if deployment.id == project.current_deployment_id:
                return deployment
        return None

    # --- Requirements ---

    async def add_requirements(
        self,
        project_id: str,
        content: str,
        user_id: str | None = None,
        is_additional: bool = False,
        tenant_id: str | None = None,
    ) -> RequirementsEntry:
        """Append a requirements entry. Earlier entries are never touched."""
        if not content or not content.strip():
            raise InvalidInputError("Requirements content is required", project_id=project_id)
        project = await self._require(project_id, tenant_id, use_cache=False)
        now = self.clock.now()

        entry = RequirementsEntry(
            id=new_id(),
            content=content,
            timestamp=now,
            user_id=user_id or None,
            metadata={"isAdditional": is_additional},
        )
        project.requirements.append(entry)
        project.updated_at = now
        await self._save(project)

        logger.info(
            "Requirements added",
            project_id=project_id,
            requirements_id=entry.id,
            is_additional=is_additional,
        )
        return entry

    async def get_requirements_history(
        self, project_id: str, tenant_id: str | None = None
    ) -> list[RequirementsEntry]:
        project = await self._require(project_id, tenant_id)
        return project.requirements

    # --- Administration ---

    async def ensure_tenant_access(self, project_id: str, tenant_id: str | None) -> ProjectState:
        """Load a project for an administrative caller, distinguishing denial.

        Raises:
            ProjectNotFoundError: If no record exists.
            TenantAccessDeniedError: If the record exists but is not visible.
        """
        validate_project_id(project_id)
        tenant_id = normalize_tenant_id(tenant_id)
        project = await self._fetch(project_id, use_cache=True)
        if project is None:
            raise ProjectNotFoundError(project_id)
        if not can_access(project.tenant_id, tenant_id, self.policy):
            logger.warning("Tenant access denied", project_id=project_id, tenant_id=tenant_id)
            raise TenantAccessDeniedError(project_id, tenant_id)
        return project


_manager: ProjectStateManager | None = None


def get_project_state_manager(context: RuntimeContext | None = None) -> ProjectStateManager:
    """Get the process-wide manager.

    Passing a context to an existing manager refreshes its adapter in place,
    so holders of the manager see the new backend.
    """
    global _manager
    if _manager is None:
        _manager = ProjectStateManager(context)
    elif context is not None and context is not _manager.context:
        _manager.refresh_adapter(context)
    return _manager


def reset_project_state_manager() -> None:
    """Drop the process-wide manager. For tests."""
    global _manager
    _manager = None

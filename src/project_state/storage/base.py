"""Storage adapter contract shared by every backend."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from src.project_state.core.exceptions import ProjectStateError, StorageBackendError
from src.project_state.core.logging import get_logger
from src.project_state.models.base import MonotonicClock, new_id
from src.project_state.models.enums import StorageKind
from src.project_state.models.project import ProjectState, RequirementsEntry
from src.project_state.schemas.pagination import (
    ListProjectsOptions,
    ProjectListEntry,
    ProjectListResult,
    SearchProjectsOptions,
)
from src.project_state.schemas.project import CreateProjectOptions
from src.project_state.storage.list_index import EntryFilter, select_entries
from src.project_state.storage.search import in_date_range, matches_query

logger = get_logger(__name__)


def build_project(options: CreateProjectOptions, clock: MonotonicClock) -> ProjectState:
    """Build a fresh project record with an optional first requirements entry."""
    now = clock.now()
    requirements: list[RequirementsEntry] = []
    if options.initial_requirements:
        requirements.append(
            RequirementsEntry(
                id=new_id(),
                content=options.initial_requirements,
                timestamp=now,
                user_id=options.user_id,
            )
        )

    metadata = dict(options.metadata or {})
    if options.user_id:
        metadata["userId"] = options.user_id

    return ProjectState(
        id=new_id(),
        name=options.name,
        created_at=now,
        updated_at=now,
        requirements=requirements,
        metadata=metadata,
        tenant_id=options.tenant_id,
    )


class StorageAdapter(ABC):
    """Uniform async CRUD contract over project records.

    Adapters persist records verbatim; invariants (timestamps, soft deletes,
    append-only history, tenant checks) are enforced by the manager. Creating
    an adapter performs no I/O, so adapters may be constructed repeatedly.
    """

    kind: StorageKind
    # Transport exceptions translated into StorageBackendError
    io_errors: tuple[type[BaseException], ...] = (OSError,)

    @abstractmethod
    async def save_project(self, project: ProjectState) -> None:
        """Create or replace the record with ``project.id``."""

    @abstractmethod
    async def get_project(self, project_id: str) -> ProjectState | None:
        """Return the record, or None if it does not exist."""

    @abstractmethod
    async def delete_project(self, project_id: str) -> bool:
        """Remove the record, its index entry and any chunk data.

        Returns:
            True if a record existed and was removed.
        """

    @abstractmethod
    async def project_exists(self, project_id: str) -> bool:
        """Check whether a record exists."""

    @abstractmethod
    async def load_index(self) -> list[ProjectListEntry]:
        """Return every project list index entry."""

    async def create_project(
        self, options: CreateProjectOptions, clock: MonotonicClock
    ) -> ProjectState:
        """Build a new project from ``options`` and persist it."""
        project = build_project(options, clock)
        await self.save_project(project)
        logger.info(
            "Project created",
            project_id=project.id,
            backend=self.kind.value,
            tenant_id=project.tenant_id,
        )
        return project

    async def _hydrate(self, entry: ProjectListEntry) -> ProjectState | None:
        """Load the record behind an index entry, or None to skip it with a warning."""
        try:
            project = await self.get_project(entry.id)
        except StorageBackendError as e:
            logger.warning(
                "Skipping project that failed to load",
                project_id=entry.id,
                backend=self.kind.value,
                error=str(e),
            )
            return None
        if project is None:
            logger.warning(
                "Skipping stale project list entry",
                project_id=entry.id,
                backend=self.kind.value,
            )
        return project

    async def list_projects(
        self,
        options: ListProjectsOptions | None = None,
        visible: EntryFilter | None = None,
    ) -> ProjectListResult:
        """List projects through the project list index.

        Entries whose record cannot be hydrated are skipped; the index is not
        written atomically with the records, so it may briefly hold stale ids.
        """
        options = options or ListProjectsOptions()
        entries = await self.load_index()
        page, total = select_entries(entries, options, visible)

        projects: list[ProjectState] = []
        for entry in page:
            project = await self._hydrate(entry)
            if project is not None:
                projects.append(project)
        return ProjectListResult(projects=projects, total=total)

    async def search_projects(
        self,
        options: SearchProjectsOptions,
        visible: EntryFilter | None = None,
    ) -> ProjectListResult:
        """Search projects through the project list index.

        Every entry in the date range is hydrated and matched in sort order;
        ``total`` counts matches before ``offset`` / ``limit`` are applied.
        """
        entries = [e for e in await self.load_index() if in_date_range(e, options)]
        ordered, _ = select_entries(
            entries, options.model_copy(update={"limit": None, "offset": 0}), visible
        )

        matches: list[ProjectState] = []
        for entry in ordered:
            project = await self._hydrate(entry)
            if project is not None and matches_query(project, options.query):
                matches.append(project)

        end = options.offset + options.limit if options.limit is not None else None
        return ProjectListResult(projects=matches[options.offset : end], total=len(matches))

    @contextmanager
    def translate_errors(self, operation: str, project_id: str | None = None) -> Iterator[None]:
        """Log transport failures with context and re-raise as StorageBackendError."""
        try:
            yield
        except ProjectStateError:
            raise
        except (*self.io_errors, ValueError) as e:  # ValueError covers JSON and schema errors
            logger.error(
                "Storage operation failed",
                operation=operation,
                project_id=project_id,
                backend=self.kind.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageBackendError(
                f"{self.kind.value} storage failed during {operation}: {e}",
                operation=operation,
                backend=self.kind.value,
                project_id=project_id,
            ) from e

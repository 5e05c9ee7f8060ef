"""Relational storage on a SQLAlchemy async engine.

Each project is one ``projects`` row. The enhanced record is kept in the
``state`` JSON column and the list index columns are written in the same
statement, so the index never drifts from the records on this backend.
"""

import asyncio

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

from src.project_state.core.db import create_session_factory
from src.project_state.core.logging import get_logger
from src.project_state.models.enhanced import EnhancedProjectState
from src.project_state.models.enums import StorageKind
from src.project_state.models.project import ProjectState
from src.project_state.models.records import ProjectRecord
from src.project_state.repositories.project_repository import ProjectRecordRepository
from src.project_state.schemas.pagination import ProjectListEntry
from src.project_state.storage.base import StorageAdapter
from src.project_state.storage.converter import from_enhanced, to_enhanced

logger = get_logger(__name__)


class RelationalStorageAdapter(StorageAdapter):
    """Project storage in the ``projects`` table.

    The table is created on first use. The engine is shared and owned by the
    connection layer.
    """

    kind = StorageKind.RELATIONAL
    io_errors = (SQLAlchemyError, OSError)

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            async with self.engine.begin() as conn:
                await conn.run_sync(
                    SQLModel.metadata.create_all,
                    tables=[ProjectRecord.__table__],  # type: ignore[attr-defined]
                )
            self._schema_ready = True
            logger.info("Projects table ready", backend=self.kind.value)

    @staticmethod
    def _to_record(project: ProjectState) -> ProjectRecord:
        return ProjectRecord(
            id=project.id,
            name=project.name,
            tenant_id=project.tenant_id,
            user_id=project.user_id,
            created_at=project.created_at,
            updated_at=project.updated_at,
            state=to_enhanced(project).model_dump(mode="json", by_alias=True),
        )

    @staticmethod
    def _from_record(record: ProjectRecord) -> ProjectState:
        return from_enhanced(EnhancedProjectState.model_validate(record.state))

    async def save_project(self, project: ProjectState) -> None:
        with self.translate_errors("save_project", project.id):
            await self._ensure_schema()
            async with self._session_factory() as session:
                await ProjectRecordRepository(session).upsert(self._to_record(project))
                await session.commit()
        logger.debug("Project saved", project_id=project.id, backend=self.kind.value)

    async def get_project(self, project_id: str) -> ProjectState | None:
        with self.translate_errors("get_project", project_id):
            await self._ensure_schema()
            async with self._session_factory() as session:
                record = await ProjectRecordRepository(session).get_by_id(project_id)
                if record is None:
                    return None
                return self._from_record(record)

    async def delete_project(self, project_id: str) -> bool:
        with self.translate_errors("delete_project", project_id):
            await self._ensure_schema()
            async with self._session_factory() as session:
                existed = await ProjectRecordRepository(session).delete_by_id(project_id)
                await session.commit()
        logger.debug(
            "Project deleted", project_id=project_id, backend=self.kind.value, existed=existed
        )
        return existed

    async def project_exists(self, project_id: str) -> bool:
        with self.translate_errors("project_exists", project_id):
            await self._ensure_schema()
            async with self._session_factory() as session:
                return await ProjectRecordRepository(session).exists(project_id)

    async def load_index(self) -> list[ProjectListEntry]:
        with self.translate_errors("load_index"):
            await self._ensure_schema()
            async with self._session_factory() as session:
                return await ProjectRecordRepository(session).list_index_rows()

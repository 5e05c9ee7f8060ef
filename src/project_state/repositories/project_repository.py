"""Repository for ProjectRecord rows."""

from sqlalchemy import delete, func
from sqlmodel import select

from src.project_state.models.records import ProjectRecord
from src.project_state.repositories.base import BaseRepository
from src.project_state.schemas.pagination import ProjectListEntry


class ProjectRecordRepository(BaseRepository[ProjectRecord]):
    model = ProjectRecord

    async def exists(self, project_id: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(ProjectRecord).where(ProjectRecord.id == project_id)
        )
        return result.scalar_one() > 0

    async def delete_by_id(self, project_id: str) -> bool:
        """Delete a row. Returns whether one existed."""
        result = await self.session.execute(
            delete(ProjectRecord).where(ProjectRecord.id == project_id)  # type: ignore[arg-type]
        )
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def list_index_rows(self) -> list[ProjectListEntry]:
        """Project the list index columns without loading ``state``."""
        result = await self.session.execute(
            select(
                ProjectRecord.id,
                ProjectRecord.created_at,
                ProjectRecord.updated_at,
                ProjectRecord.user_id,
                ProjectRecord.tenant_id,
            )
        )
        return [
            ProjectListEntry(
                id=row.id,
                created_at=row.created_at,
                updated_at=row.updated_at,
                user_id=row.user_id,
                tenant_id=row.tenant_id,
            )
            for row in result.all()
        ]

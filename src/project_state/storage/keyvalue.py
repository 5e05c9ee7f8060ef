"""Shared implementation for key-addressed stores.

Records live under ``project:<id>``, the list index under ``project_index``
and, for size-limited stores, large file contents under
``file:<projectId>:<path>:<version>:<chunkIndex>``. Subclasses provide the
primitive key operations.
"""

import json
from abc import abstractmethod

from pydantic import ValidationError

from src.project_state.core.exceptions import StorageBackendError
from src.project_state.core.logging import get_logger
from src.project_state.models.enhanced import EnhancedProjectFile, EnhancedProjectState
from src.project_state.models.project import ProjectState
from src.project_state.schemas.pagination import ProjectListEntry
from src.project_state.storage.base import StorageAdapter
from src.project_state.storage.converter import from_enhanced, to_enhanced
from src.project_state.storage.keys import (
    PROJECT_INDEX_KEY,
    file_chunk_key,
    file_chunk_prefix,
    project_key,
)
from src.project_state.storage.list_index import remove_entry, upsert_entry

logger = get_logger(__name__)


def decode_index(raw: str | None) -> list[ProjectListEntry]:
    """Parse the JSON array stored under the project index key."""
    if not raw:
        return []
    return [ProjectListEntry.model_validate(item) for item in json.loads(raw)]


def encode_index(entries: list[ProjectListEntry]) -> str:
    return json.dumps([e.model_dump(mode="json", by_alias=True) for e in entries])


def chunk_keys(project_id: str, file: EnhancedProjectFile) -> list[str]:
    """Keys holding the content of ``file``, in chunk order."""
    return [file_chunk_key(project_id, file.path, file.hash, i) for i in range(file.chunks)]


class KeyValueStorageAdapter(StorageAdapter):
    """Project storage over a string key-value primitive.

    Args:
        enhanced: Store records as ``EnhancedProjectState``.
        chunk_size: Split file contents longer than this many characters into
            chunk keys. Requires ``enhanced``; None disables chunking.
    """

    def __init__(self, *, enhanced: bool = False, chunk_size: int | None = None):
        if chunk_size is not None and not enhanced:
            raise ValueError("File chunking requires enhanced records")
        self.enhanced = enhanced
        self.chunk_size = chunk_size

    # --- Primitives ---

    @abstractmethod
    async def _get(self, key: str) -> str | None: ...

    @abstractmethod
    async def _set(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def _delete(self, key: str) -> bool: ...

    @abstractmethod
    async def _delete_prefix(self, prefix: str) -> int: ...

    async def _set_many(self, items: dict[str, str]) -> None:
        for key, value in items.items():
            await self._set(key, value)

    async def _delete_many(self, keys: set[str]) -> None:
        for key in keys:
            await self._delete(key)

    # --- Project list index (overridable for stores with atomic structures) ---

    async def load_index(self) -> list[ProjectListEntry]:
        with self.translate_errors("load_index"):
            return decode_index(await self._get(PROJECT_INDEX_KEY))

    async def _write_index(self, entries: list[ProjectListEntry]) -> None:
        await self._set(PROJECT_INDEX_KEY, encode_index(entries))

    async def _index_put(self, project: ProjectState) -> None:
        await self._write_index(upsert_entry(await self.load_index(), project))

    async def _index_remove(self, project_id: str) -> None:
        await self._write_index(remove_entry(await self.load_index(), project_id))

    # --- Record encoding ---

    def _encode(self, project: ProjectState) -> tuple[str, dict[str, str]]:
        """Serialize a record, returning (payload, chunk key -> chunk content)."""
        if not self.enhanced:
            return project.to_json(), {}

        record = to_enhanced(project, self.chunk_size)
        chunks: dict[str, str] = {}
        for file in record.files:
            if file.chunks and self.chunk_size:
                for index, key in enumerate(chunk_keys(project.id, file)):
                    start = index * self.chunk_size
                    chunks[key] = file.content[start : start + self.chunk_size]
                file.content = ""
        return record.to_json(), chunks

    async def _decode(self, project_id: str, payload: str) -> ProjectState:
        if not self.enhanced:
            return ProjectState.model_validate_json(payload)

        record = EnhancedProjectState.model_validate_json(payload)
        for file in record.files:
            parts: list[str] = []
            for index, key in enumerate(chunk_keys(project_id, file)):
                part = await self._get(key)
                if part is None:
                    raise StorageBackendError(
                        f"Missing chunk {index} of {file.path}",
                        operation="get_project",
                        backend=self.kind.value,
                        project_id=project_id,
                        path=file.path,
                    )
                parts.append(part)
            if parts:
                file.content = "".join(parts)
        return from_enhanced(record)

    async def _stored_chunk_keys(self, project_id: str) -> set[str]:
        """Chunk keys referenced by the currently stored record."""
        if not self.enhanced:
            return set()
        payload = await self._get(project_key(project_id))
        if payload is None:
            return set()
        try:
            record = EnhancedProjectState.model_validate_json(payload)
        except ValidationError:
            logger.warning(
                "Stored record unreadable, stale chunks left in place",
                project_id=project_id,
                backend=self.kind.value,
            )
            return set()
        return {key for file in record.files for key in chunk_keys(project_id, file)}

    # --- Contract ---

    async def save_project(self, project: ProjectState) -> None:
        """Write chunks, then the record, then drop chunks nothing points to.

        Chunk keys are content-versioned, so a failure before the record write
        leaves the previous record and all of its chunks readable.
        """
        with self.translate_errors("save_project", project.id):
            payload, chunks = self._encode(project)
            previous = await self._stored_chunk_keys(project.id)
            await self._set_many(chunks)
            await self._set(project_key(project.id), payload)
            await self._index_put(project)
            stale = previous - chunks.keys()
            if stale:
                await self._delete_many(stale)
        logger.debug(
            "Project saved",
            project_id=project.id,
            backend=self.kind.value,
            chunk_keys=len(chunks),
            stale_chunk_keys=len(stale),
        )

    async def get_project(self, project_id: str) -> ProjectState | None:
        with self.translate_errors("get_project", project_id):
            payload = await self._get(project_key(project_id))
            if payload is None:
                return None
            return await self._decode(project_id, payload)

    async def delete_project(self, project_id: str) -> bool:
        with self.translate_errors("delete_project", project_id):
            existed = await self._delete(project_key(project_id))
            removed_chunks = await self._delete_prefix(file_chunk_prefix(project_id))
            await self._index_remove(project_id)
        logger.debug(
            "Project deleted",
            project_id=project_id,
            backend=self.kind.value,
            existed=existed,
            removed_chunks=removed_chunks,
        )
        return existed

    async def project_exists(self, project_id: str) -> bool:
        with self.translate_errors("project_exists", project_id):
            return await self._get(project_key(project_id)) is not None

"""Local persistent storage: one JSON document on disk.

The document maps storage keys to string values, the same layout the
key-value backends use. Every mutation is a read-modify-write under an
exclusive ``fcntl`` lock on a sidecar ``.lock`` file, and the document is
replaced atomically so readers never see a partial write. Blocking file I/O
runs in worker threads.
"""

import asyncio
import fcntl
import json
import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from src.project_state.models.enums import StorageKind
from src.project_state.models.project import ProjectState
from src.project_state.storage.keys import PROJECT_INDEX_KEY
from src.project_state.storage.keyvalue import (
    KeyValueStorageAdapter,
    decode_index,
    encode_index,
)
from src.project_state.storage.list_index import remove_entry, upsert_entry

T = TypeVar("T")

Document = dict[str, str]

_LOCK_SUFFIX = ".lock"


@contextmanager
def _locked_file(path: Path) -> Iterator[None]:
    """Hold an exclusive lock on ``<path>.lock`` for the duration of the block."""
    lock_path = path.with_suffix(path.suffix + _LOCK_SUFFIX)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with lock_path.open("a+", encoding="utf-8") as lock_handle:
        fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_handle:
            tmp_handle.write(content)
            tmp_handle.flush()
            os.fsync(tmp_handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def _read_document(path: Path) -> Document:
    if not path.is_file():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError(f"Local store at {path} is not a JSON object")
    return document


class LocalFileStorageAdapter(KeyValueStorageAdapter):
    """Persists projects in a single JSON document at ``path``."""

    kind = StorageKind.LOCAL

    def __init__(self, path: str | Path):
        super().__init__(enhanced=False)
        self.path = Path(path)

    def _mutate_sync(self, mutator: Callable[[Document], T]) -> T:
        with _locked_file(self.path):
            document = _read_document(self.path)
            result = mutator(document)
            _atomic_write_text(self.path, json.dumps(document))
            return result

    async def _mutate(self, mutator: Callable[[Document], T]) -> T:
        return await asyncio.to_thread(self._mutate_sync, mutator)

    async def _get(self, key: str) -> str | None:
        document = await asyncio.to_thread(_read_document, self.path)
        return document.get(key)

    async def _set(self, key: str, value: str) -> None:
        def apply(document: Document) -> None:
            document[key] = value

        await self._mutate(apply)

    async def _delete(self, key: str) -> bool:
        return await self._mutate(lambda document: document.pop(key, None) is not None)

    async def _delete_prefix(self, prefix: str) -> int:
        def apply(document: Document) -> int:
            keys = [k for k in document if k.startswith(prefix)]
            for key in keys:
                del document[key]
            return len(keys)

        return await self._mutate(apply)

    # Index read-modify-write happens inside one lock so concurrent writers
    # cannot drop each other's entries.

    async def _index_put(self, project: ProjectState) -> None:
        def apply(document: Document) -> None:
            entries = upsert_entry(decode_index(document.get(PROJECT_INDEX_KEY)), project)
            document[PROJECT_INDEX_KEY] = encode_index(entries)

        await self._mutate(apply)

    async def _index_remove(self, project_id: str) -> None:
        def apply(document: Document) -> None:
            entries = remove_entry(decode_index(document.get(PROJECT_INDEX_KEY)), project_id)
            document[PROJECT_INDEX_KEY] = encode_index(entries)

        await self._mutate(apply)

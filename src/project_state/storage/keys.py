"""Backend-agnostic key layout for key-addressed stores."""

from typing import Final

PROJECT_KEY_PREFIX: Final[str] = "project:"
PROJECT_INDEX_KEY: Final[str] = "project_index"
FILE_CHUNK_PREFIX: Final[str] = "file:"

# Hex digits of the content hash that version a file's chunk keys
CHUNK_VERSION_LENGTH: Final[int] = 16


def project_key(project_id: str) -> str:
    """Key of a serialized project record, e.g. ``project:<id>``."""
    return f"{PROJECT_KEY_PREFIX}{project_id}"


def file_chunk_prefix(project_id: str) -> str:
    """Prefix shared by every chunk key of a project."""
    return f"{FILE_CHUNK_PREFIX}{project_id}:"


def file_chunk_key(project_id: str, path: str, content_hash: str, chunk_index: int) -> str:
    """Key of one chunk of a large file.

    Layout: ``file:<projectId>:<path>:<version>:<chunkIndex>``, where the
    version is a prefix of the content hash. A soft-deleted file and a live
    file at the same path therefore never share chunk keys, and a save never
    overwrites chunks the stored record still points to.
    """
    version = content_hash[:CHUNK_VERSION_LENGTH]
    return f"{file_chunk_prefix(project_id)}{path}:{version}:{chunk_index}"

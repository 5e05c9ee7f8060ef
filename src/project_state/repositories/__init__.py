"""Repository layer - data access for the relational store."""

from src.project_state.repositories.base import BaseRepository
from src.project_state.repositories.project_repository import ProjectRecordRepository

__all__ = [
    "BaseRepository",
    "ProjectRecordRepository",
]

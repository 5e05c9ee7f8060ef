"""ProjectRecord model - relational storage row."""

from typing import Any

from sqlalchemy import JSON, BigInteger, Column
from sqlmodel import Field, SQLModel


class ProjectRecord(SQLModel, table=True):
    """One project in the relational store.

    ``state`` holds the serialized ``EnhancedProjectState``. The scalar
    columns duplicate the fields the project list index needs so listing
    never has to decode ``state``.
    """

    __tablename__ = "projects"

    id: str = Field(primary_key=True, max_length=128)
    name: str
    tenant_id: str | None = Field(default=None, index=True)
    user_id: str | None = Field(default=None, index=True)
    created_at: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    updated_at: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    state: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

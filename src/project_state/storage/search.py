"""Project search over the list index.

Plain filtering with no ranking. The creation-date range is applied to index
entries before any record is loaded; the query is then matched against each
hydrated record.
"""

from src.project_state.models.project import ProjectState
from src.project_state.schemas.pagination import ProjectListEntry, SearchProjectsOptions
from src.project_state.storage.converter import search_index_from

DESCRIPTION_METADATA_KEY = "description"


def in_date_range(entry: ProjectListEntry, options: SearchProjectsOptions) -> bool:
    if options.created_after is not None and entry.created_at < options.created_after:
        return False
    if options.created_before is not None and entry.created_at > options.created_before:
        return False
    return True


def searchable_text(project: ProjectState) -> list[str]:
    """Name, description and search index terms of a project."""
    texts = [project.name]
    description = project.metadata.get(DESCRIPTION_METADATA_KEY)
    if isinstance(description, str):
        texts.append(description)
    index = search_index_from(project.metadata)
    texts.extend(index.keywords)
    texts.extend(index.features)
    texts.extend(index.technologies)
    return texts


def matches_query(project: ProjectState, query: str | None) -> bool:
    """Case-insensitive substring match; an empty query matches everything."""
    if not query:
        return True
    needle = query.casefold()
    return any(needle in text.casefold() for text in searchable_text(project))

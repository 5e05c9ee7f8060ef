"""Project list index operations.

The index is a compact list of ``ProjectListEntry`` rows kept next to the
project records. Listing filters, sorts and slices the index, then hydrates
the surviving ids, so pagination never depends on backend query support.
These helpers are pure; each adapter decides where the entries live.
"""

from collections.abc import Callable, Iterable

from src.project_state.models.enums import SortDirection, SortField
from src.project_state.models.project import ProjectState
from src.project_state.schemas.pagination import ListProjectsOptions, ProjectListEntry

EntryFilter = Callable[[ProjectListEntry], bool]


def upsert_entry(entries: list[ProjectListEntry], project: ProjectState) -> list[ProjectListEntry]:
    """Return ``entries`` with the row for ``project`` inserted or replaced."""
    entry = ProjectListEntry.from_project(project)
    updated = [e for e in entries if e.id != project.id]
    updated.append(entry)
    return updated


def remove_entry(entries: list[ProjectListEntry], project_id: str) -> list[ProjectListEntry]:
    """Return ``entries`` without the row for ``project_id``."""
    return [e for e in entries if e.id != project_id]


def select_entries(
    entries: Iterable[ProjectListEntry],
    options: ListProjectsOptions,
    visible: EntryFilter | None = None,
) -> tuple[list[ProjectListEntry], int]:
    """Filter, sort and paginate index entries.

    Args:
        entries: All index rows.
        options: Filter, sort and page options.
        visible: Optional extra predicate (tenant visibility).

    Returns:
        Tuple of (page, total) where total counts filtered rows before slicing.
    """
    filtered = [e for e in entries if options.user_id is None or e.user_id == options.user_id]
    if visible is not None:
        filtered = [e for e in filtered if visible(e)]

    field = "created_at" if options.sort_by == SortField.CREATED_AT else "updated_at"
    reverse = options.sort_direction == SortDirection.DESC
    # Id as secondary key keeps pages stable when timestamps tie
    filtered.sort(key=lambda e: (getattr(e, field), e.id), reverse=reverse)

    total = len(filtered)
    start = options.offset
    end = start + options.limit if options.limit is not None else None
    return filtered[start:end], total

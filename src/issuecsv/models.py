from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ErrorInfo

DEFAULT_PROJECT = 'Default'


@dataclass(frozen=True)
class ImportRecord:
    """One CSV data row mapped onto the fields of a task to import.

    ``tags`` keeps the cell order and may contain duplicates; deduplication
    happens during reconciliation, not at parse time.
    """

    title: str
    project: str = DEFAULT_PROJECT
    description: str = ''
    tags: tuple[str, ...] = ()
    state: str = ''


@dataclass(frozen=True)
class Project:
    id: str
    title: str


@dataclass(frozen=True)
class Tag:
    id: str
    title: str
    color: str = ''
    parent_id: str | None = None

    @property
    def is_root(self) -> bool:
        return not self.parent_id


@dataclass(frozen=True)
class CreatedTask:
    task_id: str
    record: ImportRecord


@dataclass(frozen=True)
class ImportStats:
    total_tasks: int
    project_count: int
    tag_count: int

    def as_dict(self) -> dict[str, int]:
        return {
            'total_tasks': self.total_tasks,
            'project_count': self.project_count,
            'tag_count': self.tag_count,
        }


@dataclass
class ImportResult:
    """Outcome of a text-level import: either a created count or a classified failure."""

    ok: bool
    created: list[str] = field(default_factory=list)
    stats: ImportStats | None = None
    error: ErrorInfo | None = None

    @property
    def count(self) -> int:
        return len(self.created)


__all__ = [
    'DEFAULT_PROJECT',
    'ImportRecord',
    'Project',
    'Tag',
    'CreatedTask',
    'ImportStats',
    'ImportResult',
]

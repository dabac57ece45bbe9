from __future__ import annotations

from collections.abc import Iterable

from .models import ImportRecord, ImportStats


def calculate_stats(records: Iterable[ImportRecord]) -> ImportStats:
    """Count records, distinct projects and distinct free-form tags (state excluded)."""
    total = 0
    projects: set[str] = set()
    tags: set[str] = set()
    for record in records:
        total += 1
        projects.add(record.project)
        tags.update(record.tags)
    return ImportStats(total_tasks=total, project_count=len(projects), tag_count=len(tags))


__all__ = ['calculate_stats']

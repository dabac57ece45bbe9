"""Import reconciliation against a task store.

The store handles project, task and tag creation as independent calls with
no cross-entity transaction, so an import runs in four strictly ordered
phases:

1. group records by project and collect distinct states / free-form tags
2. resolve or create every project
3. create every task (untagged)
4. resolve or create state tags, then free-form tags, then attach them

Every store call is awaited before the next one is issued. Store failures
propagate unchanged; tasks created before a failure stay in the store
without their tags.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .colors import random_color
from .logging import get_logger
from .models import CreatedTask, ImportRecord, Project
from .store import Store
from .tags import TagKind, TagMatchPolicy, resolve_tags


@dataclass
class _Plan:
    groups: dict[str, list[ImportRecord]] = field(default_factory=dict)
    states: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


def _plan(records: Iterable[ImportRecord]) -> _Plan:
    plan = _Plan()
    states: dict[str, None] = {}
    tags: dict[str, None] = {}
    for record in records:
        plan.groups.setdefault(record.project, []).append(record)
        if record.state:
            states.setdefault(record.state)
        for tag in record.tags:
            tags.setdefault(tag)
    plan.states = list(states)
    plan.tags = list(tags)
    return plan


async def resolve_projects(
    names: Iterable[str],
    store: Store,
    *,
    rng: random.Random | None = None,
) -> dict[str, Project]:
    """Look up each project by exact title, creating the missing ones."""
    logger = get_logger()
    resolved: dict[str, Project] = {}
    for name in dict.fromkeys(names):
        projects = await store.list_projects()
        existing = next((p for p in projects if p.title == name), None)
        if existing is not None:
            resolved[name] = existing
            logger.log_entity('reused', 'project', name, existing.id)
            continue
        project_id = await store.create_project(name, random_color(rng), backlog_enabled=True)
        resolved[name] = Project(id=project_id, title=name)
        logger.log_entity('created', 'project', name, project_id)
    return resolved


def _tag_ids_for(record: ImportRecord, state_ids: dict[str, str], tag_ids: dict[str, str]) -> list[str]:
    ids: list[str] = []
    if record.state and record.state in state_ids:
        ids.append(state_ids[record.state])
    ids.extend(tag_ids[name] for name in record.tags if name in tag_ids)
    return ids


async def import_records(
    records: Sequence[ImportRecord],
    store: Store,
    *,
    policy: TagMatchPolicy | None = None,
    rng: random.Random | None = None,
) -> list[CreatedTask]:
    """Create projects, tasks and tags for ``records`` in dependency order.

    Returns the created tasks paired with the record each came from, in
    creation order (project group order, then record order).
    """
    logger = get_logger()
    plan = _plan(records)
    logger.log_operation(
        'import_plan',
        record_count=len(records),
        project_count=len(plan.groups),
        state_count=len(plan.states),
        tag_count=len(plan.tags),
    )

    with logger.timed_operation('resolve_projects'):
        projects = await resolve_projects(plan.groups, store, rng=rng)

    created: list[CreatedTask] = []
    with logger.timed_operation('create_tasks'):
        for project_name, group in plan.groups.items():
            project = projects[project_name]
            for record in group:
                notes = record.description if record.description.strip() else None
                task_id = await store.create_task(record.title, project.id, [], notes=notes)
                created.append(CreatedTask(task_id=task_id, record=record))

    with logger.timed_operation('attach_tags'):
        state_ids = await resolve_tags(plan.states, TagKind.STATE, store, policy=policy, rng=rng)
        tag_ids = await resolve_tags(plan.tags, TagKind.FREE, store, policy=policy, rng=rng)
        tagged = 0
        for task in created:
            ids = _tag_ids_for(task.record, state_ids, tag_ids)
            if ids:
                await store.update_task(task.task_id, ids)
                tagged += 1

    logger.log_operation(
        'import_complete',
        tasks_created=len(created),
        tasks_tagged=tagged,
        projects=len(projects),
        tags=len(state_ids) + len(tag_ids),
    )
    return created


__all__ = ['import_records', 'resolve_projects']

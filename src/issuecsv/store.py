"""Store capability surface and local bindings.

The reconciler only talks to the six async operations of ``Store``; any host
that satisfies them is interchangeable. Two local bindings live here:

* ``InMemoryStore`` - dictionary-backed, records every call in ``calls`` so
  tests can assert ordering. Also used for CLI previews.
* ``JsonFileStore`` - the in-memory store persisted to a JSON document after
  every mutation (temp file + atomic replace), so repeated imports reuse the
  projects and tags created by earlier runs.

``issuecsv.rest_store`` provides the HTTP binding.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from .errors import StoreError
from .logging import get_logger
from .models import Project, Tag


class Store(Protocol):  # pragma: no cover - interface only
    async def list_projects(self) -> list[Project]: ...

    async def create_project(self, title: str, color: str, backlog_enabled: bool = True) -> str: ...

    async def list_tags(self) -> list[Tag]: ...

    async def create_tag(self, title: str, color: str, theme: dict[str, Any]) -> str: ...

    async def create_task(
        self,
        title: str,
        project_id: str,
        tag_ids: list[str],
        notes: str | None = None,
    ) -> str: ...

    async def update_task(self, task_id: str, tag_ids: list[str]) -> None: ...


class InMemoryStore:
    def __init__(
        self,
        projects: Iterable[Project] = (),
        tags: Iterable[Tag] = (),
        *,
        fail_on: Iterable[str] = (),
    ) -> None:
        self.projects: list[Project] = list(projects)
        self.tags: list[Tag] = list(tags)
        self.tasks: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._fail_on = set(fail_on)
        self._counter = 0

    # ---------------- internal helpers ----------------
    def _new_id(self, prefix: str) -> str:
        self._counter += 1
        return f'{prefix}-{self._counter}'

    def _record(self, op: str, **payload: Any) -> None:
        self.calls.append((op, payload))
        if op in self._fail_on:
            raise StoreError(f'{op} failed', operation=op)

    def _changed(self) -> None:
        """Hook for subclasses that persist after each mutation."""

    def call_names(self) -> list[str]:
        return [op for op, _ in self.calls]

    # ---------------- store surface ----------------
    async def list_projects(self) -> list[Project]:
        self._record('list_projects')
        return list(self.projects)

    async def create_project(self, title: str, color: str, backlog_enabled: bool = True) -> str:
        self._record('create_project', title=title, color=color, backlog_enabled=backlog_enabled)
        project = Project(id=self._new_id('project'), title=title)
        self.projects.append(project)
        self._changed()
        return project.id

    async def list_tags(self) -> list[Tag]:
        self._record('list_tags')
        return list(self.tags)

    async def create_tag(self, title: str, color: str, theme: dict[str, Any]) -> str:
        self._record('create_tag', title=title, color=color, theme=theme)
        tag = Tag(id=self._new_id('tag'), title=title, color=color)
        self.tags.append(tag)
        self._changed()
        return tag.id

    async def create_task(
        self,
        title: str,
        project_id: str,
        tag_ids: list[str],
        notes: str | None = None,
    ) -> str:
        self._record('create_task', title=title, project_id=project_id, tag_ids=list(tag_ids), notes=notes)
        task_id = self._new_id('task')
        task: dict[str, Any] = {'id': task_id, 'title': title, 'project_id': project_id, 'tag_ids': list(tag_ids)}
        if notes is not None:
            task['notes'] = notes
        self.tasks[task_id] = task
        self._changed()
        return task_id

    async def update_task(self, task_id: str, tag_ids: list[str]) -> None:
        self._record('update_task', task_id=task_id, tag_ids=list(tag_ids))
        task = self.tasks.get(task_id)
        if task is None:
            raise StoreError(f'Unknown task {task_id}', operation='update_task')
        task['tag_ids'] = list(tag_ids)
        self._changed()


class JsonFileStore(InMemoryStore):
    VERSION = 1

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__()
        self._load()

    def _new_id(self, prefix: str) -> str:
        return f'{prefix}-{uuid.uuid4().hex[:12]}'

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            raw: Any = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f'Cannot read store document {self.path}: {exc}', operation='load') from exc
        if not isinstance(raw, dict):
            raise StoreError(f'Store document {self.path} must be a JSON object', operation='load')
        self.projects = [
            Project(id=str(p['id']), title=str(p['title']))
            for p in raw.get('projects') or []
            if isinstance(p, dict) and 'id' in p and 'title' in p
        ]
        self.tags = [
            Tag(
                id=str(t['id']),
                title=str(t['title']),
                color=str(t.get('color') or ''),
                parent_id=t.get('parent_id') or None,
            )
            for t in raw.get('tags') or []
            if isinstance(t, dict) and 'id' in t and 'title' in t
        ]
        tasks_raw = raw.get('tasks') or []
        self.tasks = {str(t['id']): dict(t) for t in tasks_raw if isinstance(t, dict) and 'id' in t}
        get_logger().debug(
            'Loaded store document',
            path=str(self.path),
            projects=len(self.projects),
            tags=len(self.tags),
            tasks=len(self.tasks),
        )

    def _changed(self) -> None:
        payload = {
            'version': self.VERSION,
            'projects': [{'id': p.id, 'title': p.title} for p in self.projects],
            'tags': [
                {'id': t.id, 'title': t.title, 'color': t.color, 'parent_id': t.parent_id}
                for t in self.tags
            ],
            'tasks': list(self.tasks.values()),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + '.tmp')
            tmp.write_text(json.dumps(payload, indent=2) + '\n', encoding='utf-8')
            tmp.replace(self.path)
        except OSError as exc:
            raise StoreError(f'Cannot write store document {self.path}: {exc}', operation='save') from exc


__all__ = ['Store', 'InMemoryStore', 'JsonFileStore']

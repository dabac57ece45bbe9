from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import StoreError
from .logging import get_logger
from .models import Project, Tag

USER_AGENT = "issuecsv-rest/0.1.0"
HTTP_ERROR_STATUS = 400


def _id_from(data: Any, operation: str) -> str:
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    raise StoreError(f"{operation} response carried no id", operation=operation)


@dataclass
class RestStore:
    """Store binding for a JSON REST task service.

    ``GET /projects`` and ``GET /tags`` must return the complete listing as a
    single JSON array; the service is expected not to paginate them. Any other
    body shape is a ``StoreError`` so an unreadable listing is never mistaken
    for an empty one.

    Blocking ``requests`` calls run in the default executor so the reconciler
    can await them; the reconciler never issues two at once.
    """

    base_url: str
    token: str | None = None
    timeout: float = 30.0
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        if self.token:
            self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    # ---- HTTP helpers -------------------------------------------------
    def _request_sync(self, method: str, path: str, json_body: Any | None = None) -> Any:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        get_logger().debug("store request", method=method, path=path)
        try:
            response = self._session.request(
                method,
                url,
                json=json_body,
                headers=self._session.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise StoreError(f"{method} {path} failed: {exc}", operation=f"{method} {path}") from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            raise StoreError(
                f"{method} {path} failed with {response.status_code}",
                operation=f"{method} {path}",
                status=response.status_code,
                response_text=response.text,
            )
        if not response.text:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(
                f"{method} {path} returned invalid JSON",
                operation=f"{method} {path}",
                status=response.status_code,
                response_text=response.text,
            ) from exc

    async def _request(self, method: str, path: str, json_body: Any | None = None) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self._request_sync, method, path, json_body)
        )

    async def _listing(self, path: str) -> list[Any]:
        data = await self._request("GET", path)
        if not isinstance(data, list):
            raise StoreError(
                f"GET {path} returned a non-list listing",
                operation=f"GET {path}",
                response_text=None if data is None else repr(data)[:500],
            )
        return data

    # ---- Store surface ------------------------------------------------
    async def list_projects(self) -> list[Project]:
        out: list[Project] = []
        for entry in await self._listing("/projects"):
            if isinstance(entry, dict) and "id" in entry and "title" in entry:
                out.append(Project(id=str(entry["id"]), title=str(entry["title"])))
        return out

    async def create_project(self, title: str, color: str, backlog_enabled: bool = True) -> str:
        payload = {"title": title, "theme": {"primary": color}, "is_enable_backlog": backlog_enabled}
        return _id_from(await self._request("POST", "/projects", payload), "create_project")

    async def list_tags(self) -> list[Tag]:
        out: list[Tag] = []
        for entry in await self._listing("/tags"):
            if isinstance(entry, dict) and "id" in entry and "title" in entry:
                parent = entry.get("parent_id")
                out.append(
                    Tag(
                        id=str(entry["id"]),
                        title=str(entry["title"]),
                        color=str(entry.get("color") or ""),
                        parent_id=str(parent) if parent else None,
                    )
                )
        return out

    async def create_tag(self, title: str, color: str, theme: dict[str, Any]) -> str:
        payload = {"title": title, "color": color, "theme": theme}
        return _id_from(await self._request("POST", "/tags", payload), "create_tag")

    async def create_task(
        self,
        title: str,
        project_id: str,
        tag_ids: list[str],
        notes: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {"title": title, "project_id": project_id, "tag_ids": list(tag_ids)}
        if notes is not None:
            payload["notes"] = notes
        return _id_from(await self._request("POST", "/tasks", payload), "create_task")

    async def update_task(self, task_id: str, tag_ids: list[str]) -> None:
        await self._request("PATCH", f"/tasks/{task_id}", {"tag_ids": list(tag_ids)})


__all__ = ["RestStore"]

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import pytest
import requests

from issuecsv.errors import StoreError
from issuecsv.models import ImportRecord
from issuecsv.reconcile import import_records
from issuecsv.rest_store import RestStore


@dataclass
class _DummyResponse:
    status_code: int
    payload: Any

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    @property
    def text(self) -> str:
        if self.payload is None:
            return ''
        if isinstance(self.payload, (dict, list)):
            return json.dumps(self.payload)
        return str(self.payload)


class _DummySession:
    def __init__(self, responses: list[Any]):
        self._responses = responses
        self.request_log: list[tuple[str, str, Any]] = []
        self.headers: dict[str, str] = {}

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        json: Any | None = None,
        timeout: float | None = None,
    ) -> _DummyResponse:
        self.request_log.append((method, url, json))
        if not self._responses:
            raise AssertionError('No response queued for request')
        nxt = self._responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _store(responses: list[Any]) -> tuple[RestStore, _DummySession]:
    session = _DummySession(responses)
    store = RestStore(base_url='https://tasks.example/api/', token='secret-token', session=session)  # type: ignore[arg-type]
    return store, session


def test_headers_include_bearer_token() -> None:
    _, session = _store([])
    assert session.headers['Authorization'] == 'Bearer secret-token'
    assert session.headers['Accept'] == 'application/json'


def test_list_tags_maps_parent_ids() -> None:
    store, session = _store(
        [_DummyResponse(200, [{'id': 1, 'title': 'bug', 'color': '#aaaaaa'}, {'id': 2, 'title': 'x', 'parent_id': 1}, {'bad': True}])]
    )
    tags = asyncio.run(store.list_tags())
    assert [(t.id, t.title, t.parent_id) for t in tags] == [('1', 'bug', None), ('2', 'x', '1')]
    assert session.request_log[0][:2] == ('GET', 'https://tasks.example/api/tags')


def test_full_import_over_http() -> None:
    store, session = _store(
        [
            _DummyResponse(200, []),  # GET /projects
            _DummyResponse(201, {'id': 'p1'}),  # POST /projects
            _DummyResponse(201, {'id': 't1'}),  # POST /tasks
            _DummyResponse(200, [{'id': 'open', 'title': 'Open'}]),  # GET /tags
            _DummyResponse(204, None),  # PATCH /tasks/t1
        ]
    )
    records = [ImportRecord(title='A', project='P', description='d', state='Open')]
    created = asyncio.run(import_records(records, store))
    assert [c.task_id for c in created] == ['t1']
    methods = [(m, u.rsplit('/api', 1)[1]) for m, u, _ in session.request_log]
    assert methods == [
        ('GET', '/projects'),
        ('POST', '/projects'),
        ('POST', '/tasks'),
        ('GET', '/tags'),
        ('PATCH', '/tasks/t1'),
    ]
    assert session.request_log[1][2]['is_enable_backlog'] is True
    assert session.request_log[2][2] == {'title': 'A', 'project_id': 'p1', 'tag_ids': [], 'notes': 'd'}
    assert session.request_log[4][2] == {'tag_ids': ['open']}


def test_http_error_raises_store_error() -> None:
    store, _ = _store([_DummyResponse(500, {'message': 'boom'})])
    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.list_projects())
    assert excinfo.value.status == 500
    assert 'boom' in (excinfo.value.response_text or '')


def test_transport_error_raises_store_error() -> None:
    store, _ = _store([requests.ConnectionError('connection refused')])
    with pytest.raises(StoreError, match='connection refused'):
        asyncio.run(store.list_tags())


def test_create_without_id_raises_store_error() -> None:
    store, _ = _store([_DummyResponse(201, {})])
    with pytest.raises(StoreError, match='no id'):
        asyncio.run(store.create_tag('x', '#777777', {}))


def test_invalid_json_raises_store_error() -> None:
    store, _ = _store([_DummyResponse(200, ValueError('bad json'))])
    with pytest.raises(StoreError, match='invalid JSON'):
        asyncio.run(store.list_projects())


def test_wrapped_listing_raises_store_error() -> None:
    store, session = _store([_DummyResponse(200, {'items': [{'id': 'p-existing', 'title': 'P'}]})])
    with pytest.raises(StoreError, match='non-list listing') as excinfo:
        asyncio.run(import_records([ImportRecord(title='A', project='P')], store))
    assert excinfo.value.operation == 'GET /projects'
    assert 'p-existing' in (excinfo.value.response_text or '')
    assert [m for m, _, _ in session.request_log] == ['GET']


def test_empty_tag_listing_body_raises_store_error() -> None:
    store, _ = _store([_DummyResponse(204, None)])
    with pytest.raises(StoreError, match='GET /tags returned a non-list listing'):
        asyncio.run(store.list_tags())

"""CSV parsing for issue-tracker exports.

The tokenizer is a two-state machine (unquoted / quoted) over a single
left-to-right scan with one character of lookahead. It is deliberately
tolerant: unterminated quotes run to end of input and ragged rows are kept.
"""

from __future__ import annotations

from enum import Enum
from typing import cast

from .errors import FormatError
from .models import DEFAULT_PROJECT, ImportRecord

BOM = '\ufeff'

COL_SUMMARY = 'Summary'
COL_PROJECT = 'Project'
COL_DESCRIPTION = 'Description'
COL_ISSUE_ID = 'Issue Id'
COL_TAGS = 'Tags'
COL_STATE = 'State'

REQUIRED_COLUMNS = (COL_SUMMARY, COL_PROJECT)
OPTIONAL_COLUMNS = (COL_DESCRIPTION, COL_ISSUE_ID, COL_TAGS, COL_STATE)


class _State(Enum):
    UNQUOTED = 'unquoted'
    QUOTED = 'quoted'


def split_rows(text: str) -> list[list[str]]:  # noqa: C901 - flat state machine reads best inline
    """Split CSV text into rows of raw field strings."""
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    state = _State.UNQUOTED
    i = 0
    n = len(text)

    def end_row() -> None:
        row.append(''.join(field))
        field.clear()
        if row:
            rows.append(list(row))
        row.clear()

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ''
        if state is _State.QUOTED:
            if ch == '"':
                if nxt == '"':
                    field.append('"')
                    i += 2
                    continue
                state = _State.UNQUOTED
            else:
                field.append(ch)
            i += 1
            continue
        if ch == '"':
            state = _State.QUOTED
        elif ch == ',':
            row.append(''.join(field))
            field.clear()
        elif ch == '\r' and nxt == '\n':
            end_row()
            i += 2
            continue
        elif ch in ('\n', '\r'):
            end_row()
        else:
            field.append(ch)
        i += 1

    if field or row:
        end_row()
    return rows


def _column_index(headers: list[str], name: str) -> int | None:
    try:
        return headers.index(name)
    except ValueError:
        return None


def _cell(values: list[str], index: int | None) -> str:
    if index is None or index >= len(values):
        return ''
    return values[index]


def split_tags(cell: str) -> tuple[str, ...]:
    return tuple(piece.strip() for piece in cell.split(',') if piece.strip())


def parse_csv(text: str, *, default_project: str = DEFAULT_PROJECT) -> list[ImportRecord]:
    """Parse an issue-tracker CSV export into import records.

    Raises FormatError when fewer than two rows are present or when the
    Summary / Project header columns are missing.
    """
    if text.startswith(BOM):
        text = text[1:]
    rows = split_rows(text)
    if len(rows) < 2:  # noqa: PLR2004
        raise FormatError('CSV file is empty or has no data rows')

    headers = rows[0]
    index = {name: _column_index(headers, name) for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}
    missing = [name for name in REQUIRED_COLUMNS if index[name] is None]
    if missing:
        raise FormatError(f'Missing required columns: {", ".join(missing)}')

    summary_idx = cast(int, index[COL_SUMMARY])

    records: list[ImportRecord] = []
    for values in rows[1:]:
        if len(values) <= summary_idx:
            continue
        issue_id = _cell(values, index[COL_ISSUE_ID])
        summary = _cell(values, summary_idx)
        title = f'{issue_id} - {summary}' if issue_id else summary
        if not title.strip():
            continue
        records.append(
            ImportRecord(
                title=title,
                project=_cell(values, index[COL_PROJECT]) or default_project,
                description=_cell(values, index[COL_DESCRIPTION]),
                tags=split_tags(_cell(values, index[COL_TAGS])),
                state=_cell(values, index[COL_STATE]),
            )
        )
    return records


__all__ = ['split_rows', 'split_tags', 'parse_csv', 'FormatError']

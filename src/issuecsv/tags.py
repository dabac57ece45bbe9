"""Tag resolution against the store's flat, root-level tag namespace.

State tags (from the workflow ``State`` column) and free-form tags (from the
``Tags`` column) are resolved in separate passes but land in the same store.
A name is matched against existing root tags by exact title; when nothing
matches, a ``TagMatchPolicy`` gets a chance to map it onto an existing tag
before a new one is created.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Protocol

from .colors import random_color, tag_theme
from .logging import get_logger
from .models import Tag
from .store import Store

IN_PROGRESS = 'in progress'


class TagKind(Enum):
    STATE = 'state'
    FREE = 'free'


class TagMatchPolicy(Protocol):  # pragma: no cover - interface only
    def fallback(self, name: str, kind: TagKind, existing: Sequence[Tag]) -> str | None: ...


class ExactMatchPolicy:
    def fallback(self, name: str, kind: TagKind, existing: Sequence[Tag]) -> str | None:
        return None


class InProgressDefaultPolicy:
    """Reuse a host-seeded "In Progress" root tag regardless of case.

    Hosts ship a default in-progress tag whose casing rarely matches the
    tracker's workflow state, which would otherwise produce a near-duplicate.
    Only state-kind names are considered.
    """

    def fallback(self, name: str, kind: TagKind, existing: Sequence[Tag]) -> str | None:
        if kind is not TagKind.STATE or name.lower() != IN_PROGRESS:
            return None
        for tag in existing:
            if tag.is_root and tag.title.lower() == IN_PROGRESS:
                return tag.id
        return None


DEFAULT_POLICY: TagMatchPolicy = InProgressDefaultPolicy()


def _find_root(existing: Sequence[Tag], name: str) -> Tag | None:
    for tag in existing:
        if tag.title == name and tag.is_root:
            return tag
    return None


async def resolve_tags(
    names: Iterable[str],
    kind: TagKind,
    store: Store,
    *,
    policy: TagMatchPolicy | None = None,
    rng: random.Random | None = None,
) -> dict[str, str]:
    """Map each tag name to a store tag id, creating root tags as needed."""
    unique = list(dict.fromkeys(names))
    if not unique:
        return {}
    policy = policy or DEFAULT_POLICY
    logger = get_logger()
    existing = list(await store.list_tags())
    resolved: dict[str, str] = {}
    for name in unique:
        match = _find_root(existing, name)
        if match is not None:
            resolved[name] = match.id
            logger.log_entity('reused', f'{kind.value}_tag', name, match.id)
            continue
        fallback_id = policy.fallback(name, kind, existing)
        if fallback_id is not None:
            resolved[name] = fallback_id
            logger.log_entity('matched', f'{kind.value}_tag', name, fallback_id)
            continue
        color = random_color(rng)
        tag_id = await store.create_tag(name, color, tag_theme(color))
        existing.append(Tag(id=tag_id, title=name, color=color))
        resolved[name] = tag_id
        logger.log_entity('created', f'{kind.value}_tag', name, tag_id)
    return resolved


__all__ = [
    'TagKind',
    'TagMatchPolicy',
    'ExactMatchPolicy',
    'InProgressDefaultPolicy',
    'DEFAULT_POLICY',
    'resolve_tags',
]

import random
import re

from issuecsv.colors import CHANNEL_MAX, CHANNEL_MIN, random_color, tag_theme
from issuecsv.models import ImportRecord
from issuecsv.stats import calculate_stats

COLOR_RE = re.compile(r'^#[0-9a-f]{6}$')


def test_stats_for_reference_records() -> None:
    records = [
        ImportRecord(title='A-1 - Fix bug', project='P1', tags=('bug', 'ui'), state='Open'),
        ImportRecord(title='A-2 - Feature', project='P1', tags=(), state='Open'),
    ]
    stats = calculate_stats(records)
    assert stats.as_dict() == {'total_tasks': 2, 'project_count': 1, 'tag_count': 2}


def test_stats_excludes_state_and_counts_distinct() -> None:
    records = [
        ImportRecord(title='a', project='P1', tags=('x', 'x'), state='Done'),
        ImportRecord(title='b', project='P2', tags=('y',), state='Open'),
        ImportRecord(title='c', project='P1', tags=('x',)),
    ]
    stats = calculate_stats(records)
    assert (stats.total_tasks, stats.project_count, stats.tag_count) == (3, 2, 2)


def test_stats_accepts_generators_and_empty() -> None:
    assert calculate_stats(iter([])).as_dict() == {'total_tasks': 0, 'project_count': 0, 'tag_count': 0}


def test_random_color_pattern_and_range() -> None:
    rng = random.Random(1234)
    for _ in range(500):
        color = random_color(rng)
        assert COLOR_RE.match(color)
        channels = [int(color[i : i + 2], 16) for i in (1, 3, 5)]
        assert all(CHANNEL_MIN <= c <= CHANNEL_MAX for c in channels)


def test_random_color_hits_channel_bounds() -> None:
    class _Edge:
        def __init__(self, pick: str) -> None:
            self.pick = pick

        def randint(self, a: int, b: int) -> int:
            return a if self.pick == 'low' else b

    assert random_color(_Edge('low')) == '#373737'  # type: ignore[arg-type]
    assert random_color(_Edge('high')) == '#ffffff'  # type: ignore[arg-type]


def test_tag_theme_is_auto_contrast() -> None:
    assert tag_theme('#abcdef') == {'primary': '#abcdef', 'is_auto_contrast': True}

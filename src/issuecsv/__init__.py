"""issuecsv - import issue-tracker CSV exports as tasks.

High-level public API:

from issuecsv import parse_csv, calculate_stats, import_csv, InMemoryStore

records = parse_csv(text)
print(calculate_stats(records))
result = asyncio.run(import_csv(text, store))
print(result.count)

``import_records`` imports already-parsed records; ``resolve_tags`` and
``resolve_projects`` expose the individual reconciliation steps.
"""

from __future__ import annotations

from .config import ImporterConfig, load_config
from .errors import ConfigError, FormatError, StoreError
from .models import CreatedTask, ImportRecord, ImportResult, ImportStats, Project, Tag
from .parser import parse_csv
from .reconcile import import_records, resolve_projects
from .runtime import import_csv, preview_csv
from .stats import calculate_stats
from .store import InMemoryStore, JsonFileStore, Store
from .tags import TagKind, resolve_tags

__version__ = "0.1.0"

__all__ = [
    "parse_csv",
    "calculate_stats",
    "import_csv",
    "import_records",
    "preview_csv",
    "resolve_projects",
    "resolve_tags",
    "TagKind",
    "ImportRecord",
    "ImportResult",
    "ImportStats",
    "CreatedTask",
    "Project",
    "Tag",
    "Store",
    "InMemoryStore",
    "JsonFileStore",
    "ImporterConfig",
    "load_config",
    "FormatError",
    "StoreError",
    "ConfigError",
    "__version__",
]

"""Caller-facing entry points and CLI orchestration helpers."""

from __future__ import annotations

import os
import random
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from .config import TOKEN_ENV, ImporterConfig, load_config, load_env
from .errors import ConfigError, FormatError, StoreError, classify_error
from .logging import get_logger
from .models import DEFAULT_PROJECT, ImportRecord, ImportResult, ImportStats
from .parser import parse_csv
from .reconcile import import_records
from .rest_store import RestStore
from .stats import calculate_stats
from .store import InMemoryStore, JsonFileStore, Store
from .tags import ExactMatchPolicy, InProgressDefaultPolicy, TagMatchPolicy

CONFIG_DEFAULT = 'issuecsv.config.yaml'


def preview_csv(text: str, *, default_project: str = DEFAULT_PROJECT) -> tuple[list[ImportRecord], ImportStats]:
    records = parse_csv(text, default_project=default_project)
    return records, calculate_stats(records)


async def import_csv(
    text: str,
    store: Store,
    *,
    default_project: str = DEFAULT_PROJECT,
    policy: TagMatchPolicy | None = None,
    rng: random.Random | None = None,
) -> ImportResult:
    """Parse CSV text and import it, reporting failures as a classified result.

    A file with no usable data rows is a successful no-op: the store is not
    touched and a warning is logged.
    """
    logger = get_logger()
    try:
        records, stats = preview_csv(text, default_project=default_project)
    except FormatError as exc:
        info = classify_error(exc)
        logger.log_error('CSV rejected', error=info.message)
        return ImportResult(ok=False, error=info)
    if not records:
        logger.warning('No tasks found in CSV; nothing to import')
        return ImportResult(ok=True, stats=stats)
    try:
        created = await import_records(records, store, policy=policy, rng=rng)
    except StoreError as exc:
        info = classify_error(exc)
        logger.log_error('Import aborted by store failure', error=info.message, category=info.category)
        return ImportResult(ok=False, stats=stats, error=info)
    return ImportResult(ok=True, created=[t.task_id for t in created], stats=stats)


def policy_for(cfg: ImporterConfig) -> TagMatchPolicy:
    return InProgressDefaultPolicy() if cfg.in_progress_fallback else ExactMatchPolicy()


def build_store(cfg: ImporterConfig) -> Store:
    if cfg.store_backend == 'memory':
        return InMemoryStore()
    if cfg.store_backend == 'rest':
        if not cfg.store_base_url:
            raise ConfigError('A base URL is required for the rest store')
        return RestStore(base_url=cfg.store_base_url, token=cfg.store_token, timeout=cfg.store_timeout)
    return JsonFileStore(cfg.store_path)


def prepare_config(
    args: Any, *, loader: Callable[[str], ImporterConfig] = load_config
) -> ImporterConfig:
    """Load config for the argparse namespace and apply command-line overrides.

    The default config file is optional; an explicitly named one must exist.
    Without a config file, a ``.env`` in the working directory is still loaded.
    The store token comes from ``--token``, then the config file, then
    ``ISSUECSV_TOKEN``.
    """
    config_path = getattr(args, 'config', None)
    if config_path and (config_path != CONFIG_DEFAULT or Path(config_path).exists()):
        cfg = loader(config_path)
    else:
        cfg = ImporterConfig()
        load_env(cfg, Path.cwd())
    backend = getattr(args, 'store', None)
    if backend:
        cfg.store_backend = backend
    store_path = getattr(args, 'store_path', None)
    if store_path:
        cfg.store_path = Path(store_path)
    base_url = getattr(args, 'base_url', None)
    if base_url:
        cfg.store_base_url = base_url
    token = getattr(args, 'token', None)
    if token:
        cfg.store_token = token
    elif not cfg.store_token:
        cfg.store_token = os.getenv(TOKEN_ENV) or None
    return cfg


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def execute_command(handler: _HandlerCallable, command: str) -> int:
    """Run a command handler, logging its duration and exit code."""
    logger = get_logger()
    start = time.monotonic()
    exit_code = 1
    try:
        result = handler()
        exit_code = int(result) if result is not None else 0
    finally:
        duration_ms = max(0.0, time.monotonic() - start) * 1000
        logger.debug('command finished', command=command, exit_code=exit_code, duration_ms=round(duration_ms, 2))
    return exit_code


__all__ = [
    'CONFIG_DEFAULT',
    'preview_csv',
    'import_csv',
    'policy_for',
    'build_store',
    'prepare_config',
    'execute_command',
]

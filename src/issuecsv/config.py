from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import DEFAULT_PROJECT

STORE_BACKENDS = ('memory', 'json', 'rest')
DEFAULT_STORE_PATH = '.issuecsv_store.json'
# consulted when neither the config file nor --token supplies one
TOKEN_ENV = 'ISSUECSV_TOKEN'


@dataclass
class ImporterConfig:
    # Store configuration
    store_backend: str = 'json'
    store_path: Path = Path(DEFAULT_STORE_PATH)
    store_base_url: str | None = None
    store_token: str | None = None
    store_timeout: float = 30.0
    # Import behaviour
    default_project: str = DEFAULT_PROJECT
    in_progress_fallback: bool = True
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = 'INFO'
    # Environment
    env_load_dotenv: bool = True
    env_dotenv_path: str | None = None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)
    return value


def load_env(cfg: ImporterConfig, base: Path) -> None:
    if not cfg.env_load_dotenv:
        return
    dotenv_path = base / (cfg.env_dotenv_path or '.env')
    if dotenv_path.exists():
        load_dotenv(dotenv_path)


def load_config(path: str | Path) -> ImporterConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        raw_any = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(raw_any, dict):
        raise ConfigError(f'Configuration in {p} must be a mapping')
    raw = cast(dict[str, Any], raw_any)
    store = cast(dict[str, Any], raw.get('store', {}) or {})
    behavior = cast(dict[str, Any], raw.get('import', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    env = cast(dict[str, Any], raw.get('environment', {}) or {})

    level = logging_config.get('level', 'INFO')
    if not isinstance(level, str):
        raise ConfigError(f'logging.level must be a level name such as INFO, got {level!r}')

    backend = str(store.get('backend', 'json'))
    if backend not in STORE_BACKENDS:
        raise ConfigError(f'Unknown store backend {backend!r}; expected one of {", ".join(STORE_BACKENDS)}')

    cfg = ImporterConfig(
        store_backend=backend,
        store_path=p.parent / store.get('path', DEFAULT_STORE_PATH),
        store_base_url=store.get('base_url'),
        store_timeout=float(store.get('timeout', 30)),
        default_project=str(behavior.get('default_project', DEFAULT_PROJECT)),
        in_progress_fallback=bool(behavior.get('in_progress_fallback', True)),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=level,
        env_load_dotenv=bool(env.get('load_dotenv', True)),
        env_dotenv_path=env.get('dotenv_path'),
    )
    # .env must be loaded before $VAR references are resolved
    load_env(cfg, p.parent)
    token = _resolve_env_var(store.get('token'))
    cfg.store_token = token if token and not str(token).startswith('$') else None
    if cfg.store_backend == 'rest' and not cfg.store_base_url:
        raise ConfigError('store.base_url is required for the rest backend')
    return cfg


__all__ = ['ImporterConfig', 'load_config', 'load_env', 'ConfigError', 'STORE_BACKENDS', 'TOKEN_ENV']

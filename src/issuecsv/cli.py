"""issuecsv CLI.

Subcommands:
  preview -> parse a CSV export and show stats plus the first records
  import  -> parse and import into the configured store
  tags    -> list root-level tags in the configured store
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

from issuecsv.config import STORE_BACKENDS, ImporterConfig
from issuecsv.errors import ConfigError, FormatError, StoreError, classify_error
from issuecsv.logging import configure_logging
from issuecsv.runtime import (
    CONFIG_DEFAULT,
    build_store,
    execute_command,
    import_csv,
    policy_for,
    prepare_config,
    preview_csv,
)
from issuecsv.ux import print_error, print_success, print_summary_box, print_warning, swatch

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _add_store_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=CONFIG_DEFAULT)
    p.add_argument("--store", choices=STORE_BACKENDS, help="Override the configured store backend")
    p.add_argument("--store-path", help="JSON store document (json backend)")
    p.add_argument("--base-url", help="Service base URL (rest backend)")
    p.add_argument("--token", help="Service API token (rest backend; env: ISSUECSV_TOKEN)")


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="issuecsv", description="Import issue-tracker CSV exports as tasks"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational logging (env: ISSUECSV_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pv = sub.add_parser("preview", help="Parse a CSV export without importing")
    pv.add_argument("--input", required=True, help="CSV export file")
    pv.add_argument("--config", default=CONFIG_DEFAULT)
    pv.add_argument("--limit", type=int, default=20)
    pv.add_argument("--json", action="store_true", help="Emit records and stats as JSON")

    imp = sub.add_parser("import", help="Import a CSV export into the store")
    imp.add_argument("--input", required=True, help="CSV export file")
    imp.add_argument("--json", action="store_true", help="Emit the import result as JSON")
    _add_store_options(imp)

    tg = sub.add_parser("tags", help="List root-level tags in the store")
    _add_store_options(tg)

    return p


def _read_input(path: str) -> str:
    # newline="" keeps CR/CRLF inside quoted fields; the parser strips the BOM itself
    with Path(path).open(encoding="utf-8", newline="") as fh:
        return fh.read()


def _cmd_preview(cfg: ImporterConfig, args: argparse.Namespace) -> int:
    records, stats = preview_csv(_read_input(args.input), default_project=cfg.default_project)
    if args.json:
        doc = {
            "stats": stats.as_dict(),
            "records": [
                {
                    "title": r.title,
                    "project": r.project,
                    "description": r.description,
                    "tags": list(r.tags),
                    "state": r.state,
                }
                for r in records[: args.limit]
            ],
        }
        sys.stdout.write(json.dumps(doc, indent=2) + "\n")
        return 0
    print_summary_box(
        f"Preview of {args.input}",
        [
            ("tasks", stats.total_tasks),
            ("projects", stats.project_count),
            ("tags", stats.tag_count),
        ],
    )
    for r in records[: args.limit]:
        extras = ", ".join(([r.state] if r.state else []) + list(r.tags))
        print(f"  [{r.project}] {r.title[:70]}" + (f"  ({extras})" if extras else ""))
    if len(records) > args.limit:
        print(f"  ... ({len(records) - args.limit} more)")
    if not records:
        print_warning("No tasks found in CSV")
    return 0


def _cmd_import(cfg: ImporterConfig, args: argparse.Namespace) -> int:
    text = _read_input(args.input)
    store = build_store(cfg)
    result = asyncio.run(
        import_csv(text, store, default_project=cfg.default_project, policy=policy_for(cfg))
    )
    if args.json:
        doc: dict[str, Any] = {
            "ok": result.ok,
            "count": result.count,
            "created": result.created,
            "stats": result.stats.as_dict() if result.stats else None,
            "error": result.error.as_dict() if result.error else None,
        }
        sys.stdout.write(json.dumps(doc, indent=2) + "\n")
        return 0 if result.ok else 1
    if result.error is not None:
        print_error(f"Import failed [{result.error.category}]: {result.error.message}")
        return 1
    if result.count == 0:
        print_warning("No tasks found in CSV; nothing imported")
        return 0
    print_success(f"Imported {result.count} tasks")
    return 0


def _cmd_tags(cfg: ImporterConfig, args: argparse.Namespace) -> int:
    store = build_store(cfg)
    tags = asyncio.run(store.list_tags())
    roots = [t for t in tags if t.is_root]
    for tag in sorted(roots, key=lambda t: t.title.lower()):
        print(f"  {swatch(tag.color) if tag.color else '-':<8} {tag.title}  (id={tag.id})")
    print(f"[tags] {len(roots)} root tags")
    return 0


def _build_handlers(args: argparse.Namespace, cfg: ImporterConfig) -> dict[str, Any]:
    return {
        "preview": lambda: _cmd_preview(cfg, args),
        "import": lambda: _cmd_import(cfg, args),
        "tags": lambda: _cmd_tags(cfg, args),
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.quiet and os.environ.get("ISSUECSV_QUIET") == "1":
        args.quiet = True
    try:
        cfg = prepare_config(args)
    except ConfigError as exc:
        print_error(str(exc))
        return 1
    level = cfg.logging_level
    if getattr(args, "json", False):
        # keep stdout machine-readable
        level = "CRITICAL"
    elif args.quiet:
        level = "WARNING"
    configure_logging(json_logging=cfg.logging_json_enabled, level=level)
    handler = _build_handlers(args, cfg).get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    try:
        return execute_command(handler, args.cmd)
    except FileNotFoundError as exc:
        print_error(f"File not found: {exc.filename}")
        return 1
    except (FormatError, StoreError, ConfigError) as exc:
        info = classify_error(exc)
        print_error(f"[{info.category}] {info.message}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

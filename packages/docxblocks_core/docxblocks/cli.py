"""
Command-line interface for docxblocks.

Usage:
    docxblocks render template.docx job.json --output out.docx
    docxblocks variables template.docx
    docxblocks info template.docx [--json]
    docxblocks version
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from . import __version__
from .config import DEFAULT_CONFIG, load_config
from .exceptions import DocxBlocksError
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)

JOB_KEYS = ("blocks", "rows", "images", "checkboxes", "values")
IMAGE_KEYS = ("path", "name", "extension", "mime_type", "max_width", "max_height")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="docxblocks",
        description="docxblocks - DOCX template blocks, rows and images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Job file (JSON), all keys optional, applied in this order:
  {"blocks": {"item": 3},
   "rows": {"name": ["Ann", "Bob"]},
   "images": {"logo": {"path": "logo.png", "max_width": 120, "max_height": 60}},
   "checkboxes": {"agree": true},
   "values": {"item#1": "First"}}

Examples:
  docxblocks render template.docx job.json -o out.docx
  docxblocks variables template.docx
  docxblocks info template.docx --json
        """,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    render_parser = subparsers.add_parser("render", help="Apply a JSON job to a template")
    render_parser.add_argument("input", help="Template DOCX file")
    render_parser.add_argument("job", help="JSON job file")
    render_parser.add_argument("-o", "--output", required=True, help="Output DOCX file")
    render_parser.add_argument("--config", help="JSON configuration file")
    render_parser.add_argument("--seed", type=int, help="Seed for generated ids (reproducible output)")

    variables_parser = subparsers.add_parser("variables", help="List template placeholders")
    variables_parser.add_argument("input", help="Template DOCX file")

    info_parser = subparsers.add_parser("info", help="Show package parts and manifests")
    info_parser.add_argument("input", help="DOCX file")
    info_parser.add_argument("--json", action="store_true", help="Output as JSON")

    subparsers.add_parser("version", help="Show version information")

    return parser


def _image_options(entry: Any, base_dir: Path) -> Dict[str, Any]:
    if isinstance(entry, str):
        entry = {"path": entry}
    if not isinstance(entry, dict) or "path" not in entry:
        raise DocxBlocksError("Invalid image entry in job", repr(entry))
    unknown = sorted(set(entry) - set(IMAGE_KEYS))
    if unknown:
        raise DocxBlocksError("Unknown image options", ", ".join(unknown))
    if not isinstance(entry["path"], str):
        raise DocxBlocksError("Image path must be a string", repr(entry["path"]))
    for bound in ("max_width", "max_height"):
        value = entry.get(bound)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise DocxBlocksError(f"Image {bound} must be a number", repr(value))

    options = dict(entry)
    path = Path(options.pop("path"))
    options["file_path"] = path if path.is_absolute() else base_dir / path
    return options


def _section(job: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = job.get(key, {})
    if not isinstance(section, dict):
        raise DocxBlocksError(f"Job section '{key}' must be an object", type(section).__name__)
    return section


def _block_count(name: str, count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise DocxBlocksError(f"Invalid clone count for block '{name}'", repr(count))
    return count


def apply_job(template: Any, job: Dict[str, Any], base_dir: Path) -> None:
    """
    Apply a job description to a TemplateProcessor.

    The whole job is validated before the template is touched.

    Args:
        template: TemplateProcessor to modify
        job: Parsed job file
        base_dir: Directory that relative image paths resolve against

    Raises:
        DocxBlocksError: Unknown keys or malformed sections
    """
    unknown = sorted(set(job) - set(JOB_KEYS))
    if unknown:
        raise DocxBlocksError("Unknown job keys", ", ".join(unknown))

    blocks = {name: _block_count(name, count) for name, count in _section(job, "blocks").items()}
    rows = _section(job, "rows")
    images = {name: _image_options(entry, base_dir) for name, entry in _section(job, "images").items()}
    checkboxes = _section(job, "checkboxes")
    values = _section(job, "values")

    for name, count in blocks.items():
        if template.clone_block(name, count) is None:
            logger.warning(f"Block '{name}' not found")

    for name, row_values in rows.items():
        template.set_value_break_line(name, row_values)

    for name, options in images.items():
        template.set_image(name, **options)

    for name, checked in checkboxes.items():
        template.set_checkbox(name, bool(checked))

    for name, value in values.items():
        template.set_value(name, value)


def cmd_render(args) -> int:
    """Handle render command."""
    from .engine import TemplateProcessor

    input_path = Path(args.input)
    job_path = Path(args.job)
    for path in (input_path, job_path):
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1

    try:
        with open(job_path, "r", encoding="utf-8") as f:
            job = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in job file {job_path}: {e}", file=sys.stderr)
        return 1
    if not isinstance(job, dict):
        print(f"Error: Job file must contain a JSON object: {job_path}", file=sys.stderr)
        return 1

    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    rng = random.Random(args.seed) if args.seed is not None else None

    template = TemplateProcessor(input_path, config=config, rng=rng)
    apply_job(template, job, job_path.parent)
    output_path = template.save_as(args.output)

    print(f"Saved: {output_path}")
    return 0


def cmd_variables(args) -> int:
    """Handle variables command."""
    from .engine import BaseTemplateProcessor

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    for name in BaseTemplateProcessor(input_path).get_variables():
        print(name)
    return 0


def _collect_info(input_path: Path) -> Dict[str, Any]:
    from .parser import PackageReader, RelationshipsParser

    resolver = RelationshipsParser()
    with PackageReader(input_path) as reader:
        parts = reader.get_part_names()
        relationships = [dict(rel) for rel in reader.get_relationships().values()]
        content_types = reader.get_content_types()
        media = {name: len(reader.get_binary_content(name)) for name in reader.get_media_files()}

    for rel in relationships:
        if rel["target_mode"] != "External":
            rel["part"] = resolver.resolve_relationship_target(rel["target"], "word/document.xml")

    defaults: Dict[str, str] = {
        key[2:]: value for key, value in content_types.items() if key.startswith("*.")
    }
    return {
        "file": str(input_path),
        "size_bytes": input_path.stat().st_size,
        "parts": parts,
        "relationships": relationships,
        "media": media,
        "default_content_types": defaults,
    }


def cmd_info(args, console: Optional[Console] = None) -> int:
    """Handle info command."""
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    info = _collect_info(input_path)
    if args.json:
        print(json.dumps(info, indent=2, ensure_ascii=False))
        return 0

    console = console or Console()
    console.print(f"File: {info['file']} ({info['size_bytes']:,} bytes)")

    parts_table = Table(title="Parts")
    parts_table.add_column("Part", style="cyan")
    for part in info["parts"]:
        parts_table.add_row(part)
    console.print(parts_table)

    rels_table = Table(title="Document relationships")
    for column in ("Id", "Type", "Target"):
        rels_table.add_column(column)
    rows: List[Dict[str, str]] = info["relationships"]
    for rel in rows:
        rels_table.add_row(rel["id"], rel["type"].rsplit("/", 1)[-1], rel["target"])
    console.print(rels_table)

    if info["media"]:
        media_table = Table(title="Media")
        media_table.add_column("Part", style="cyan")
        media_table.add_column("Bytes", justify="right")
        for name, size in info["media"].items():
            media_table.add_row(name, f"{size:,}")
        console.print(media_table)

    types_table = Table(title="Default content types")
    types_table.add_column("Extension", style="cyan")
    types_table.add_column("Content type")
    for extension, content_type in sorted(info["default_content_types"].items()):
        types_table.add_row(extension, content_type)
    console.print(types_table)
    return 0


def cmd_version(args=None) -> int:
    """Handle version command."""
    print(f"docxblocks v{__version__}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    commands = {
        "render": cmd_render,
        "variables": cmd_variables,
        "info": cmd_info,
        "version": cmd_version,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except DocxBlocksError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())

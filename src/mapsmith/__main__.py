"""Command-line entry point for mapsmith.

Provides a Typer CLI for inspecting and exercising record mappings without
writing a script:

1.  ``inspect`` prints the resolved key table of a record class: each key,
    the field kind, the attribute that backs it, and whether it sits behind
    a lazily allocated container.
2.  ``convert`` reads a JSON object, loads it into a fresh instance of the
    record class via ``tagged_from_map`` and prints ``tagged_to_map`` of the
    result, i.e. the object as seen through the record's view.

Record classes are addressed as ``MODULE:CLASS`` (``pkg.models:Customer``).
"""
from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from dotenv import find_dotenv, load_dotenv

# Load .env before any settings access so MAPSMITH_* values apply.
_env_file = find_dotenv(usecwd=True)
if _env_file:
    load_dotenv(_env_file)

from .config import get_settings
from .errors import MappingError
from .fields import is_record_type, new_instance
from .mapper import tagged_from_map, tagged_to_map
from .mapping import LazyCatchAll, LazyField, get_mappings

app = typer.Typer(help="mapsmith record/map conversion CLI")


def _load_record_type(target: str) -> type:
    """Import ``MODULE:CLASS`` and check that it names a record class."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"expected MODULE:CLASS, got {target!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"cannot import module {module_name!r}: {e}") from e
    for part in attr_path.split("."):
        if not hasattr(obj, part):
            raise typer.BadParameter(f"{module_name!r} has no attribute {attr_path!r}")
        obj = getattr(obj, part)
    if not is_record_type(obj):
        raise typer.BadParameter(f"{target} is not a dataclass or pydantic model")
    return obj


def _setup() -> str:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    return settings.DEFAULT_TAG


@app.callback()
def main() -> None:  # pragma: no cover - simple callback
    """mapsmith CLI.

    Use 'inspect' or 'convert' with a MODULE:CLASS record reference.
    """


@app.command("inspect", help="Print the resolved key table of a record class.")
def inspect_record(
    target: str = typer.Argument(..., help="Record class as MODULE:CLASS"),
    name_tag: Optional[str] = typer.Option(
        None, help="Metadata scheme for names and flags (defaults to MAPSMITH_DEFAULT_TAG)"
    ),
    filter_tag: str = typer.Option("", help="Scheme a field must carry (defaults to --name-tag)"),
) -> None:
    default_tag = _setup()
    record = new_instance(_load_record_type(target))
    info = get_mappings(record, name_tag or default_tag, filter_tag)
    for key in sorted(info.fields):
        adapter = info.fields[key]
        lazy = " (lazy)" if isinstance(adapter, LazyField) else ""
        typer.echo(f"{key}\t{adapter.kind.value}\t{adapter.name}{lazy}")
    if info.extra is not None:
        lazy = " (lazy)" if isinstance(info.extra, LazyCatchAll) else ""
        typer.echo(f"*\tcatch-all{lazy}")


@app.command(help="Load a JSON object into a record class and print its mapped view.")
def convert(
    target: str = typer.Argument(..., help="Record class as MODULE:CLASS"),
    input_path: str = typer.Argument("-", help="JSON file to read ('-' for stdin)"),
    name_tag: Optional[str] = typer.Option(
        None, help="Metadata scheme for names and flags (defaults to MAPSMITH_DEFAULT_TAG)"
    ),
    filter_tag: str = typer.Option("", help="Scheme a field must carry (defaults to --name-tag)"),
    strict: Optional[bool] = typer.Option(
        None,
        "--strict/--no-strict",
        help="Fail on unsettable fields, kind mismatches and unmatched keys. Defaults to MAPSMITH_STRICT.",
    ),
) -> None:
    default_tag = _setup()
    record_type = _load_record_type(target)
    tag = name_tag or default_tag
    try:
        text = sys.stdin.read() if input_path == "-" else Path(input_path).read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"Cannot read input: {e}", err=True)
        raise typer.Exit(code=1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        typer.echo(f"Invalid JSON input: {e}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(data, dict):
        typer.echo("Input must be a JSON object", err=True)
        raise typer.Exit(code=1)

    try:
        record = tagged_from_map(data, new_instance(record_type), tag, filter_tag, strict=strict)
        result = tagged_to_map(record, tag, filter_tag)
    except MappingError as e:
        logging.getLogger(__name__).debug("Conversion of %s failed", target, exc_info=True)
        typer.echo(f"Conversion failed: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result, indent=2, sort_keys=True, default=str))


if __name__ == "__main__":  # pragma: no cover
    app()

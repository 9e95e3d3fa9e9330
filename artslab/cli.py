"""
CLI interface for the artslab gallery.

Usage:
    artslab list
    artslab search "starry night"
    artslab add --id 42 --title "Ophelia" --artist "Millais" --image-url https://...
    artslab delete 42
"""

import asyncio
import inspect
import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional

import typer
from typing_extensions import Annotated

from .api import Artslab
from .config import get_store_path
from .editor import apply_image_files, apply_metadata, build_record
from .errors import RecordValidationError
from .logging_config import configure_ops_log, configure_quiet_mode, enable_debug_mode
from .types import Partition, Record


# Configure quiet mode by default (suppress verbose library output)
# Set ARTSLAB_VERBOSE=1 to enable debug mode via environment
if os.environ.get("ARTSLAB_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"artslab {version('artslab')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_store_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _store_callback(value: Optional[Path]):
    global _store_override
    _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


app = typer.Typer(
    name="artslab",
    help="Art gallery store with museum-backed search.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar="ARTSLAB_STORE_PATH",
        help="Path to the store directory (default: ~/.artslab/)",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """Art gallery store with museum-backed search."""


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

PartitionOption = Annotated[
    Partition,
    typer.Option(
        "--partition", "-p",
        help="Record partition (user or cache)",
    )
]


def _get_lab() -> Artslab:
    """Open the store at the configured path."""
    return Artslab(get_store_path(_get_store_override()))


def _with_lab(action: Callable[[Artslab], object]):
    """Run an action (sync or async) against an open store, then close it."""
    async def _main():
        lab = _get_lab()
        ops_handler = None
        if lab.config.medium != "memory":
            ops_handler = configure_ops_log(lab.config.path)
        try:
            result = action(lab)
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            await lab.aclose()
            if ops_handler is not None:
                logging.getLogger("artslab").removeHandler(ops_handler)
                ops_handler.close()
    return asyncio.run(_main())


def _format_records(records: list[Record], as_json: bool = False) -> str:
    if as_json:
        return json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)
    if not records:
        return "No records."
    return "\n".join(str(r) for r in records)


def _echo_records(records: list[Record]) -> None:
    typer.echo(_format_records(records, as_json=_get_json_output()))


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command("list")
def list_records(
    partition: Annotated[Optional[Partition], typer.Option(
        "--partition", "-p",
        help="Only this partition (default: user then cache)",
    )] = None,
):
    """List stored records."""
    def action(lab: Artslab):
        if partition is None:
            return lab.visible_records()
        return lab.load(partition)
    _echo_records(_with_lab(action))


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search terms; quote phrases")],
):
    """Search user records and the museum collection (cache as fallback)."""
    _echo_records(_with_lab(lambda lab: lab.search(query)))


@app.command()
def warm(
    seed: Annotated[Optional[str], typer.Option(
        "--seed",
        help="Query used to fill the cache (default from config)",
    )] = None,
):
    """Fill the cache from the museum collection if it is empty."""
    count = _with_lab(lambda lab: lab.populate_cache_if_empty(seed))
    if count:
        typer.echo(f"Cached {count} records.")
    else:
        typer.echo("Cache unchanged.")


@app.command()
def add(
    id: Annotated[str, typer.Option("--id", help="Unique record ID")],
    title: Annotated[str, typer.Option("--title", help="Art title")],
    artist: Annotated[str, typer.Option("--artist", help="Artist name")],
    image_url: Annotated[str, typer.Option("--image-url", help="Image URL")],
    year: Annotated[Optional[str], typer.Option("--year", help="Year")] = None,
    medium: Annotated[Optional[str], typer.Option("--medium", help="Medium")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Description")] = None,
):
    """Add a user record. Refuses an ID that already exists."""
    try:
        record = build_record(
            id, title, artist, image_url,
            year=year, medium=medium, description=description,
        )
    except RecordValidationError as e:
        _fail(str(e))

    def action(lab: Artslab):
        if lab.find(Partition.USER, record.id) is not None:
            return None
        return lab.put(Partition.USER, record)

    stored = _with_lab(action)
    if stored is None:
        _fail(f"Record with ID {record.id} already exists")
    _echo_records([stored])


@app.command()
def edit(
    id: Annotated[str, typer.Argument(help="ID of the record to edit")],
    title: Annotated[Optional[str], typer.Option("--title", help="Art title")] = None,
    artist: Annotated[Optional[str], typer.Option("--artist", help="Artist name")] = None,
    image_url: Annotated[Optional[str], typer.Option("--image-url", help="Image URL")] = None,
    year: Annotated[Optional[str], typer.Option("--year", help="Year")] = None,
    medium: Annotated[Optional[str], typer.Option("--medium", help="Medium")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Description")] = None,
):
    """Replace fields of a record; the result is saved as a user record."""
    def action(lab: Artslab):
        current = lab.find(Partition.USER, id) or lab.find(Partition.CACHE, id)
        if current is None:
            return None
        record = build_record(
            current.id,
            title if title is not None else current.title,
            artist if artist is not None else current.artist,
            image_url if image_url is not None else current.image_url,
            year=year if year is not None else current.year,
            medium=medium if medium is not None else current.medium,
            description=description if description is not None else current.description,
        )
        return lab.put(Partition.USER, record)

    try:
        stored = _with_lab(action)
    except RecordValidationError as e:
        _fail(str(e))
    if stored is None:
        _fail(f"No record with ID {id}")
    _echo_records([stored])


@app.command("set-meta")
def set_meta(
    id: Annotated[str, typer.Argument(help="ID of the user record")],
    new_id: Annotated[Optional[str], typer.Option("--new-id", help="Reassign the record ID")] = None,
    year: Annotated[Optional[str], typer.Option("--year", help="Year")] = None,
):
    """Change a user record's ID and/or year."""
    def action(lab: Artslab):
        current = lab.find(Partition.USER, id)
        if current is None:
            return None
        updated = apply_metadata(
            current,
            new_id if new_id is not None else current.id,
            year if year is not None else current.year,
        )
        if updated.id != current.id:
            lab.delete(Partition.USER, current.id)
        return lab.put(Partition.USER, updated)

    stored = _with_lab(action)
    if stored is None:
        _fail(f"No user record with ID {id}")
    _echo_records([stored])


@app.command("set-image")
def set_image(
    id: Annotated[str, typer.Argument(help="ID of the user record")],
    image: Annotated[Path, typer.Argument(help="Image file to embed")],
    thumbnail: Annotated[Optional[Path], typer.Option(
        "--thumbnail", help="Thumbnail file (default: the image itself)",
    )] = None,
):
    """Embed an image file (and optional thumbnail) into a user record."""
    missing = object()

    async def action(lab: Artslab):
        current = lab.find(Partition.USER, id)
        if current is None:
            return missing
        updated = await apply_image_files(current, image, thumbnail)
        if updated is None:
            return None
        return lab.put(Partition.USER, updated)

    stored = _with_lab(action)
    if stored is missing:
        _fail(f"No user record with ID {id}")
    if stored is None:
        _fail("Failed to read image file; record unchanged")
    _echo_records([stored])


@app.command()
def delete(
    id: Annotated[str, typer.Argument(help="ID of the record to delete")],
    partition: PartitionOption = Partition.USER,
):
    """Delete a record from a partition."""
    def action(lab: Artslab):
        if lab.find(partition, id) is None:
            return False
        lab.delete(partition, id)
        return True

    if not _with_lab(action):
        _fail(f"No record with ID {id} in {partition.value}")
    typer.echo(f"Deleted {id} from {partition.value}")


@app.command()
def clear(
    partition: PartitionOption = Partition.CACHE,
):
    """Remove every record in a partition."""
    _with_lab(lambda lab: lab.clear(partition))
    typer.echo(f"Cleared {partition.value}")


def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="artslab CLI", store_path=_get_store_override())
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()

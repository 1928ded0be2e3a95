"""acdat CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .errors import DatError

FILE_TYPES = {"texture": "TEXTURE", "unknown": "UNKNOWN"}


@click.group(context_settings={"auto_envvar_prefix": "ACDAT"})
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """acdat - Read legacy game-client DAT archives.

    \b
    Reads the database header, walks the directory tree into a catalog
    of file records, and decodes texture/icon payloads.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(archive: Path):
    """Show the database header of an archive."""
    from .dat import DatArchive

    try:
        with DatArchive(archive) as dat:
            header = dat.header
            click.echo(f"Archive:     {archive}")
            click.echo(f"File type:   {header.file_type}")
            click.echo(f"Block size:  {header.block_size}")
            click.echo(f"File size:   {header.file_size}")
            click.echo(f"Data set:    {header.data_set}.{header.data_subset}")
            click.echo(f"Tree root:   0x{header.tree_root_offset:08X}")
            click.echo(f"Free list:   head=0x{header.free_head:08X} count={header.free_count}")
            click.echo(f"Versions:    engine={header.engine_pack_version} game={header.game_pack_version}")
            click.echo(f"Version:     {header.version_major.hex()} / {header.version_minor}")

    except (DatError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command(name="list")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type",
    "file_type",
    type=click.Choice(sorted(FILE_TYPES)),
    help="Only list files of this type",
)
@click.option("--limit", type=int, help="Stop after this many files")
def list_files(archive: Path, file_type: Optional[str], limit: Optional[int]):
    """List the files in an archive, in catalog order."""
    from .dat import DatArchive, DatFileType

    try:
        with DatArchive(archive) as dat:
            shown = 0
            for index, record in enumerate(dat.catalog):
                if file_type and record.file_type != DatFileType[FILE_TYPES[file_type]]:
                    continue
                if limit is not None and shown >= limit:
                    break
                click.echo(
                    f"{index:6d}  0x{record.object_id:08X}  offset=0x{record.file_offset:08X}"
                    f"  size={record.file_size:<8d} {record.file_type.name.lower()}"
                )
                shown += 1

            click.echo(f"\nFiles: {shown} of {len(dat.catalog)}")

    except (DatError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("object_id")
def show(archive: Path, object_id: str):
    """Decode one asset by object id.

    OBJECT_ID may be decimal or hex, absolute or relative to 0x06000000.
    For example 0x6957, 0x06006957, 26967 and 100690263 are the same id.
    """
    from .dat import DatArchive
    from .utils.ids import parse_object_id

    try:
        resolved = parse_object_id(object_id)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="OBJECT_ID")

    try:
        with DatArchive(archive) as dat:
            record = dat.catalog.by_id(resolved)
            if record is None:
                click.echo(f"Error: no file with id 0x{resolved:08X}", err=True)
                sys.exit(1)

            payload = dat.decode_asset(record)
            click.echo(f"Id:      0x{record.object_id:08X}")
            click.echo(f"Form:    {payload.form}")
            click.echo(f"Size:    {payload.width}x{payload.height}")
            click.echo(f"Format:  {payload.format}")
            click.echo(f"Length:  {payload.length}")
            click.echo(f"Icon:    {'yes' if payload.is_icon else 'no'}")

    except (DatError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <archive_name>_extracted)",
)
@click.option(
    "--type",
    "file_type",
    type=click.Choice(sorted(FILE_TYPES)),
    default="texture",
    show_default=True,
    help="Only extract files of this type",
)
def extract(archive: Path, output: Optional[Path], file_type: str):
    """Extract raw asset payloads from an archive.

    Each decoded payload is written as <index>_<object id>.bin, where
    index is the file's position in the catalog. Files that fail to
    decode are skipped and reported.
    """
    from .dat import DatArchive, DatFileType

    if output is None:
        output = archive.parent / f"{archive.stem}_extracted"

    click.echo(f"Opening: {archive}")

    try:
        with DatArchive(archive) as dat:
            click.echo(f"Output:  {output}")
            click.echo()

            output.mkdir(parents=True, exist_ok=True)
            extracted_count = 0
            for index, record, payload in dat.iter_assets(DatFileType[FILE_TYPES[file_type]]):
                out_path = output / f"{index:06d}_{record.object_id:08X}.bin"
                out_path.write_bytes(payload.data)
                extracted_count += 1

            click.echo(f"Extracted: {extracted_count} files")
            if dat.skipped:
                click.echo(f"Skipped:   {len(dat.skipped)} files")
                for index, record, error in dat.skipped:
                    click.echo(f"  {index:6d}  0x{record.object_id:08X}  {error}")

    except (DatError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Index database (default: <archive_name>_index.sqlite)",
)
def index(archive: Path, output: Optional[Path]):
    """Build a SQLite index of an archive's files.

    Writes the files, file_types and file_subtypes tables. Textures that
    decode as 32x32 payloads get the Icon subtype.
    """
    import sqlite3

    from .dat import DatArchive, write_index

    if output is None:
        output = archive.parent / f"{archive.stem}_index.sqlite"

    try:
        with DatArchive(archive) as dat:
            count = write_index(dat, output)
            click.echo(f"Index:   {output}")
            click.echo(f"Indexed: {count} files")
            if dat.skipped:
                click.echo(f"Skipped: {len(dat.skipped)} textures")

    except (DatError, OSError, sqlite3.Error) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

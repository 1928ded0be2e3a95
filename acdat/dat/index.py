"""SQLite index of an archive's catalog."""

import logging
import sqlite3
from pathlib import Path
from typing import Union

from .header import DatFileSubtype, DatFileType
from .reader import DatArchive

logger = logging.getLogger(__name__)

SCHEMA = (
    "DROP TABLE IF EXISTS file_types",
    """
    CREATE TABLE file_types (
        id INTEGER NOT NULL,
        name TEXT NOT NULL
    )
    """,
    "DROP TABLE IF EXISTS file_subtypes",
    """
    CREATE TABLE file_subtypes (
        id INTEGER NOT NULL,
        file_type_id INTEGER,
        name TEXT NOT NULL
    )
    """,
    "DROP TABLE IF EXISTS files",
    """
    CREATE TABLE files (
        id INTEGER NOT NULL,
        type INTEGER NOT NULL,
        subtype INTEGER,
        offset INTEGER NOT NULL,
        extra_info JSON
    )
    """,
)


def _migrate(connection: sqlite3.Connection) -> None:
    for statement in SCHEMA:
        connection.execute(statement)


def _seed(connection: sqlite3.Connection) -> None:
    connection.executemany(
        "INSERT INTO file_types VALUES (?, ?)",
        [(file_type.value, file_type.name.title()) for file_type in DatFileType],
    )
    connection.execute(
        "INSERT INTO file_subtypes VALUES (?, ?, ?)",
        (DatFileSubtype.ICON.value, DatFileType.TEXTURE.value, "Icon"),
    )


def write_index(dat: DatArchive, db_path: Union[Path, str]) -> int:
    """Write the catalog of an open archive to a SQLite database.

    Existing index tables in the database are replaced. Textures are
    decoded to find icons; those that fail to decode are recorded in
    ``dat.skipped`` and indexed with an unknown subtype.

    Returns the number of files indexed.
    """
    icons = {
        index
        for index, _, payload in dat.iter_assets(DatFileType.TEXTURE)
        if payload.is_icon
    }
    rows = [
        (
            record.object_id,
            record.file_type.value,
            (DatFileSubtype.ICON if index in icons else DatFileSubtype.UNKNOWN).value,
            record.file_offset,
        )
        for index, record in enumerate(dat.catalog)
    ]

    connection = sqlite3.connect(str(db_path))
    try:
        with connection:
            _migrate(connection)
            _seed(connection)
            connection.executemany(
                "INSERT INTO files (id, type, subtype, offset) VALUES (?, ?, ?, ?)",
                rows,
            )
    finally:
        connection.close()

    logger.info("Indexed %d files (%d icons) into %s", len(rows), len(icons), db_path)
    return len(rows)

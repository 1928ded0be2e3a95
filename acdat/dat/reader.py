"""DAT archive reader."""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import DatError
from ..formats.texture import AssetPayload, decode_asset
from ..utils.binary import ByteSource, open_archive
from .catalog import Catalog
from .directory import DirectoryNode, load_directory
from .header import DatabaseHeader, DatFileType, FileRecord
from .sector import SectorChainReader

logger = logging.getLogger(__name__)


class DatArchive:
    """Reader for DAT archives.

    Owns the archive's ByteSource for the lifetime of the context manager.
    Records that fail to decode in ``iter_assets`` are collected in
    ``skipped`` as ``(index, record, error)`` instead of aborting the walk.
    """

    def __init__(self, path: Union[Path, str], max_depth: Optional[int] = None):
        self.path = Path(path)
        self.max_depth = max_depth
        self.skipped: List[Tuple[int, FileRecord, DatError]] = []
        self._source: Optional[ByteSource] = None
        self._header: Optional[DatabaseHeader] = None
        self._root: Optional[DirectoryNode] = None
        self._catalog: Optional[Catalog] = None

    def __enter__(self) -> "DatArchive":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the archive and parse its header.

        Reopening releases the previous handle and drops the cached tree.
        """
        self.close()
        self._root = None
        self._catalog = None
        self._source = open_archive(self.path)
        try:
            self._header = DatabaseHeader.parse(self._source)
        except Exception:
            self.close()
            raise
        logger.info(
            "Opened %s: block_size=%d tree_root=0x%X",
            self.path,
            self._header.block_size,
            self._header.tree_root_offset,
        )

    def close(self) -> None:
        """Close the archive file."""
        if self._source:
            self._source.close()
            self._source = None

    @property
    def source(self) -> ByteSource:
        if not self._source:
            raise RuntimeError("Archive not opened")
        return self._source

    @property
    def header(self) -> DatabaseHeader:
        if not self._header:
            raise RuntimeError("Archive not opened")
        return self._header

    @property
    def root(self) -> DirectoryNode:
        """Directory tree, loaded on first access."""
        if self._root is None:
            self._root = load_directory(
                self.source,
                self.header.tree_root_offset,
                self.header.block_size,
                self.max_depth,
            )
        return self._root

    @property
    def catalog(self) -> Catalog:
        if self._catalog is None:
            self._catalog = Catalog.from_tree(self.root)
            logger.info("Loaded catalog of %d files from %s", len(self._catalog), self.path)
        return self._catalog

    def read_file(self, record: FileRecord) -> bytes:
        """Read a file's contents by following its sector chain."""
        if record.file_size == 0:
            return b""
        chain = SectorChainReader(self.source, self.header.block_size)
        return chain.read(record.file_offset, record.file_size)

    def decode_asset(self, record: FileRecord) -> AssetPayload:
        """Decode the asset payload of a single record."""
        return decode_asset(self.source, record.file_offset)

    def iter_assets(
        self, file_type: Optional[DatFileType] = None
    ) -> Iterator[Tuple[int, FileRecord, AssetPayload]]:
        """Decode catalog records, skipping and recording the ones that fail.

        Yields (catalog_index, record, payload) for each decoded record.
        """
        for index, record in enumerate(self.catalog):
            if file_type is not None and record.file_type != file_type:
                continue
            try:
                payload = self.decode_asset(record)
            except DatError as e:
                logger.warning(
                    "Skipping file %d (0x%08X): %s", index, record.object_id, e
                )
                self.skipped.append((index, record, e))
                continue
            yield index, record, payload

"""DAT archive structures and reader."""

from .catalog import Catalog, flatten
from .directory import DirectoryNode, InternalNode, LeafNode, load_directory
from .header import DatabaseHeader, DatFileSubtype, DatFileType, FileRecord
from .index import write_index
from .reader import DatArchive
from .sector import SectorChainReader, read_chain

__all__ = [
    "Catalog",
    "flatten",
    "DirectoryNode",
    "InternalNode",
    "LeafNode",
    "load_directory",
    "DatabaseHeader",
    "DatFileSubtype",
    "DatFileType",
    "FileRecord",
    "DatArchive",
    "SectorChainReader",
    "read_chain",
    "write_index",
]

"""Flattened view of the directory tree."""

from typing import Dict, Iterator, List, Optional, Sequence

from .directory import DirectoryNode
from .header import ITERATION_FILE_ID, DatFileType, FileRecord


def flatten(root: DirectoryNode) -> List[FileRecord]:
    """List every record in the tree, each node's subtrees before its own entries."""
    records: List[FileRecord] = []
    for child in root.children:
        records.extend(flatten(child))
    records.extend(root.entries)
    return records


class Catalog:
    """Ordered list of file records with lookup by object id.

    Positions are stable for a given archive, so callers can name exports by
    catalog index.
    """

    def __init__(self, records: Sequence[FileRecord]):
        self._records: List[FileRecord] = list(records)
        self._by_id: Optional[Dict[int, FileRecord]] = None

    @classmethod
    def from_tree(cls, root: DirectoryNode) -> "Catalog":
        return cls(flatten(root))

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> FileRecord:
        return self._records[index]

    @property
    def records(self) -> List[FileRecord]:
        return list(self._records)

    def by_id(self, object_id: int) -> Optional[FileRecord]:
        """Find a record by object id."""
        if self._by_id is None:
            self._by_id = {record.object_id: record for record in self._records}
        return self._by_id.get(object_id)

    def of_type(self, file_type: DatFileType) -> List[FileRecord]:
        return [record for record in self._records if record.file_type == file_type]

    def iteration_record(self) -> Optional[FileRecord]:
        """Return the record holding the archive's iteration data, if present."""
        return self.by_id(ITERATION_FILE_ID)

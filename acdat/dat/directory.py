"""Directory tree of a DAT archive.

The directory is a B-tree with a fanout of 62. Each node is a 1716-byte
logical record stored in a sector chain:

- 62 x u32 branch offsets (0 = absent)
- 1 x u32 entry count (0..61)
- 61 x 24-byte file records, of which the first ``entry_count`` are live

A node whose first branch is zero is a leaf. Any other node has exactly
``entry_count + 1`` children, stored in the first branches.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Set, Tuple

from ..errors import CorruptHeaderError, CycleOrTooDeepError, MalformedTreeError
from ..utils.binary import BinaryReader, ByteSource
from .header import (
    DIRECTORY_BRANCH_COUNT,
    DIRECTORY_MAX_ENTRIES,
    DIRECTORY_NODE_SIZE,
    FileRecord,
)
from .sector import SectorChainReader

logger = logging.getLogger(__name__)

# Extra levels allowed beyond the height a full tree of this archive could reach
DEPTH_SLACK = 8


@dataclass(frozen=True)
class DirectoryNode:
    """One node of the directory tree."""

    offset: int
    branches: Tuple[int, ...]
    entries: Tuple[FileRecord, ...]

    @property
    def is_leaf(self) -> bool:
        return True

    @property
    def children(self) -> Tuple["DirectoryNode", ...]:
        return ()

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @classmethod
    def load(
        cls,
        source: ByteSource,
        offset: int,
        block_size: int,
        max_depth: Optional[int] = None,
    ) -> "DirectoryNode":
        return load_directory(source, offset, block_size, max_depth)


@dataclass(frozen=True)
class LeafNode(DirectoryNode):
    """Node with no subtrees."""


@dataclass(frozen=True)
class InternalNode(DirectoryNode):
    """Node owning ``entry_count + 1`` subtrees."""

    subtrees: Tuple[DirectoryNode, ...]

    @property
    def is_leaf(self) -> bool:
        return False

    @property
    def children(self) -> Tuple[DirectoryNode, ...]:
        return self.subtrees


def parse_node_record(data: bytes) -> Tuple[Tuple[int, ...], Tuple[FileRecord, ...]]:
    """Split a logical node record into branch offsets and live entries."""
    reader = BinaryReader(data)
    branches = reader.read_u32_array(DIRECTORY_BRANCH_COUNT)
    entry_count = reader.read_u32()
    if entry_count > DIRECTORY_MAX_ENTRIES:
        raise MalformedTreeError(
            f"Entry count {entry_count} exceeds maximum of {DIRECTORY_MAX_ENTRIES}"
        )
    entries = tuple(FileRecord.unpack(reader) for _ in range(entry_count))
    return branches, entries


def default_max_depth(archive_size: int, block_size: int) -> int:
    """Deepest level a well-formed tree in an archive of this size can reach."""
    sectors = max(1, archive_size // max(1, block_size))
    depth = 1
    capacity = DIRECTORY_BRANCH_COUNT + 1
    while capacity < sectors:
        capacity *= DIRECTORY_BRANCH_COUNT + 1
        depth += 1
    return depth + DEPTH_SLACK


class _TreeLoader:
    """Depth-first loader guarding against cycles and runaway depth."""

    def __init__(self, source: ByteSource, block_size: int, max_depth: int):
        self._chain = SectorChainReader(source, block_size)
        self._max_depth = max_depth
        self._visited: Set[int] = set()

    def load(self, offset: int, depth: int = 0) -> DirectoryNode:
        if depth > self._max_depth:
            raise CycleOrTooDeepError(
                f"Directory depth exceeds {self._max_depth} at node 0x{offset:X}"
            )
        if offset in self._visited:
            raise CycleOrTooDeepError(f"Directory node 0x{offset:X} reached twice")
        self._visited.add(offset)

        branches, entries = parse_node_record(self._chain.read(offset, DIRECTORY_NODE_SIZE))

        if branches[0] == 0:
            logger.debug("Leaf node 0x%X: %d entries", offset, len(entries))
            return LeafNode(offset=offset, branches=branches, entries=entries)

        if not entries:
            raise CorruptHeaderError(
                f"Node 0x{offset:X} has branches but no entries"
            )

        logger.debug(
            "Internal node 0x%X: %d entries, %d children",
            offset,
            len(entries),
            len(entries) + 1,
        )
        subtrees = []
        for index in range(len(entries) + 1):
            child_offset = branches[index]
            if child_offset == 0:
                raise MalformedTreeError(
                    f"Node 0x{offset:X} is missing branch {index} of {len(entries) + 1}"
                )
            subtrees.append(self.load(child_offset, depth + 1))

        return InternalNode(
            offset=offset, branches=branches, entries=entries, subtrees=tuple(subtrees)
        )


def load_directory(
    source: ByteSource,
    offset: int,
    block_size: int,
    max_depth: Optional[int] = None,
) -> DirectoryNode:
    """Load the directory subtree rooted at ``offset``."""
    if max_depth is None:
        max_depth = default_max_depth(source.size, block_size)
    return _TreeLoader(source, block_size, max_depth).load(offset)

"""DAT database header and directory record structures."""

from dataclasses import dataclass
from enum import IntEnum

from ..utils.binary import BinaryReader, ByteSource

# Absolute offset of the database header
DAT_HEADER_OFFSET = 0x140
DAT_HEADER_SIZE = 80  # 15 x u32, 16-byte version blob, 1 x u32

# Directory node layout
DIRECTORY_BRANCH_COUNT = 62
DIRECTORY_MAX_ENTRIES = 61
FILE_RECORD_SIZE = 24  # 6 x u32
DIRECTORY_NODE_SIZE = (
    DIRECTORY_BRANCH_COUNT * 4 + 4 + DIRECTORY_MAX_ENTRIES * FILE_RECORD_SIZE
)  # 0x6B4 == 1716

# Every sector starts with a pointer to the next one
SECTOR_POINTER_SIZE = 4

ITERATION_FILE_ID = 0xFFFF0001


class DatFileType(IntEnum):
    """Asset families, keyed by the top byte of the object id."""

    UNKNOWN = 0
    TEXTURE = 1

    @classmethod
    def from_object_id(cls, object_id: int) -> "DatFileType":
        if object_id & 0xFF000000 == 0x06000000:
            return cls.TEXTURE
        return cls.UNKNOWN


class DatFileSubtype(IntEnum):
    """Finer classification found by decoding a file's payload."""

    UNKNOWN = 0
    ICON = 1


@dataclass(frozen=True)
class DatabaseHeader:
    """DAT database header (80 bytes at 0x140)."""

    file_type: int
    block_size: int  # Sector size including the 4-byte chain pointer
    file_size: int
    data_set: int
    data_subset: int
    free_head: int
    free_tail: int
    free_count: int
    tree_root_offset: int  # "BTree": sector offset of the root directory node
    new_lru: int
    old_lru: int
    use_lru: bool
    master_map_id: int
    engine_pack_version: int
    game_pack_version: int
    version_major: bytes  # 16 opaque bytes
    version_minor: int

    @classmethod
    def parse(cls, source: ByteSource) -> "DatabaseHeader":
        """Parse the header from the fixed offset of an archive."""
        reader = BinaryReader(source.read(DAT_HEADER_OFFSET, DAT_HEADER_SIZE))

        file_type = reader.read_u32()
        block_size = reader.read_u32()
        file_size = reader.read_u32()
        data_set = reader.read_u32()
        data_subset = reader.read_u32()
        free_head = reader.read_u32()
        free_tail = reader.read_u32()
        free_count = reader.read_u32()
        tree_root_offset = reader.read_u32()
        new_lru = reader.read_u32()
        old_lru = reader.read_u32()
        use_lru = reader.read_u32() != 0
        master_map_id = reader.read_u32()
        engine_pack_version = reader.read_u32()
        game_pack_version = reader.read_u32()
        version_major = reader.read_bytes(16)
        version_minor = reader.read_u32()

        return cls(
            file_type=file_type,
            block_size=block_size,
            file_size=file_size,
            data_set=data_set,
            data_subset=data_subset,
            free_head=free_head,
            free_tail=free_tail,
            free_count=free_count,
            tree_root_offset=tree_root_offset,
            new_lru=new_lru,
            old_lru=old_lru,
            use_lru=use_lru,
            master_map_id=master_map_id,
            engine_pack_version=engine_pack_version,
            game_pack_version=game_pack_version,
            version_major=version_major,
            version_minor=version_minor,
        )


@dataclass(frozen=True)
class FileRecord:
    """Directory entry describing one file (24 bytes)."""

    bit_flags: int
    object_id: int
    file_offset: int  # Sector offset of the file contents
    file_size: int
    timestamp: int
    iteration: int

    @classmethod
    def unpack(cls, reader: BinaryReader) -> "FileRecord":
        bit_flags, object_id, file_offset, file_size, timestamp, iteration = (
            reader.read_u32_array(6)
        )
        return cls(
            bit_flags=bit_flags,
            object_id=object_id,
            file_offset=file_offset,
            file_size=file_size,
            timestamp=timestamp,
            iteration=iteration,
        )

    @property
    def file_type(self) -> DatFileType:
        return DatFileType.from_object_id(self.object_id)

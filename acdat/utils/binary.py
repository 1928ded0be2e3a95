"""Binary reading utilities for little-endian DAT data."""

import struct
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..errors import TruncatedInputError


class BinaryReader:
    """Helper for reading little-endian binary data."""

    def __init__(self, data: Union[bytes, bytearray, BinaryIO]):
        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(data)
        else:
            self._stream = data

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise TruncatedInputError(f"Expected {size} bytes, got {len(data)}")
        return data

    def read_u8(self) -> int:
        return struct.unpack("<B", self.read_bytes(1))[0]

    def read_u16(self) -> int:
        return struct.unpack("<H", self.read_bytes(2))[0]

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_bytes(4))[0]

    def read_u32_array(self, count: int) -> tuple:
        """Read ``count`` consecutive little-endian u32 values."""
        return struct.unpack(f"<{count}I", self.read_bytes(4 * count))


class ByteSource:
    """Positioned, bounds-checked reads over an archive file or buffer.

    A path is opened lazily on the first read and released by ``close()``,
    after which the source cannot be read again.
    Buffers and caller-supplied streams are used as-is; a caller-supplied
    stream is not closed by ``close()``.
    """

    def __init__(self, data: Union[bytes, bytearray, BinaryIO, Path, str]):
        self.path: Optional[Path] = None
        self._stream: Optional[BinaryIO] = None
        self._owns_stream = False
        self._released = False
        self._size: Optional[int] = None

        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(bytes(data))
        elif isinstance(data, (str, Path)):
            self.path = Path(data)
        else:
            self._stream = data

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._stream is None

    def _ensure_open(self) -> BinaryIO:
        if self._stream is None:
            if self.path is None or self._released:
                raise ValueError("ByteSource is closed")
            self._stream = open(self.path, "rb")
            self._owns_stream = True
        return self._stream

    def close(self) -> None:
        """Release the underlying file if this source opened it."""
        if self.path is not None:
            self._released = True
        if self._stream is not None and self._owns_stream:
            self._stream.close()
            self._stream = None
            self._owns_stream = False

    @property
    def size(self) -> int:
        """Total number of bytes in the source."""
        if self._size is None:
            stream = self._ensure_open()
            current = stream.tell()
            self._size = stream.seek(0, 2)
            stream.seek(current)
        return self._size

    def read(self, offset: int, length: int) -> bytes:
        """Read exactly ``length`` bytes starting at ``offset``."""
        if offset < 0 or length < 0:
            raise ValueError(f"Invalid read: offset={offset} length={length}")
        stream = self._ensure_open()
        stream.seek(offset)
        data = stream.read(length)
        if len(data) < length:
            raise TruncatedInputError(
                f"Expected {length} bytes at offset 0x{offset:X}, got {len(data)}"
            )
        return data

    def read_u8(self, offset: int) -> int:
        return self.read(offset, 1)[0]

    def read_u16(self, offset: int) -> int:
        return struct.unpack("<H", self.read(offset, 2))[0]

    def read_u32(self, offset: int) -> int:
        return struct.unpack("<I", self.read(offset, 4))[0]

    def cursor(self, offset: int) -> BinaryReader:
        """Return a sequential reader positioned at ``offset``."""
        stream = self._ensure_open()
        stream.seek(offset)
        return BinaryReader(stream)


def open_archive(path: Union[Path, str]) -> ByteSource:
    """Open a DAT archive on disk as a ByteSource."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Archive not found: {path}")
    return ByteSource(path)

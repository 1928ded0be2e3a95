"""Sector chain reassembly.

Records larger than one sector are stored as a chain of ``block_size``
sectors. Every sector begins with the offset of the next sector in the chain,
followed by ``block_size - 4`` payload bytes. Once fewer than ``block_size``
bytes remain, the rest is read directly after the current sector's pointer
slot and the chain ends there; that last pointer is never followed.
"""

import logging

from ..errors import InvalidChainError
from ..utils.binary import ByteSource
from .header import SECTOR_POINTER_SIZE

logger = logging.getLogger(__name__)


class SectorChainReader:
    """Reassembles logical records from chained sectors of one archive."""

    def __init__(self, source: ByteSource, block_size: int):
        if block_size <= SECTOR_POINTER_SIZE:
            raise InvalidChainError(
                f"Block size {block_size} leaves no room for sector payload"
            )
        self.source = source
        self.block_size = block_size

    def _check_address(self, address: int) -> None:
        if address == 0 or address + SECTOR_POINTER_SIZE > self.source.size:
            raise InvalidChainError(
                f"Sector address 0x{address:X} outside archive of {self.source.size} bytes"
            )

    def read(self, start_offset: int, logical_size: int) -> bytes:
        """Read ``logical_size`` bytes from the chain starting at ``start_offset``.

        Raises InvalidChainError if the chain visits the same sector twice
        or runs through more sectors than the archive can hold.
        """
        self._check_address(start_offset)

        # All sectors but the last fill a whole block
        max_sectors = self.source.size // self.block_size + 1
        payload_size = self.block_size - SECTOR_POINTER_SIZE
        buffer = bytearray()
        remaining = logical_size
        sector = start_offset
        visited = set()

        while remaining > 0:
            if sector in visited:
                raise InvalidChainError(
                    f"Chain at 0x{start_offset:X} revisits sector 0x{sector:X}"
                )
            if len(visited) >= max_sectors:
                raise InvalidChainError(
                    f"Chain at 0x{start_offset:X} exceeds {max_sectors} sectors"
                    f" with {remaining} of {logical_size} bytes left"
                )
            visited.add(sector)
            next_address = self.source.read_u32(sector)
            data_offset = sector + SECTOR_POINTER_SIZE

            if remaining < self.block_size:
                buffer += self.source.read(data_offset, remaining)
                break

            buffer += self.source.read(data_offset, payload_size)
            remaining -= payload_size

            if remaining > 0:
                self._check_address(next_address)
                sector = next_address

        logger.debug(
            "Read %d bytes from chain at 0x%X across %d sectors",
            len(buffer),
            start_offset,
            len(visited),
        )
        return bytes(buffer)


def read_chain(source: ByteSource, start_offset: int, logical_size: int, block_size: int) -> bytes:
    """Read one logical record from a sector chain."""
    return SectorChainReader(source, block_size).read(start_offset, logical_size)

"""Tests for sector chain reassembly."""

import struct

import pytest

from acdat.dat.sector import SectorChainReader, read_chain
from acdat.errors import InvalidChainError, TruncatedInputError
from acdat.utils.binary import ByteSource

from dat_builder import ArchiveBuilder


def pattern(size: int) -> bytes:
    return bytes((i * 7 + 3) & 0xFF for i in range(size))


class TestSectorChainReader:
    """Tests for SectorChainReader."""

    def test_single_sector_skips_pointer_slot(self):
        data = bytearray(64)
        data[16:20] = struct.pack("<I", 0xDEADBEEF)  # Never followed
        data[20:30] = b"0123456789"

        assert read_chain(ByteSource(bytes(data)), 16, 10, 32) == b"0123456789"

    def test_two_sectors_by_hand(self):
        # Block size 16: 12 payload bytes per full sector
        data = bytearray(96)
        data[16:20] = struct.pack("<I", 64)
        data[20:32] = b"AAAAAAAAAAAA"
        data[64:68] = struct.pack("<I", 0)
        data[68:73] = b"BBBBB"

        assert read_chain(ByteSource(bytes(data)), 16, 17, 16) == b"A" * 12 + b"B" * 5

    def test_remaining_equal_to_block_size_takes_another_sector(self):
        data = bytearray(96)
        data[16:20] = struct.pack("<I", 48)
        data[20:32] = b"A" * 12
        data[48:52] = struct.pack("<I", 0)
        data[52:56] = b"BBBB"

        assert read_chain(ByteSource(bytes(data)), 16, 16, 16) == b"A" * 12 + b"BBBB"

    def test_final_read_may_run_past_sector_end(self):
        # 14 bytes remaining is less than the 16-byte block, so all 14 are
        # read after the pointer slot even though the sector holds only 12
        data = bytearray(64)
        data[16:20] = struct.pack("<I", 0)
        data[20:34] = pattern(14)

        assert read_chain(ByteSource(bytes(data)), 16, 14, 16) == pattern(14)

    @pytest.mark.parametrize("block_size", [16, 64, 100, 256, 1024, 2048])
    def test_chain_length_independence(self, block_size):
        payload = pattern(1716)
        builder = ArchiveBuilder(block_size, gap=True)
        offset = builder.write_chain(payload)

        source = ByteSource(bytes(builder.data))
        assert SectorChainReader(source, block_size).read(offset, len(payload)) == payload

    def test_truncated_mid_chain(self):
        builder = ArchiveBuilder(256)
        offset = builder.write_chain(pattern(1716))
        cut = offset + 256 + 100  # Inside the second sector's payload

        with pytest.raises(TruncatedInputError):
            read_chain(ByteSource(bytes(builder.data[:cut])), offset, 1716, 256)

    def test_pointer_outside_file(self):
        builder = ArchiveBuilder(256)
        offset = builder.write_chain(pattern(1716))
        builder.data[offset : offset + 4] = struct.pack("<I", 0x7FFFFFFF)

        with pytest.raises(InvalidChainError):
            read_chain(ByteSource(bytes(builder.data)), offset, 1716, 256)

    def test_zero_pointer_while_data_remains(self):
        builder = ArchiveBuilder(256)
        offset = builder.write_chain(pattern(1716))
        builder.data[offset : offset + 4] = b"\x00\x00\x00\x00"

        with pytest.raises(InvalidChainError):
            read_chain(ByteSource(bytes(builder.data)), offset, 1716, 256)

    def test_start_outside_file(self):
        source = ByteSource(bytes(64))
        with pytest.raises(InvalidChainError):
            read_chain(source, 0x1000, 16, 32)

    @pytest.mark.parametrize("block_size", [0, 4])
    def test_block_size_too_small(self, block_size):
        with pytest.raises(InvalidChainError, match="Block size"):
            SectorChainReader(ByteSource(bytes(64)), block_size)

    def test_self_pointing_sector(self):
        data = bytearray(3584)
        data[0x400:0x404] = struct.pack("<I", 0x400)
        data[0x404:0x600] = b"\xAB" * 508

        with pytest.raises(InvalidChainError, match="revisits sector 0x400"):
            read_chain(ByteSource(bytes(data)), 0x400, 20_000_000, 512)

    def test_two_sector_loop(self):
        data = bytearray(4096)
        data[0x400:0x404] = struct.pack("<I", 0x800)
        data[0x800:0x804] = struct.pack("<I", 0x400)

        with pytest.raises(InvalidChainError, match="revisits"):
            read_chain(ByteSource(bytes(data)), 0x400, 2000, 512)

    def test_overlapping_sectors_bounded_by_archive_size(self):
        # Sectors 4 bytes apart never repeat but overlap each other
        data = bytearray(64)
        for offset in range(4, 60, 4):
            data[offset : offset + 4] = struct.pack("<I", offset + 4)

        with pytest.raises(InvalidChainError, match="exceeds 5 sectors"):
            read_chain(ByteSource(bytes(data)), 4, 100, 16)

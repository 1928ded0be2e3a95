"""Shared helpers."""

from .binary import BinaryReader, ByteSource, open_archive
from .ids import parse_object_id

__all__ = ["BinaryReader", "ByteSource", "open_archive", "parse_object_id"]

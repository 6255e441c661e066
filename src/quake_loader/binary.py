"""
Binary cursor helpers shared by the PAK and BSP readers.

Every record is decoded field by field from little-endian ``struct`` layouts,
so nothing depends on in-memory struct packing.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, List, Tuple

from .constants import RecordFormat
from .exceptions import FormatError, TruncatedError


def describe(file: BinaryIO) -> str:
    """Name of a file object for error messages."""
    return str(getattr(file, "name", "<stream>"))


def seek(file: BinaryIO, offset: int) -> None:
    """Move the read position to an absolute offset."""
    if offset < 0:
        raise FormatError(f"{describe(file)}: negative offset {offset}")
    file.seek(offset)


def read_exact(file: BinaryIO, size: int, what: str) -> bytes:
    """
    Read exactly ``size`` bytes from the current position.

    Raises:
        TruncatedError: If the file ends first
    """
    data = file.read(size)
    if len(data) != size:
        raise TruncatedError(
            f"{describe(file)}: unexpected EOF reading {what} "
            f"(wanted {size} bytes, got {len(data)})"
        )
    return data


def read_struct(file: BinaryIO, layout: struct.Struct, what: str) -> Tuple:
    """Read a single record at the current position."""
    return layout.unpack(read_exact(file, layout.size, what))


def element_count(size: int, element_size: int, what: str, source: str = "<stream>") -> int:
    """
    Number of elements in a region of ``size`` bytes.

    Raises:
        FormatError: If the size is negative or not a whole number of elements
    """
    if size < 0:
        raise FormatError(f"{source}: {what} has negative size {size}")
    count, remainder = divmod(size, element_size)
    if remainder:
        raise FormatError(
            f"{source}: {what} size {size} is not a multiple of {element_size}"
        )
    return count


def read_array(file: BinaryIO, offset: int, size: int, record: RecordFormat) -> List[Tuple]:
    """
    Load a lump made of fixed-size records.

    Args:
        file: Open binary file
        offset: Absolute offset of the lump
        size: Lump size in bytes, must be a multiple of the record size
        record: Record layout

    Returns:
        One tuple of decoded fields per element
    """
    element_count(size, record.size, record.name, describe(file))
    seek(file, offset)
    data = read_exact(file, size, record.name)
    return list(record.layout.iter_unpack(data))


def decode_name(raw: bytes) -> str:
    """Decode a fixed-width, NUL-terminated name field."""
    end = raw.find(b"\x00")
    if end != -1:
        raw = raw[:end]
    return raw.decode("latin-1")

"""
PAK archive reader.

A PAK file is a 12 byte header (``"PACK"``, directory offset, directory size)
followed by file data and a directory of 64 byte entries: a 56 byte
NUL-terminated name, then the entry's offset and size. Entry offsets are
absolute within the archive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, NamedTuple, Optional

import numpy as np

from .binary import decode_name, describe, element_count, read_exact, read_struct, seek
from .bsp_parser import AtlasFactory, BSPFile, BSPParser
from .constants import (
    MAP_PREFIX,
    MAP_SUFFIX,
    PAK_ENTRY,
    PAK_ENTRY_SIZE,
    PAK_HEADER,
    PAK_MAGIC,
    PALETTE_ENTRY,
)
from .exceptions import FormatError, NotFoundError
from .textures import TextureAtlas, load_palette


logger = logging.getLogger(__name__)


class ByteRange(NamedTuple):
    """Location of an entry inside the archive."""
    offset: int
    size: int


@dataclass
class PAKEntry:
    """One directory entry."""
    name: str
    offset: int
    size: int

    @property
    def range(self) -> ByteRange:
        return ByteRange(self.offset, self.size)


def map_entry_name(name: str) -> str:
    """Archive path of a map, e.g. ``e1m1`` -> ``maps/e1m1.bsp``."""
    return MAP_PREFIX + name + MAP_SUFFIX


class PAKArchive:
    """
    An open PAK archive.

    The archive owns its file handle until :meth:`close` (or the end of a
    ``with`` block). Maps loaded from it get their own copies of the data.

    Args:
        file: Binary file positioned anywhere; the archive starts at offset 0
    """

    def __init__(self, file: BinaryIO):
        self._file = file
        self.entries: List[PAKEntry] = []
        self._read_header()
        self._read_entries()

    @classmethod
    def open(cls, path: str | Path) -> PAKArchive:
        """
        Open and index an archive.

        Raises:
            FormatError: If the file is not a PAK archive
            TruncatedError: If the directory runs past the end of the file
            FileNotFoundError: If file doesn't exist
        """
        file = open(Path(path), "rb")
        try:
            return cls(file)
        except BaseException:
            file.close()
            raise

    @property
    def name(self) -> str:
        return describe(self._file)

    def _read_header(self) -> None:
        seek(self._file, 0)
        magic, self._dir_offset, self._dir_size = read_struct(
            self._file, PAK_HEADER, "PAK header"
        )
        if magic != PAK_MAGIC:
            raise FormatError(f"{self.name}: not an archive (magic {magic!r})")

    def _read_entries(self) -> None:
        count = element_count(self._dir_size, PAK_ENTRY_SIZE, "PAK directory", self.name)
        logger.info("%s contains %d entries", self.name, count)

        seek(self._file, self._dir_offset)
        data = read_exact(self._file, count * PAK_ENTRY_SIZE, "PAK entries")
        self.entries = [
            PAKEntry(decode_name(raw_name), offset, size)
            for raw_name, offset, size in PAK_ENTRY.iter_unpack(data)
        ]

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> PAKArchive:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, path: object) -> bool:
        return any(entry.name == path for entry in self.entries)

    def names(self) -> Iterator[str]:
        """Entry names in directory order."""
        return (entry.name for entry in self.entries)

    def find_entry(self, path: str) -> ByteRange:
        """
        Locate an entry by its full path. The first match wins.

        Raises:
            NotFoundError: If no entry has this name
        """
        for entry in self.entries:
            if entry.name == path:
                return entry.range
        raise NotFoundError(f"{self.name}: could not find {path}")

    def find(self, name: str) -> ByteRange:
        """Locate the map called ``name`` (stored as ``maps/<name>.bsp``)."""
        return self.find_entry(map_entry_name(name))

    def read(self, path: str) -> bytes:
        """Copy an entry's data into memory."""
        offset, size = self.find_entry(path)
        seek(self._file, offset)
        return read_exact(self._file, size, path)

    def load_palette(self, path: str = PALETTE_ENTRY) -> np.ndarray:
        """Read the game palette, see :func:`load_palette`."""
        return load_palette(self.read(path))

    def load_map(
        self,
        name: str,
        palette: Optional[np.ndarray] = None,
        atlas_factory: AtlasFactory = TextureAtlas,
    ) -> BSPFile:
        """
        Find and parse a map.

        Args:
            name: Map name without folder or extension (``e1m1``)
            palette: Palette handed to the texture atlas

        Returns:
            Parsed BSPFile, independent of this archive
        """
        offset, size = self.find(name)
        logger.debug("Loading %s at offset %d (%d bytes)", map_entry_name(name), offset, size)
        return BSPParser(self._file, offset, palette, atlas_factory).parse()

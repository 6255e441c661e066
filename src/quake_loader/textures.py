"""
Mip-texture directory and palette loading.

``TextureAtlas`` is the default atlas used while assembling a map. It indexes
the texture headers found in the miptex lump and keeps the palette they are
meant to be shown with. Pixel data is left in the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional, Tuple

import numpy as np

from .binary import decode_name, describe, read_struct, seek
from .constants import (
    MIPTEX_COUNT,
    MIPTEX_HEADER,
    MIPTEX_MISSING,
    MIPTEX_OFFSET,
    PALETTE_COLORS,
    PALETTE_SIZE,
)
from .exceptions import FormatError, NotFoundError


logger = logging.getLogger(__name__)


@dataclass
class MipTexture:
    """Header of one mip texture."""
    name: str
    width: int
    height: int
    mip_offsets: Tuple[int, int, int, int]
    offset: int  # absolute file offset of the header

    def mip_size(self, level: int) -> Tuple[int, int]:
        """Width and height of a mip level (0-3)."""
        return self.width >> level, self.height >> level


def load_palette(data: bytes) -> np.ndarray:
    """
    Decode a 768 byte palette (``gfx/palette.lmp``).

    Returns:
        (256, 3) uint8 array of RGB colors
    """
    if len(data) != PALETTE_SIZE:
        raise FormatError(
            f"Palette must be {PALETTE_SIZE} bytes, got {len(data)}"
        )
    return np.frombuffer(data, dtype=np.uint8).reshape(PALETTE_COLORS, 3).copy()


class TextureAtlas:
    """
    Index of the mip textures stored in a map.

    Args:
        file: Open binary file, positioned anywhere
        offset: Absolute offset of the miptex lump
        palette: Optional (256, 3) palette
    """

    def __init__(self, file: BinaryIO, offset: int, palette: Optional[np.ndarray] = None):
        self.palette = palette
        self.textures: Dict[int, MipTexture] = {}
        self._read(file, offset)

    def _read(self, file: BinaryIO, offset: int) -> None:
        seek(file, offset)
        (count,) = read_struct(file, MIPTEX_COUNT, "miptex count")
        if count < 0:
            raise FormatError(f"{describe(file)}: negative texture count {count}")

        offsets = [read_struct(file, MIPTEX_OFFSET, "miptex offsets")[0] for _ in range(count)]
        for index, tex_offset in enumerate(offsets):
            if tex_offset == MIPTEX_MISSING:
                continue
            seek(file, offset + tex_offset)
            raw_name, width, height, *mip_offsets = read_struct(
                file, MIPTEX_HEADER, "miptex header"
            )
            self.textures[index] = MipTexture(
                name=decode_name(raw_name),
                width=width,
                height=height,
                mip_offsets=tuple(mip_offsets),
                offset=offset + tex_offset,
            )

        logger.debug("Indexed %d of %d textures", len(self.textures), count)

    def __len__(self) -> int:
        return len(self.textures)

    def by_name(self, name: str) -> MipTexture:
        """Get the first texture with the given name."""
        for texture in self.textures.values():
            if texture.name == name:
                return texture
        raise NotFoundError(f"could not find texture {name}")

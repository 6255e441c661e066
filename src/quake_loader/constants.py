"""
Constants and enumerations for Quake PAK archives and BSP (v29) maps.

Byte layouts follow the Quake specs:
http://www.gamers.org/dEngine/quake/spec/quake-spec34/qkspec_2.htm
"""

import struct
from enum import IntEnum
from typing import NamedTuple


# =============================================================================
# PAK archives
# =============================================================================

PAK_MAGIC = b"PACK"
PAK_HEADER = struct.Struct("<4sII")  # magic, directory offset, directory size
PAK_ENTRY = struct.Struct("<56sII")  # name, offset, size
PAK_ENTRY_SIZE = PAK_ENTRY.size  # 64

MAP_PREFIX = "maps/"
MAP_SUFFIX = ".bsp"
PALETTE_ENTRY = "gfx/palette.lmp"


# =============================================================================
# BSP maps
# =============================================================================

BSP_VERSION = 29


class BSPLump(IntEnum):
    """BSP file lump indices, in header order."""
    ENTITIES = 0
    PLANES = 1
    MIPTEX = 2
    VERTICES = 3
    VISILIST = 4
    NODES = 5
    TEXINFO = 6
    FACES = 7
    LIGHTMAPS = 8
    CLIPNODES = 9
    LEAVES = 10
    LFACE = 11
    EDGES = 12
    LEDGES = 13
    MODELS = 14


NUM_LUMPS = len(BSPLump)

BSP_VERSION_STRUCT = struct.Struct("<i")
LUMP_STRUCT = struct.Struct("<ii")  # offset, size
BSP_HEADER_SIZE = BSP_VERSION_STRUCT.size + NUM_LUMPS * LUMP_STRUCT.size  # 124


# =============================================================================
# Lump record layouts (all little-endian)
# =============================================================================

class RecordFormat(NamedTuple):
    """A fixed-size lump element."""
    name: str
    layout: struct.Struct

    @property
    def size(self) -> int:
        return self.layout.size


MODEL_FORMAT = RecordFormat("models", struct.Struct("<9f4i3i"))  # 64 bytes
VERTEX_FORMAT = RecordFormat("vertices", struct.Struct("<3f"))  # 12 bytes
EDGE_FORMAT = RecordFormat("edges", struct.Struct("<HH"))  # 4 bytes
EDGE_LIST_FORMAT = RecordFormat("edge list", struct.Struct("<i"))  # 4 bytes
FACE_FORMAT = RecordFormat("faces", struct.Struct("<HHiHHBBBBi"))  # 20 bytes
PLANE_FORMAT = RecordFormat("planes", struct.Struct("<4fi"))  # 20 bytes
TEXINFO_FORMAT = RecordFormat("texture info", struct.Struct("<8fII"))  # 40 bytes
LIGHTMAP_FORMAT = RecordFormat("light map", struct.Struct("<B"))  # 1 byte


# =============================================================================
# Mip textures and palette
# =============================================================================

MIPTEX_COUNT = struct.Struct("<i")
MIPTEX_OFFSET = struct.Struct("<i")
MIPTEX_HEADER = struct.Struct("<16sII4I")  # name, width, height, mip offsets
MIPTEX_MISSING = -1

PALETTE_COLORS = 256
PALETTE_SIZE = PALETTE_COLORS * 3


# =============================================================================
# Entities
# =============================================================================

MAX_CLASSNAME_LENGTH = 255

KEY_CLASSNAME = "classname"
KEY_ORIGIN = "origin"
KEY_ANGLE = "angle"

"""
Quake Map Loader

Reads Quake PAK archives and version 29 BSP maps into plain Python objects:
models, faces, edges, planes, vertices, texture info, the light map and the
entity list.
"""

__version__ = "0.1.0"
__author__ = "Quake Map Loader Team"

from .bsp_parser import BSPFile, BSPHeader, BSPParser
from .entities import Entity, find_entity_by_name, parse_entities
from .exceptions import AssetError, FormatError, NotFoundError, TruncatedError, VersionError
from .pak import ByteRange, PAKArchive, PAKEntry
from .textures import MipTexture, TextureAtlas, load_palette
from .vector import Vector3, fix_coords, fix_coords_array

__all__ = [
    "BSPParser",
    "BSPFile",
    "BSPHeader",
    "PAKArchive",
    "PAKEntry",
    "ByteRange",
    "Entity",
    "parse_entities",
    "find_entity_by_name",
    "TextureAtlas",
    "MipTexture",
    "load_palette",
    "Vector3",
    "fix_coords",
    "fix_coords_array",
    # Errors
    "AssetError",
    "FormatError",
    "VersionError",
    "TruncatedError",
    "NotFoundError",
]

"""
BSP Parser Module for Quake BSP files (v29).

Reads the lump table and copies every lump the renderer needs into memory.
Maps can be standalone ``.bsp`` files or entries inside a PAK archive, so all
lump offsets are relative to a base offset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple

import numpy as np

from .binary import describe, element_count, read_array, read_exact, read_struct, seek
from .constants import (
    BSP_VERSION,
    BSP_VERSION_STRUCT,
    EDGE_FORMAT,
    EDGE_LIST_FORMAT,
    FACE_FORMAT,
    LIGHTMAP_FORMAT,
    LUMP_STRUCT,
    MODEL_FORMAT,
    PLANE_FORMAT,
    TEXINFO_FORMAT,
    VERTEX_FORMAT,
    BSPLump,
    RecordFormat,
)
from .entities import Entity, find_entity_by_name, parse_entities
from .exceptions import AssetError, VersionError
from .textures import TextureAtlas
from .vector import BoundingBox, Plane, Vector3, fix_coords


logger = logging.getLogger(__name__)

AtlasFactory = Callable[[BinaryIO, int, Optional[np.ndarray]], object]


@dataclass
class LumpInfo:
    """Information about a BSP lump, relative to the map's base offset."""
    offset: int
    size: int


@dataclass
class BSPHeader:
    """BSP version and lump table."""
    version: int
    lumps: Dict[BSPLump, LumpInfo]

    @classmethod
    def read(cls, file: BinaryIO, base_offset: int = 0) -> BSPHeader:
        """
        Read and validate the header at ``base_offset``.

        Raises:
            VersionError: If the version is not 29
            TruncatedError: If the file is too short to hold a header
        """
        seek(file, base_offset)
        (version,) = read_struct(file, BSP_VERSION_STRUCT, "BSP header")
        if version != BSP_VERSION:
            raise VersionError(
                f"{describe(file)}: BSP is version {version}, expected {BSP_VERSION}"
            )

        lumps = {}
        for lump in BSPLump:
            offset, size = read_struct(file, LUMP_STRUCT, "BSP lump table")
            lumps[lump] = LumpInfo(offset, size)
        return cls(version, lumps)

    def __getitem__(self, lump: BSPLump) -> LumpInfo:
        return self.lumps[lump]

    @property
    def miptex(self) -> LumpInfo:
        return self.lumps[BSPLump.MIPTEX]


@dataclass
class Model:
    """BSP model (world or brush entity)."""
    mins: Vector3
    maxs: Vector3
    origin: Vector3
    head_nodes: Tuple[int, int, int, int]
    num_leaves: int
    first_face: int
    num_faces: int


@dataclass
class Edge:
    """BSP edge connecting two vertices."""
    start: int
    end: int


@dataclass
class Face:
    """BSP face structure."""
    plane_index: int
    side: int
    first_edge: int
    num_edges: int
    tex_info: int
    light_type: int
    base_light: int
    light: Tuple[int, int]
    light_offset: int


@dataclass
class TexInfo:
    """Texture projection. Both vectors are already in loader coordinates."""
    u_vector: Vector3
    u_offset: float
    v_vector: Vector3
    v_offset: float
    texture_id: int
    animated: int


@dataclass
class BSPFile:
    """Parsed BSP map. Owns copies of all lump data."""
    version: int
    header: BSPHeader
    atlas: object = None
    models: List[Model] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    vertices: List[Vector3] = field(default_factory=list)
    edge_list: List[int] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    faces: List[Face] = field(default_factory=list)
    light_map: bytes = b""
    planes: List[Plane] = field(default_factory=list)
    tex_infos: List[TexInfo] = field(default_factory=list)

    @property
    def world_bounds(self) -> Optional[BoundingBox]:
        """Get world geometry bounds from model 0, in file coordinates."""
        if self.models:
            m = self.models[0]
            return BoundingBox(m.mins, m.maxs)
        return None

    def find_entity_by_name(self, name: str) -> Entity:
        """First entity with this classname, or NotFoundError."""
        return find_entity_by_name(self.entities, name)

    def get_entities_by_class(self, classname: str) -> List[Entity]:
        """Get all entities with a specific classname."""
        return [e for e in self.entities if e.classname == classname]

    def face_vertices(self, face: Face) -> List[Vector3]:
        """
        Get the vertices of a face in winding order.

        A negative edge-list entry means the edge is walked backwards.
        """
        vertices = []
        for i in range(face.num_edges):
            ledge = self.edge_list[face.first_edge + i]
            if ledge >= 0:
                vertices.append(self.vertices[self.edges[ledge].start])
            else:
                vertices.append(self.vertices[self.edges[-ledge].end])
        return vertices

    def vertex_array(self) -> np.ndarray:
        """All vertices as an (N, 3) float32 array."""
        if not self.vertices:
            return np.zeros((0, 3), dtype=np.float32)
        return np.array([v.to_tuple() for v in self.vertices], dtype=np.float32)


class BSPParser:
    """
    Loads one map from an open file.

    The file is only borrowed: the parser never closes it and keeps no
    reference to it once :meth:`parse` returns. Reads move the file position,
    so the file must not be shared with another parse at the same time.

    Args:
        file: Open binary file containing the map
        base_offset: Offset of the map inside the file (non-zero inside a PAK)
        palette: Palette handed to the texture atlas
        atlas_factory: Called as ``atlas_factory(file, offset, palette)``
    """

    def __init__(
        self,
        file: BinaryIO,
        base_offset: int = 0,
        palette: Optional[np.ndarray] = None,
        atlas_factory: AtlasFactory = TextureAtlas,
    ):
        self._file: Optional[BinaryIO] = file
        self.base_offset = base_offset
        self.palette = palette
        self.atlas_factory = atlas_factory
        self._bsp: Optional[BSPFile] = None

    @classmethod
    def load(cls, filepath: str | Path, palette: Optional[np.ndarray] = None) -> BSPFile:
        """
        Load and parse a standalone BSP file.

        Raises:
            AssetError: If the file is not a valid v29 BSP
            FileNotFoundError: If file doesn't exist
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"BSP file not found: {filepath}")

        with open(filepath, "rb") as f:
            return cls(f, 0, palette).parse()

    def parse(self) -> BSPFile:
        """
        Read the whole map.

        Steps run in a fixed order and any failure aborts the load.

        Raises:
            AssetError: With the file name and failing stage in the message
        """
        if self._file is None:
            raise RuntimeError("BSPParser.parse() can only be called once")

        steps = [
            ("header", self._read_header),
            ("textures", self._read_atlas),
            ("models", self._read_models),
            ("entities", self._read_entities),
            ("vertices", self._read_vertices),
            ("edge list", self._read_edge_list),
            ("edges", self._read_edges),
            ("faces", self._read_faces),
            ("light map", self._read_light_map),
            ("planes", self._read_planes),
            ("texture info", self._read_tex_infos),
        ]
        try:
            for stage, step in steps:
                logger.debug("Reading %s", stage)
                try:
                    step()
                except AssetError as exc:
                    raise type(exc)(f"failed reading {stage}: {exc}") from exc
            bsp = self._bsp
        finally:
            self._file = None
            self._bsp = None

        logger.debug(
            "Loaded map: %d vertices, %d faces, %d entities",
            len(bsp.vertices), len(bsp.faces), len(bsp.entities),
        )
        return bsp

    def _lump_location(self, lump: BSPLump) -> Tuple[int, int]:
        info = self._bsp.header[lump]
        return self.base_offset + info.offset, info.size

    def _read_lump(self, lump: BSPLump, record: RecordFormat) -> List[Tuple]:
        """Read every record of a lump."""
        offset, size = self._lump_location(lump)
        return read_array(self._file, offset, size, record)

    def _read_header(self) -> None:
        header = BSPHeader.read(self._file, self.base_offset)
        self._bsp = BSPFile(version=header.version, header=header)

    def _read_atlas(self) -> None:
        offset = self.base_offset + self._bsp.header.miptex.offset
        self._bsp.atlas = self.atlas_factory(self._file, offset, self.palette)

    def _read_models(self) -> None:
        """Read model lump (64 bytes per model)."""
        for (
            min_x, min_y, min_z,
            max_x, max_y, max_z,
            org_x, org_y, org_z,
            node0, node1, node2, node3,
            num_leaves,
            first_face,
            num_faces,
        ) in self._read_lump(BSPLump.MODELS, MODEL_FORMAT):
            self._bsp.models.append(
                Model(
                    mins=Vector3(min_x, min_y, min_z),
                    maxs=Vector3(max_x, max_y, max_z),
                    origin=Vector3(org_x, org_y, org_z),
                    head_nodes=(node0, node1, node2, node3),
                    num_leaves=num_leaves,
                    first_face=first_face,
                    num_faces=num_faces,
                )
            )

    def _read_blob(self, lump: BSPLump, what: str) -> bytes:
        """Copy a lump into memory as raw bytes."""
        offset, size = self._lump_location(lump)
        element_count(size, 1, what, describe(self._file))
        seek(self._file, offset)
        return read_exact(self._file, size, what)

    def _read_entities(self) -> None:
        """Read and parse entity lump."""
        self._bsp.entities = parse_entities(self._read_blob(BSPLump.ENTITIES, "entities"))

    def _read_vertices(self) -> None:
        """Read vertex lump (12 bytes per vertex: 3 floats), converting axes."""
        self._bsp.vertices = [
            fix_coords(Vector3(x, y, z))
            for x, y, z in self._read_lump(BSPLump.VERTICES, VERTEX_FORMAT)
        ]

    def _read_edge_list(self) -> None:
        """Read edge list lump (4 bytes per entry: signed int)."""
        self._bsp.edge_list = [
            ledge for (ledge,) in self._read_lump(BSPLump.LEDGES, EDGE_LIST_FORMAT)
        ]

    def _read_edges(self) -> None:
        """Read edge lump (4 bytes per edge: 2 unsigned shorts)."""
        self._bsp.edges = [
            Edge(start, end) for start, end in self._read_lump(BSPLump.EDGES, EDGE_FORMAT)
        ]

    def _read_faces(self) -> None:
        """Read face lump (20 bytes per face)."""
        for (
            plane_index,
            side,
            first_edge,
            num_edges,
            tex_info,
            light_type,
            base_light,
            light0,
            light1,
            light_offset,
        ) in self._read_lump(BSPLump.FACES, FACE_FORMAT):
            self._bsp.faces.append(
                Face(
                    plane_index=plane_index,
                    side=side,
                    first_edge=first_edge,
                    num_edges=num_edges,
                    tex_info=tex_info,
                    light_type=light_type,
                    base_light=base_light,
                    light=(light0, light1),
                    light_offset=light_offset,
                )
            )

    def _read_light_map(self) -> None:
        """Read the light map as raw bytes."""
        self._bsp.light_map = self._read_blob(BSPLump.LIGHTMAPS, LIGHTMAP_FORMAT.name)

    def _read_planes(self) -> None:
        """Read plane lump (20 bytes per plane)."""
        for nx, ny, nz, dist, plane_type in self._read_lump(BSPLump.PLANES, PLANE_FORMAT):
            self._bsp.planes.append(Plane(Vector3(nx, ny, nz), dist, plane_type))

    def _read_tex_infos(self) -> None:
        """Read texinfo lump (40 bytes each), converting both vectors."""
        for (
            ux, uy, uz, u_offset,
            vx, vy, vz, v_offset,
            texture_id,
            animated,
        ) in self._read_lump(BSPLump.TEXINFO, TEXINFO_FORMAT):
            self._bsp.tex_infos.append(
                TexInfo(
                    u_vector=fix_coords(Vector3(ux, uy, uz)),
                    u_offset=u_offset,
                    v_vector=fix_coords(Vector3(vx, vy, vz)),
                    v_offset=v_offset,
                    texture_id=texture_id,
                    animated=animated,
                )
            )

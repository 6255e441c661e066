"""Builders for small synthetic PAK archives and BSP maps."""

import struct

import pytest

from quake_loader.constants import BSP_HEADER_SIZE, BSP_VERSION, BSPLump


def pack_records(fmt, records):
    """Pack a list of tuples with one struct format."""
    return b"".join(struct.pack(fmt, *record) for record in records)


def build_miptex(textures=(), missing=()):
    """
    Build a miptex lump.

    ``textures`` is a list of (name, width, height); indices in ``missing``
    get an offset of -1.
    """
    count = len(textures) + len(missing)
    header_size = 4 + 4 * count
    offsets = []
    bodies = b""
    tex_iter = iter(textures)
    for index in range(count):
        if index in missing:
            offsets.append(-1)
            continue
        name, width, height = next(tex_iter)
        offsets.append(header_size + len(bodies))
        bodies += struct.pack(
            "<16sII4I", name.encode("latin-1"), width, height, 40, 40, 40, 40
        )
    return struct.pack("<i", count) + struct.pack(f"<{count}i", *offsets) + bodies


def build_bsp(
    entities=b"",
    vertices=(),
    edges=(),
    edge_list=(),
    faces=(),
    planes=(),
    tex_infos=(),
    models=(),
    light_map=b"",
    miptex=None,
    version=BSP_VERSION,
    sizes=None,
):
    """
    Build a v29 BSP file.

    ``sizes`` overrides the declared size of individual lumps.
    """
    data = {
        BSPLump.ENTITIES: entities,
        BSPLump.PLANES: pack_records("<4fi", planes),
        BSPLump.MIPTEX: build_miptex() if miptex is None else miptex,
        BSPLump.VERTICES: pack_records("<3f", vertices),
        BSPLump.TEXINFO: pack_records("<8fII", tex_infos),
        BSPLump.FACES: pack_records("<HHiHHBBBBi", faces),
        BSPLump.LIGHTMAPS: light_map,
        BSPLump.EDGES: pack_records("<HH", edges),
        BSPLump.LEDGES: pack_records("<i", [(index,) for index in edge_list]),
        BSPLump.MODELS: pack_records("<9f4i3i", models),
    }
    sizes = sizes or {}

    header = struct.pack("<i", version)
    body = b""
    for lump in BSPLump:
        chunk = data.get(lump, b"")
        offset = BSP_HEADER_SIZE + len(body)
        header += struct.pack("<ii", offset, sizes.get(lump, len(chunk)))
        body += chunk
    return header + body


def build_pak(files, dir_size=None, magic=b"PACK"):
    """Build a PAK archive from (name, data) pairs."""
    body = b""
    directory = b""
    for name, data in files:
        offset = 12 + len(body)
        directory += struct.pack("<56sII", name.encode("latin-1"), offset, len(data))
        body += data
    dir_offset = 12 + len(body)
    if dir_size is None:
        dir_size = len(directory)
    return struct.pack("<4sII", magic, dir_offset, dir_size) + body + directory


SAMPLE_ENTITIES = (
    b'{\n"classname" "worldspawn"\n"wad" "gfx/base.wad"\n}\n'
    b'{\n"classname" "info_player_start"\n"origin" "10 20 30"\n"angle" "90"\n}\n'
    b'{\n"classname" "light"\n"origin" "-64 128 8"\n"light" "200"\n}\n\x00'
)


def sample_bsp():
    """A square face made of four edges, one of them reversed."""
    return build_bsp(
        entities=SAMPLE_ENTITIES,
        vertices=[(0, 0, 0), (64, 0, 0), (64, 64, 0), (0, 64, 0)],
        edges=[(0, 0), (0, 1), (1, 2), (2, 3), (0, 3)],
        edge_list=[1, 2, 3, -4],
        faces=[(0, 0, 0, 4, 0, 0, 255, 255, 255, 0)],
        planes=[(0.0, 0.0, 1.0, 0.0, 2)],
        tex_infos=[(1.0, 0.0, 0.0, 8.0, 0.0, 1.0, 0.0, 16.0, 0, 0)],
        models=[(-64, -64, -16, 64, 64, 16, 0, 0, 0, 0, -1, -1, -1, 1, 0, 1)],
        light_map=bytes(range(16)),
        miptex=build_miptex([("wall1", 64, 64)]),
    )


@pytest.fixture
def bsp_path(tmp_path):
    """A standalone sample map on disk."""
    path = tmp_path / "sample.bsp"
    path.write_bytes(sample_bsp())
    return path


@pytest.fixture
def pak_path(tmp_path):
    """An archive holding a palette and two maps."""
    palette = bytes(i % 256 for i in range(768))
    path = tmp_path / "pak0.pak"
    path.write_bytes(
        build_pak([
            ("gfx/palette.lmp", palette),
            ("maps/start.bsp", sample_bsp()),
            ("maps/e1m1.bsp", build_bsp(entities=b'{"classname" "worldspawn"}')),
        ])
    )
    return path

"""
Command Line Interface for Quake Map Loader.

Loads a map from a PAK archive or a standalone BSP file and reports what it
contains.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .bsp_parser import BSPFile, BSPParser
from .constants import PAK_MAGIC, PALETTE_ENTRY
from .exceptions import AssetError
from .pak import PAKArchive


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("quake_loader")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="quake-map-info",
        description="Inspect maps stored in Quake PAK archives or BSP files.",
        epilog="""
Examples:
  quake-map-info pak0.pak --map e1m1
  quake-map-info pak1.pak --map e2m3 --entities
  quake-map-info start.bsp --classname info_player_start
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input .pak or .bsp file",
    )
    parser.add_argument(
        "-m", "--map",
        type=str,
        metavar="NAME",
        help="Map to load from a PAK archive (e.g. e1m1)",
    )

    # Entity options
    entities = parser.add_argument_group("Entity Options")
    entities.add_argument(
        "--entities",
        action="store_true",
        help="List every entity",
    )
    entities.add_argument(
        "--classname",
        type=str,
        metavar="NAME",
        help="Show the first entity with this classname",
    )

    # Texture options
    textures = parser.add_argument_group("Texture Options")
    textures.add_argument(
        "--no-palette",
        action="store_true",
        help=f"Do not load {PALETTE_ENTRY} from the archive",
    )

    # Verbosity
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def is_archive(path: Path) -> bool:
    """Check the magic bytes rather than trusting the extension."""
    with open(path, "rb") as f:
        return f.read(len(PAK_MAGIC)) == PAK_MAGIC


def load_map(path: Path, map_name: Optional[str], use_palette: bool = True) -> BSPFile:
    """Load a map from either container."""
    if not is_archive(path):
        return BSPParser.load(path)

    if not map_name:
        raise AssetError(f"{path} is a PAK archive, choose a map with --map")

    with PAKArchive.open(path) as pak:
        palette = None
        if use_palette and PALETTE_ENTRY in pak:
            palette = pak.load_palette()
        elif use_palette:
            logger.warning(f"{PALETTE_ENTRY} not found, loading without a palette")
        return pak.load_map(map_name, palette)


def report(bsp: BSPFile, list_entities: bool = False, classname: Optional[str] = None) -> None:
    """Log a summary of a loaded map."""
    logger.info(f"  BSP version: {bsp.version}")
    logger.info(f"  Models: {len(bsp.models)}")
    logger.info(f"  Vertices: {len(bsp.vertices)}")
    logger.info(f"  Edges: {len(bsp.edges)}")
    logger.info(f"  Edge list: {len(bsp.edge_list)}")
    logger.info(f"  Faces: {len(bsp.faces)}")
    logger.info(f"  Planes: {len(bsp.planes)}")
    logger.info(f"  Texture info: {len(bsp.tex_infos)}")
    logger.info(f"  Textures: {len(getattr(bsp.atlas, 'textures', ()))}")
    logger.info(f"  Light map: {len(bsp.light_map)} bytes")
    logger.info(f"  Entities: {len(bsp.entities)}")

    if list_entities:
        for entity in bsp.entities:
            logger.info(f"    {entity.classname or '<none>'} at {entity.origin} angle {entity.angle}")

    if classname:
        entity = bsp.find_entity_by_name(classname)
        logger.info(f"  {classname}: origin {entity.origin}, angle {entity.angle}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.quiet:
        logger.setLevel(logging.WARNING)
    elif args.verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if not args.input.exists():
        logger.error(f"Input file not found: {args.input}")
        return 1

    logger.info(f"Processing: {args.input}")
    try:
        bsp = load_map(args.input, args.map, use_palette=not args.no_palette)
        report(bsp, list_entities=args.entities, classname=args.classname)
    except AssetError as e:
        logger.error(f"Invalid asset: {e}")
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        return 1

    logger.info("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())

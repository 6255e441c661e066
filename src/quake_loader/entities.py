"""
Entity lump parser.

The entity lump is a flat text block of ``{ "key" "value" ... }`` groups::

    {
    "classname" "info_player_start"
    "origin" "480 -352 88"
    "angle" "90"
    }

It is scanned byte by byte with a three-state machine. Only ``classname``,
``origin`` and ``angle`` are kept; other keys are skipped. Map files are often
hand-edited, so malformed numbers fall back to 0 with a warning instead of
failing the load.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, List

from .constants import KEY_ANGLE, KEY_CLASSNAME, KEY_ORIGIN, MAX_CLASSNAME_LENGTH
from .exceptions import NotFoundError
from .vector import Vector3


logger = logging.getLogger(__name__)

_OPEN_BRACE = ord("{")
_CLOSE_BRACE = ord("}")
_QUOTE = ord('"')

_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class ScanState(Enum):
    """Position of the scanner relative to entity blocks and strings."""
    OUTSIDE_ENTITY = auto()
    INSIDE_ENTITY = auto()
    INSIDE_STRING = auto()


class EntityKey(Enum):
    """Keys the parser understands."""
    CLASSNAME = auto()
    ORIGIN = auto()
    ANGLE = auto()
    UNKNOWN = auto()


_KEY_NAMES = {
    KEY_CLASSNAME: EntityKey.CLASSNAME,
    KEY_ORIGIN: EntityKey.ORIGIN,
    KEY_ANGLE: EntityKey.ANGLE,
}


@dataclass
class Entity:
    """A map entity. Fields keep their defaults until the key is seen."""
    classname: str = ""
    origin: Vector3 = field(default_factory=Vector3.zero)
    angle: int = 0


def parse_int(text: str, what: str = "integer") -> int:
    """
    Parse the leading decimal integer of a string, like C's ``atoi``.

    Returns 0 when there is no number. Anything unparsed is logged.
    """
    match = _INT_PREFIX.match(text)
    if match is None:
        logger.warning("Malformed %s value %r, using 0", what, text)
        return 0
    if text[match.end():].strip():
        logger.warning("Ignoring trailing characters in %s value %r", what, text)
    return int(match.group(1))


def parse_origin(text: str) -> Vector3:
    """
    Parse an ``"X Y Z"`` origin and convert it to the loader's axes.

    The mapping is x = X, y = -Z, z = -Y.
    """
    parts = text.split(" ", 2)
    if len(parts) < 3:
        logger.warning("Origin %r has fewer than 3 components", text)
        parts += [""] * (3 - len(parts))
    x, y, z = (parse_int(part, "origin") for part in parts)
    return Vector3(float(x), float(-z), float(-y))


def _apply_value(entity: Entity, key: EntityKey, value: str) -> None:
    if key is EntityKey.CLASSNAME:
        entity.classname = value[:MAX_CLASSNAME_LENGTH]
    elif key is EntityKey.ORIGIN:
        entity.origin = parse_origin(value)
    elif key is EntityKey.ANGLE:
        entity.angle = parse_int(value, "angle")


def parse_entities(buffer: bytes) -> List[Entity]:
    """
    Parse the raw entity lump.

    The whole buffer is scanned; it does not need to be NUL-terminated.
    Every closed block is returned, including empty ones. A block that is
    still open when the buffer ends is dropped.

    Each closed string is first applied as the value of the active key and
    then becomes the active key itself if it names one (``classname``,
    ``origin``, ``angle``), otherwise the active key is unknown. The active
    key carries across blocks, so a dangling key name applies to the first
    string of the next block.

    Args:
        buffer: Entity lump bytes

    Returns:
        Entities in file order
    """
    entities: List[Entity] = []
    state = ScanState.OUTSIDE_ENTITY
    entity = Entity()
    token = bytearray()
    key = EntityKey.UNKNOWN

    for byte in buffer:
        if state is ScanState.OUTSIDE_ENTITY:
            if byte == _OPEN_BRACE:
                entity = Entity()
                state = ScanState.INSIDE_ENTITY
        elif state is ScanState.INSIDE_ENTITY:
            if byte == _QUOTE:
                token.clear()
                state = ScanState.INSIDE_STRING
            elif byte == _CLOSE_BRACE:
                entities.append(entity)
                state = ScanState.OUTSIDE_ENTITY
        elif byte == _QUOTE:
            text = token.decode("latin-1")
            _apply_value(entity, key, text)
            key = _KEY_NAMES.get(text, EntityKey.UNKNOWN)
            state = ScanState.INSIDE_ENTITY
        else:
            token.append(byte)

    if state is not ScanState.OUTSIDE_ENTITY:
        logger.warning("Entity lump ends inside an unterminated block")

    logger.debug("Parsed %d entities", len(entities))
    return entities


def find_entity_by_name(entities: Iterable[Entity], name: str) -> Entity:
    """
    Return the first entity whose classname equals ``name``.

    Raises:
        NotFoundError: If no entity matches
    """
    for entity in entities:
        if entity.classname == name:
            return entity
    raise NotFoundError(f"could not find entity {name}")

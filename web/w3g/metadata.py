"""
Map settings block ("game settings" / stat string).

The settings are stored masked so that the string never contains a 0x00:
bytes come in groups of 8 where the first byte is a mask and each following
byte was incremented by one unless the matching mask bit is set.
"""
from dataclasses import dataclass

from .cursor import Cursor

FIXED_TEAMS_ON = 3


@dataclass(frozen=True)
class MapMetadata:
    speed: int
    teams_together: bool
    observer_mode: int
    default_visibility: bool
    always_visible: bool
    map_explored: bool
    hide_terrain: bool
    fixed_teams: bool
    referees: bool
    random_races: bool
    random_hero: bool
    full_shared_unit_control: bool
    checksum: bytes
    map: str
    creator: str


def demask(data: bytes) -> bytes:
    """Undo the encode-time mask.  Mask bytes themselves are dropped."""
    out = bytearray()
    mask = 0
    for i, b in enumerate(data):
        if i % 8 == 0:
            mask = b
        elif mask & (1 << (i % 8)):
            out.append(b)
        else:
            out.append((b - 1) & 0xFF)
    return bytes(out)


def decode_map_metadata(raw: bytes) -> MapMetadata:
    """Decode the de-masked settings string."""
    cur = Cursor(raw)
    speed              = cur.u8()
    teams_together     = cur.bit()
    observer_mode      = cur.bits(2)
    default_visibility = cur.bit()
    always_visible     = cur.bit()
    map_explored       = cur.bit()
    hide_terrain       = cur.bit()
    cur.bit()
    fixed_teams        = cur.bits(2) == FIXED_TEAMS_ON
    cur.bits(6)
    cur.bit()
    referees           = cur.bit()
    cur.bits(3)
    random_races       = cur.bit()
    random_hero        = cur.bit()
    full_shared        = cur.bit()
    cur.skip(5)
    checksum           = cur.read(4)
    map_path           = cur.cstring()
    creator            = cur.cstring()
    return MapMetadata(
        speed=speed,
        teams_together=teams_together,
        observer_mode=observer_mode,
        default_visibility=default_visibility,
        always_visible=always_visible,
        map_explored=map_explored,
        hide_terrain=hide_terrain,
        fixed_teams=fixed_teams,
        referees=referees,
        random_races=random_races,
        random_hero=random_hero,
        full_shared_unit_control=full_shared,
        checksum=checksum,
        map=map_path,
        creator=creator,
    )

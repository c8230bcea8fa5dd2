"""
Game info at the head of the decompressed buffer: host player, game name,
map settings, remaining players, slot table and random seed.

Two player-list encodings exist.  Classic replays repeat a 0x16 player
record per extra player and then start the slot table with 0x19.  Reforged
replays follow the classic records with a block of length-prefixed records
carrying a clan tag.  No version flag tells them apart; the byte after the
classic records does.
"""
import logging
from dataclasses import dataclass

from .cursor import Cursor
from .metadata import MapMetadata, decode_map_metadata, demask

log = logging.getLogger(__name__)

PLAYER_RECORD      = 0x16       # 22
GAME_START_RECORD  = 0x19       # 25
REFORGED_SKIP      = 12
MAX_REFORGED       = 24

# additional-data tag → trailing byte count; anything else has none
ADDITIONAL_DATA = {1: 1, 2: 2, 8: 8}


@dataclass(frozen=True)
class PlayerRecord:
    id: int
    name: str


@dataclass(frozen=True)
class ReforgedPlayerRecord:
    id: int
    name: str
    clan: str


@dataclass(frozen=True)
class SlotRecord:
    player_id: int
    status: int
    computer_flag: int
    team_id: int
    color: int
    race_flag: int
    ai_strength: int
    handicap_flag: int


@dataclass(frozen=True)
class GameInfo:
    player_records: tuple
    reforged_player_records: tuple
    game_name: str
    private_string: str
    metadata: MapMetadata
    slot_records: tuple
    random_seed: int
    select_mode: int
    start_spot_count: int


def read_player_record(cur: Cursor) -> PlayerRecord:
    pid  = cur.i8()
    name = cur.cstring()
    cur.skip(ADDITIONAL_DATA.get(cur.u8(), 0))
    return PlayerRecord(pid, name)


def read_reforged_records(cur: Cursor) -> list:
    """
    Length-prefixed player records.  Each one ends wherever its length says,
    whatever fields were read before that.
    """
    records = []
    cur.skip(REFORGED_SKIP)
    attempts = 0
    while cur.u8() != GAME_START_RECORD:
        if attempts >= MAX_REFORGED:
            log.warning('Stopped after %d reforged player records without a '
                        'game start marker at offset %d', attempts, cur.pos)
            break
        length = cur.u8()
        end    = cur.pos + length
        cur.skip(1)
        pid    = cur.u8()
        cur.skip(1)
        name   = cur.string(cur.u8())
        cur.skip(1)
        clan   = cur.string(cur.u8())
        cur.pos = end
        attempts += 1
        records.append(ReforgedPlayerRecord(pid, name, clan))
    return records


def read_slot_record(cur: Cursor) -> SlotRecord:
    player_id     = cur.u8()
    cur.skip(1)
    status        = cur.u8()
    computer_flag = cur.u8()
    team_id       = cur.u8()
    color         = cur.u8()
    race_flag     = cur.u8()
    ai_strength   = cur.u8()
    handicap_flag = cur.u8()
    return SlotRecord(player_id, status, computer_flag, team_id, color,
                      race_flag, ai_strength, handicap_flag)


def decode_game_info(cur: Cursor) -> GameInfo:
    """Decode from the start of the decompressed buffer up to the event stream."""
    cur.u32()
    cur.u8()                        # host record marker
    players = [read_player_record(cur)]
    game_name = cur.cstring()
    private   = cur.cstring()
    metadata  = decode_map_metadata(demask(cur.cbytes()))
    cur.skip(12)

    while cur.u8() == PLAYER_RECORD:
        players.append(read_player_record(cur))
        cur.u32()
    cur.pos -= 1

    reforged: list = []
    if cur.peek_u8() != GAME_START_RECORD:
        reforged = read_reforged_records(cur)
    else:
        cur.skip(1)

    cur.skip(2)
    slots = [read_slot_record(cur) for _ in range(cur.u8())]
    random_seed      = cur.u32()
    select_mode      = cur.u8()
    start_spot_count = cur.u8()

    log.debug('Roster: %d classic, %d reforged, %d slots',
              len(players), len(reforged), len(slots))
    return GameInfo(
        player_records=tuple(players),
        reforged_player_records=tuple(reforged),
        game_name=game_name,
        private_string=private,
        metadata=metadata,
        slot_records=tuple(slots),
        random_seed=random_seed,
        select_mode=select_mode,
        start_spot_count=start_spot_count,
    )

"""
Warcraft III (.w3g) replay decoder.

Pipeline
────────
  container   tag + header + subheader, zlib blocks  →  one event buffer
  game info   host player, map settings, roster, slot table   (roster.py)
  game data   opcode stream until the end of the buffer       (gamedata.py)

One cursor is handed from stage to stage over the event buffer; each stage
starts exactly where the previous one stopped.  Any decode error aborts the
whole parse.
"""
import logging
import os
import time
from dataclasses import asdict, dataclass, field

from .container import Header, SubHeader, decompress_blocks, read_container
from .cursor import Cursor
from .gamedata import decode_events, iter_events
from .metadata import MapMetadata
from .roster import decode_game_info

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserResult:
    header: Header
    subheader: SubHeader
    metadata: MapMetadata
    slot_records: tuple
    player_records: tuple
    reforged_player_records: tuple
    game_name: str = ''
    random_seed: int = 0
    select_mode: int = 0
    start_spot_count: int = 0
    chat_messages: tuple = ()
    leave_events: tuple = ()
    event_count: int = 0
    duration_ms: int = 0
    events: tuple = ()
    timings: dict = field(default_factory=dict, compare=False)


def _ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 3)


def parse_w3g(data: bytes, keep_events: bool = False) -> ParserResult:
    """
    Decode a complete replay held in memory.

    ``timings`` on the result holds the wall time of each stage in
    milliseconds.  With ``keep_events`` every decoded event is retained in
    ``events``; otherwise only chat and leave-game events are kept.
    """
    timings = {}

    t0 = time.perf_counter()
    container = read_container(data)
    buf = decompress_blocks(container.blocks)
    timings['container'] = _ms(t0)

    t0 = time.perf_counter()
    cur = Cursor(buf)
    info = decode_game_info(cur)
    timings['game_info'] = _ms(t0)

    t0 = time.perf_counter()
    event_start = cur.pos
    summary = decode_events(cur)
    events: tuple = ()
    if keep_events:
        events = tuple(iter_events(Cursor(buf, event_start)))
    timings['game_data'] = _ms(t0)

    log.debug('Decoded %d bytes (%d events) in %s', len(buf),
              summary.event_count, timings)
    return ParserResult(
        header=container.header,
        subheader=container.subheader,
        metadata=info.metadata,
        slot_records=info.slot_records,
        player_records=info.player_records,
        reforged_player_records=info.reforged_player_records,
        game_name=info.game_name,
        random_seed=info.random_seed,
        select_mode=info.select_mode,
        start_spot_count=info.start_spot_count,
        chat_messages=summary.chat_messages,
        leave_events=summary.leave_events,
        event_count=summary.event_count,
        duration_ms=summary.duration_ms,
        events=events,
        timings=timings,
    )


def load_w3g(path: str, keep_events: bool = False) -> ParserResult:
    with open(path, 'rb') as f:
        data = f.read()
    return parse_w3g(data, keep_events)


def _jsonable(v):
    if isinstance(v, bytes):
        return v.hex()
    if isinstance(v, dict):
        return {k: _jsonable(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    return v


def result_to_dict(result: ParserResult) -> dict:
    """JSON-friendly view of a result; bytes become hex strings."""
    d = _jsonable(asdict(result))
    for ev, src in zip(d['events'], result.events):
        ev['kind'] = type(src).__name__
    return d


def replay_summary(result: ParserResult, filename: str = '') -> str:
    """Short human-readable description used by the CLI."""
    m = result.metadata
    players = [p.name for p in result.player_records]
    players += [p.name for p in result.reforged_player_records
                if p.name not in players]
    secs = result.subheader.replay_length_ms // 1000
    lines = [
        f'File:      {os.path.basename(filename)}' if filename else None,
        f'Game:      {result.subheader.game_identifier} '
        f'v{result.subheader.version} build {result.subheader.build_no}',
        f'Length:    {secs // 60}m {secs % 60}s',
        f'Map:       {m.map}',
        f'Creator:   {m.creator}',
        f'Players:   {", ".join(players)}',
        f'Slots:     {len(result.slot_records)}',
        f'Chat:      {len(result.chat_messages)} message(s)',
    ]
    return '\n'.join(l for l in lines if l is not None)

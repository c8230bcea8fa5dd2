"""
Replay event stream: everything after the slot table.

Each record starts with a one-byte opcode.  Only chat, leave-game and time
slots are decoded; the other known opcodes have a fixed or length-prefixed
size and are skipped.  An unknown opcode consumes nothing beyond itself and
scanning resumes at the next byte.  There is no end marker: the stream ends
with the buffer.
"""
import struct
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .cursor import Cursor

# ── Opcodes ────────────────────────────────────────────────────────────────────

OP_LEAVE_GAME   = 0x17
OP_UNKNOWN_1A   = 0x1a
OP_UNKNOWN_1B   = 0x1b
OP_UNKNOWN_1C   = 0x1c
OP_TIMESLOT     = 0x1f
OP_CHAT         = 0x20
OP_UNKNOWN_22   = 0x22
OP_UNKNOWN_23   = 0x23
OP_UNKNOWN_2F   = 0x2f

# Fixed payload sizes of opcodes that are skipped whole
FIXED_SKIP = {
    OP_UNKNOWN_1A: 4,
    OP_UNKNOWN_1B: 4,
    OP_UNKNOWN_1C: 4,
    OP_UNKNOWN_23: 10,
    OP_UNKNOWN_2F: 8,
}

CHAT_FLAG_EXTRA = 0x20          # message carries a recipient mask


# ── Events ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TimeSlot:
    offset: int
    time_ms: int
    byte_count: int
    time_increment: Optional[int]


@dataclass(frozen=True)
class LeaveGame:
    offset: int
    time_ms: int
    reason: int
    player_id: int
    result: int


@dataclass(frozen=True)
class ChatMessage:
    offset: int
    time_ms: int
    declared_length: int        # advisory only; text is read up to 0x00
    flags: int
    recipient_mask: Optional[int]
    text: str


@dataclass(frozen=True)
class SkippedEvent:
    offset: int
    time_ms: int
    opcode: int
    size: int


@dataclass(frozen=True)
class UnknownOpcode:
    offset: int
    time_ms: int
    opcode: int


GameDataEvent = Union[TimeSlot, LeaveGame, ChatMessage, SkippedEvent, UnknownOpcode]


@dataclass(frozen=True)
class EventSummary:
    chat_messages: tuple
    leave_events: tuple
    event_count: int
    duration_ms: int


# ── Handlers ───────────────────────────────────────────────────────────────────

def _timeslot(cur: Cursor, offset: int, t: int) -> TimeSlot:
    n = cur.u16()
    payload = cur.read(n)
    inc = struct.unpack_from('<H', payload)[0] if n >= 2 else None
    return TimeSlot(offset, t, n, inc)


def _leave_game(cur: Cursor, offset: int, t: int) -> LeaveGame:
    reason = cur.u32()
    pid    = cur.u8()
    result = cur.u32()
    cur.skip(4)
    return LeaveGame(offset, t, reason, pid, result)


def _chat(cur: Cursor, offset: int, t: int) -> ChatMessage:
    declared = cur.u8()
    flags    = cur.u8()
    mask     = cur.u32() if flags == CHAT_FLAG_EXTRA else None
    return ChatMessage(offset, t, declared, flags, mask, cur.cstring())


def _length_prefixed(cur: Cursor, offset: int, t: int) -> SkippedEvent:
    n = cur.u8()
    cur.skip(n)
    return SkippedEvent(offset, t, OP_UNKNOWN_22, n + 1)


_HANDLERS = {
    OP_TIMESLOT:   _timeslot,
    OP_LEAVE_GAME: _leave_game,
    OP_CHAT:       _chat,
    OP_UNKNOWN_22: _length_prefixed,
}


# ── Public API ─────────────────────────────────────────────────────────────────

def iter_events(cur: Cursor) -> Iterator[GameDataEvent]:
    """
    Yield one event per opcode until the cursor reaches the end of its
    buffer.  ``time_ms`` is the game time accumulated from the time slots
    seen so far.
    """
    t = 0
    while cur.remaining > 0:
        offset = cur.pos
        op = cur.u8()
        handler = _HANDLERS.get(op)
        if handler is not None:
            ev = handler(cur, offset, t)
            if isinstance(ev, TimeSlot) and ev.time_increment is not None:
                t += ev.time_increment
        elif op in FIXED_SKIP:
            cur.skip(FIXED_SKIP[op])
            ev = SkippedEvent(offset, t, op, FIXED_SKIP[op])
        else:
            ev = UnknownOpcode(offset, t, op)
        yield ev


def decode_events(cur: Cursor) -> EventSummary:
    """Walk the whole stream, keeping chat and leave-game events."""
    chat: list = []
    leaves: list = []
    count = 0
    t = 0
    for ev in iter_events(cur):
        count += 1
        t = ev.time_ms
        if isinstance(ev, ChatMessage):
            chat.append(ev)
        elif isinstance(ev, LeaveGame):
            leaves.append(ev)
        elif isinstance(ev, TimeSlot) and ev.time_increment is not None:
            t += ev.time_increment
    return EventSummary(tuple(chat), tuple(leaves), count, t)

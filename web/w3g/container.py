"""
Outer .w3g container: tag string, header, subheader and compressed blocks.

File layout
───────────
  cstring  tag            "Warcraft III recorded game\\x1a"  (discarded)
  i32      header size
  Header     16 bytes     compressed size, header version,
                          decompressed size, block count
  SubHeader  20 bytes     game id (4 chars), version, build no,
                          2 reserved, duration ms, 4 reserved
  Blocks until EOF:
    u16  size
    i16  reserved
    u16  decompressed size
    i32  reserved
    i16  reserved
    <size bytes of zlib data>

Each block is an independent zlib stream.  Their outputs are concatenated
in file order; block boundaries mean nothing after that.
"""
import logging
import zlib
from dataclasses import dataclass

from .cursor import Cursor
from .errors import DecompressionFailure, UnsupportedEncoding

log = logging.getLogger(__name__)

BLOCK_HEADER_SIZE = 12


@dataclass(frozen=True)
class Header:
    compressed_size: int
    header_version: int
    decompressed_size: int
    compressed_data_blocks: int


@dataclass(frozen=True)
class SubHeader:
    game_identifier: str
    version: int
    build_no: int
    replay_length_ms: int


@dataclass(frozen=True)
class DataBlock:
    size: int
    decompressed_size: int
    content: bytes


@dataclass(frozen=True)
class Container:
    tag: str
    header: Header
    subheader: SubHeader
    blocks: tuple


def read_header(cur: Cursor) -> Header:
    header = Header(
        compressed_size=cur.i32(),
        header_version=cur.i32(),
        decompressed_size=cur.i32(),
        compressed_data_blocks=cur.i32(),
    )
    if header.compressed_data_blocks < 0 or header.decompressed_size < 0:
        raise UnsupportedEncoding(f'Implausible header: {header}')
    return header


def read_subheader(cur: Cursor) -> SubHeader:
    game_identifier = cur.read(4).decode('ascii', errors='replace')
    version  = cur.i32()
    build_no = cur.i16()
    cur.skip(2)
    length   = cur.i32()
    cur.skip(4)
    return SubHeader(game_identifier, version, build_no, length)


def read_blocks(cur: Cursor) -> list:
    """Read raw blocks until the buffer is exhausted."""
    blocks = []
    while cur.remaining > 0:
        size = cur.u16()
        cur.i16()
        decompressed_size = cur.u16()
        cur.i32()
        cur.i16()
        blocks.append(DataBlock(size, decompressed_size, cur.read(size)))
    return blocks


def read_container(data: bytes) -> Container:
    cur = Cursor(data)
    tag = cur.cstring()
    cur.i32()                       # header size
    header    = read_header(cur)
    subheader = read_subheader(cur)
    blocks    = read_blocks(cur)
    if len(blocks) != header.compressed_data_blocks:
        log.warning('Header declares %d data blocks, found %d',
                    header.compressed_data_blocks, len(blocks))
    return Container(tag, header, subheader, tuple(blocks))


def inflate_block(block: DataBlock, index: int = 0) -> bytes:
    """
    Inflate one block.  A stream cut short before its final deflate block
    yields whatever was produced; a corrupt stream is fatal.
    """
    d = zlib.decompressobj()
    try:
        return d.decompress(block.content) + d.flush()
    except zlib.error as e:
        raise DecompressionFailure(index, str(e)) from e


def decompress_blocks(blocks) -> bytes:
    out = b''.join(inflate_block(b, i) for i, b in enumerate(blocks))
    log.debug('Inflated %d blocks into %d bytes', len(blocks), len(out))
    return out

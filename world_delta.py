'''
world_delta.py -- messages that keep a client's terrain in step with the server, and
the compact little-endian binary codec used to send them

Layout:
    Block       u8 block tag
    Chunk       u64 chunk_number, CHUNK_HEIGHT*CHUNK_WIDTH cell bytes (0xFF = empty)
    Terrain     u32 chunk count, chunks
    WorldDelta  u8 variant
                0 NewChunks     Terrain
                1 BlockDelete   u64 chunk_number, u32 x, u32 y
'''
from __future__ import annotations

from dataclasses import dataclass
import struct

import numpy

from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
from blocks import Block, BlockType, VALID_CELL
from terrain import Chunk, Terrain
import logutil

NEW_CHUNKS = 0
BLOCK_DELETE = 1

CELLS = CHUNK_WIDTH * CHUNK_HEIGHT
_U8 = struct.Struct('<B')
_U32 = struct.Struct('<I')
_U64 = struct.Struct('<Q')
_BLOCK_DELETE = struct.Struct('<QII')
CHUNK_SIZE = _U64.size + CELLS


class CodecError(ValueError):
    '''
    bytes could not be encoded/decoded as a world message
    '''


@dataclass
class NewChunks:
    '''
    a baseline: complete chunks the receiver should (re)place in its terrain
    '''
    terrain: Terrain


@dataclass
class BlockDelete:
    '''
    a single block removal inside one chunk (blocks are never added at runtime)
    '''
    chunk_number: int
    x: int
    y: int


class _Reader(object):
    def __init__(self, data):
        self.data = memoryview(bytes(data))
        self.pos = 0

    def take(self, size):
        if self.pos + size > len(self.data):
            raise CodecError(f"truncated message: need {size} bytes at offset {self.pos}, have {len(self.data) - self.pos}")
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def unpack(self, fmt):
        return fmt.unpack(self.take(fmt.size))

    def finish(self):
        if self.pos != len(self.data):
            raise CodecError(f"{len(self.data) - self.pos} trailing bytes after message")


def _pack(fmt, *values):
    try:
        return fmt.pack(*values)
    except struct.error as ex:
        raise CodecError(f"value out of range for wire format: {values}") from ex


def encode_block(block):
    return _pack(_U8, int(block.block_type))


def _read_block(reader):
    (tag,) = reader.unpack(_U8)
    try:
        return Block(BlockType(tag))
    except ValueError as ex:
        raise CodecError(f"unknown block tag {tag}") from ex


def decode_block(data):
    reader = _Reader(data)
    block = _read_block(reader)
    reader.finish()
    return block


def encode_chunk(chunk):
    blocks = numpy.ascontiguousarray(chunk.blocks, dtype=numpy.uint8)
    if blocks.shape != (CHUNK_HEIGHT, CHUNK_WIDTH):
        raise CodecError(f"chunk {chunk.chunk_number} has grid shape {blocks.shape}")
    return _pack(_U64, chunk.chunk_number) + blocks.tobytes()


def _read_chunk(reader):
    (chunk_number,) = reader.unpack(_U64)
    cells = numpy.frombuffer(reader.take(CELLS), dtype=numpy.uint8)
    if not VALID_CELL[cells].all():
        raise CodecError(f"chunk {chunk_number} holds unknown block tags")
    return Chunk(chunk_number, cells.reshape((CHUNK_HEIGHT, CHUNK_WIDTH)).copy())


def decode_chunk(data):
    reader = _Reader(data)
    chunk = _read_chunk(reader)
    reader.finish()
    return chunk


def encode_terrain(terrain):
    parts = [_pack(_U32, len(terrain.chunks))]
    parts.extend(encode_chunk(chunk) for chunk in terrain.chunks)
    return b''.join(parts)


def _read_terrain(reader):
    (count,) = reader.unpack(_U32)
    remaining = len(reader.data) - reader.pos
    if count * CHUNK_SIZE > remaining:
        raise CodecError(f"terrain claims {count} chunks but only {remaining} bytes follow")
    terrain = Terrain.empty()
    for _ in range(count):
        chunk = _read_chunk(reader)
        if chunk.chunk_number in terrain:
            raise CodecError(f"chunk {chunk.chunk_number} appears twice in terrain")
        terrain.add_chunk(chunk)
    return terrain


def decode_terrain(data):
    reader = _Reader(data)
    terrain = _read_terrain(reader)
    reader.finish()
    return terrain


def encode_delta(delta):
    if isinstance(delta, NewChunks):
        return _pack(_U8, NEW_CHUNKS) + encode_terrain(delta.terrain)
    if isinstance(delta, BlockDelete):
        if not 0 <= delta.x < CHUNK_WIDTH or not 0 <= delta.y < CHUNK_HEIGHT:
            raise CodecError(f"block delete position ({delta.x}, {delta.y}) outside chunk")
        return _pack(_U8, BLOCK_DELETE) + _pack(_BLOCK_DELETE, delta.chunk_number, delta.x, delta.y)
    raise CodecError(f"not a world delta: {delta!r}")


def decode_delta(data):
    reader = _Reader(data)
    (variant,) = reader.unpack(_U8)
    if variant == NEW_CHUNKS:
        delta = NewChunks(_read_terrain(reader))
    elif variant == BLOCK_DELETE:
        chunk_number, x, y = reader.unpack(_BLOCK_DELETE)
        if x >= CHUNK_WIDTH or y >= CHUNK_HEIGHT:
            raise CodecError(f"block delete position ({x}, {y}) outside chunk")
        delta = BlockDelete(chunk_number, x, y)
    else:
        raise CodecError(f"unknown world delta variant {variant}")
    reader.finish()
    return delta


def encoding_sizes():
    '''
    (block, empty chunk, one chunk terrain) encoded sizes in bytes
    '''
    block = len(encode_block(Block(BlockType.Limestone)))
    chunk = len(encode_chunk(Chunk.empty(0)))
    terrain = len(encode_terrain(Terrain([Chunk.empty(0)])))
    return block, chunk, terrain


def log_encoding_sizes():
    block, chunk, terrain = encoding_sizes()
    logutil.log("CODEC", f"a limestone block is {block} byte(s)")
    logutil.log("CODEC", f"a default chunk is {chunk} bytes")
    logutil.log("CODEC", f"a default terrain with 1 chunk is {terrain} bytes")

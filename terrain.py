'''
terrain.py -- chunk grids and the ordered chunk collection each side of the game holds
'''
import numpy

from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
from blocks import Block, BlockType, EMPTY_CELL, VALID_CELL


class DestroyBlockError(Exception):
    '''
    a block could not be destroyed; the subclass says why
    '''
    def __init__(self, x, y, msg=None):
        self.x = x
        self.y = y
        super().__init__(msg or f"{self.__class__.__name__} at ({x}, {y})")


class InvalidX(DestroyBlockError):
    '''tried to reach past the chunk width'''


class ChunkNotLoaded(DestroyBlockError):
    '''the chunk holding this row has not been generated/received'''


class BlockDoesntExist(DestroyBlockError):
    '''the cell is already empty'''


def chunk_depth_for_position(y):
    '''
    chunk number a player at world height `y` is in; world y grows upward and chunk
    depth grows downward, so anything above the surface is chunk 0
    '''
    depth = -y
    if depth <= 0:
        return 0
    return int(depth) // CHUNK_HEIGHT


def split_row(y):
    """Global row -> (chunk number, row inside the chunk)."""
    return y // CHUNK_HEIGHT, y % CHUNK_HEIGHT


class Chunk(object):
    '''
    A CHUNK_HEIGHT x CHUNK_WIDTH slab of blocks; row 0 is the shallowest.
    `blocks` is a uint8 grid indexed [row, column] holding block tags or EMPTY_CELL.
    '''
    def __init__(self, chunk_number, blocks=None):
        if blocks is None:
            blocks = numpy.full((CHUNK_HEIGHT, CHUNK_WIDTH), EMPTY_CELL, dtype=numpy.uint8)
        else:
            blocks = numpy.asarray(blocks, dtype=numpy.uint8)
            if blocks.shape != (CHUNK_HEIGHT, CHUNK_WIDTH):
                raise ValueError(f"chunk grid must be {CHUNK_HEIGHT}x{CHUNK_WIDTH}, got {blocks.shape}")
            if not VALID_CELL[blocks].all():
                raise ValueError("chunk grid holds values that are not block types")
        self.chunk_number = int(chunk_number)
        self.blocks = blocks

    @classmethod
    def empty(cls, chunk_number):
        return cls(chunk_number)

    def get_block(self, x, y):
        value = self.blocks[y, x]
        if value == EMPTY_CELL:
            return None
        return Block(int(value))

    def set_block(self, x, y, block):
        if block is None:
            self.blocks[y, x] = EMPTY_CELL
        else:
            self.blocks[y, x] = int(block.block_type)

    def clear_block(self, x, y):
        '''
        empty the cell and return the block that was there (None if it was empty)
        '''
        previous = self.get_block(x, y)
        self.blocks[y, x] = EMPTY_CELL
        return previous

    def iter_blocks(self):
        '''
        yields (x, y, Block) for every filled cell
        '''
        rows, cols = numpy.nonzero(self.blocks != EMPTY_CELL)
        for y, x in zip(rows.tolist(), cols.tolist()):
            yield x, y, Block(int(self.blocks[y, x]))

    def count(self, block_type=None):
        if block_type is None:
            return int(numpy.count_nonzero(self.blocks != EMPTY_CELL))
        return int(numpy.count_nonzero(self.blocks == int(BlockType(block_type))))

    def copy(self):
        return Chunk(self.chunk_number, self.blocks.copy())

    def __eq__(self, other):
        if not isinstance(other, Chunk):
            return NotImplemented
        return self.chunk_number == other.chunk_number and numpy.array_equal(self.blocks, other.blocks)

    __hash__ = None

    def __repr__(self):
        return f'Chunk({self.chunk_number}, {self.count()} blocks)'


class Terrain(object):
    '''
    Chunks known to one side of the game, kept in the order they were added.
    On the server this is the entire world (chunk numbers 0..len-1); on a client it is
    whatever part of the world has been received; in a message it is a baseline.
    '''
    def __init__(self, chunks=()):
        self.chunks = []
        self._index = {}
        for chunk in chunks:
            self.add_chunk(chunk)

    @classmethod
    def empty(cls):
        return cls()

    def __len__(self):
        return len(self.chunks)

    def __iter__(self):
        return iter(self.chunks)

    def __contains__(self, chunk_number):
        return chunk_number in self._index

    def chunk_numbers(self):
        return [c.chunk_number for c in self.chunks]

    def get_chunk(self, chunk_number):
        return self._index.get(chunk_number)

    def add_chunk(self, chunk):
        '''
        add `chunk`, replacing a chunk with the same number in place
        '''
        existing = self._index.get(chunk.chunk_number)
        if existing is not None:
            self.chunks[self.chunks.index(existing)] = chunk
        else:
            self.chunks.append(chunk)
        self._index[chunk.chunk_number] = chunk

    def get_block(self, x, y):
        if not 0 <= x < CHUNK_WIDTH or y < 0:
            return None
        chunk_number, row = split_row(y)
        chunk = self._index.get(chunk_number)
        if chunk is None:
            return None
        return chunk.get_block(x, row)

    def block_exists(self, x, y):
        return self.get_block(x, y) is not None

    def destroy_block(self, x, y):
        '''
        clear the block at global column `x`, global row `y` and return it;
        raises a DestroyBlockError subclass if there is nothing to destroy
        '''
        if not 0 <= x < CHUNK_WIDTH:
            raise InvalidX(x, y)
        if y < 0:
            raise ChunkNotLoaded(x, y)
        chunk_number, row = split_row(y)
        chunk = self._index.get(chunk_number)
        if chunk is None:
            raise ChunkNotLoaded(x, y)
        block = chunk.clear_block(x, row)
        if block is None:
            raise BlockDoesntExist(x, y)
        return block

    def clear(self):
        self.chunks = []
        self._index = {}

    def __eq__(self, other):
        if not isinstance(other, Terrain):
            return NotImplemented
        return self.chunks == other.chunks

    __hash__ = None

    def describe(self):
        return f"terrain has {len(self.chunks)} chunks: {', '.join(str(n) for n in self.chunk_numbers())}"

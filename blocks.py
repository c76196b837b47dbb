import enum
import numpy

# Grid value of an empty cell. Block type tags are 0..15, so 0xFF never collides.
EMPTY_CELL = 0xFF


class BlockType(enum.IntEnum):
    '''
    A distinct type of block, with its own texture.
    The integer value is the block's one byte tag on the wire and in chunk grids.
    '''
    # primary blocks
    Sand = 0
    Limestone = 1
    Basalt = 2
    Granite = 3
    Diabase = 4
    Gabbro = 5
    # "ores"
    Clay = 6
    Coal = 7
    Iron = 8
    Quartz = 9
    Labradorite = 10
    Peridot = 11
    # markers and decoration
    CaveVoid = 12
    PalmTreeBlock = 13
    Leaves = 14
    Trunk = 15

    @property
    def asset_name(self):
        """File name of the image displayed for this block ("" for cave void)."""
        return BLOCK_ASSET[self]

    @property
    def is_real_block(self):
        return bool(BLOCK_REAL[self])


PRIMARY_BLOCKS = (BlockType.Sand, BlockType.Limestone, BlockType.Basalt,
                  BlockType.Granite, BlockType.Diabase, BlockType.Gabbro)
ORE_BLOCKS = (BlockType.Clay, BlockType.Coal, BlockType.Iron,
              BlockType.Quartz, BlockType.Labradorite, BlockType.Peridot)

BLOCK_ASSET = {bt: ('' if bt == BlockType.CaveVoid else bt.name + '.png') for bt in BlockType}
BLOCK_REAL = numpy.array([bt not in (BlockType.CaveVoid, BlockType.PalmTreeBlock) for bt in BlockType],
                         dtype=numpy.uint8)
# Lookup table: is this grid value a valid cell (a block tag or EMPTY_CELL)?
VALID_CELL = numpy.zeros(256, dtype=bool)
VALID_CELL[[int(bt) for bt in BlockType]] = True
VALID_CELL[EMPTY_CELL] = True


class Block(object):
    '''
    One block stored in a chunk. Only the type matters to generation and the wire
    format; presentation handles live in the presentation side table.
    '''
    __slots__ = ('block_type',)

    def __init__(self, block_type):
        self.block_type = BlockType(block_type)

    # simple comparison, useful for testing
    def __eq__(self, other):
        if not isinstance(other, Block):
            return NotImplemented
        return self.block_type == other.block_type

    def __hash__(self):
        return hash(self.block_type)

    def __repr__(self):
        return f'Block({self.block_type.name})'

    @classmethod
    def default(cls):
        return cls(BlockType.Sand)

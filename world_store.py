'''
world_store.py -- the server's authoritative terrain: grows lazily below the players
and is only ever changed by destroying single blocks
'''
from mapgen import ChunkBuilder
from terrain import Terrain, split_row, chunk_depth_for_position
import delve_config
import logutil
import world_delta


class TerrainStore(object):
    '''
    Owns the server side Terrain. Chunk numbers are always exactly 0..len-1: chunks are
    appended in increasing order, never removed or reordered.

    Only the server loop mutates a store; it has no locking of its own.
    '''
    def __init__(self, seed=None, builder=None, chunks_ahead=None):
        if builder is None:
            builder = ChunkBuilder(seed)
        if chunks_ahead is None:
            chunks_ahead = getattr(delve_config, 'GEN_CHUNKS_AHEAD', 3)
        self.builder = builder
        self.seed = builder.seed
        self.chunks_ahead = chunks_ahead
        self.terrain = Terrain.empty()

    def __len__(self):
        return len(self.terrain)

    @property
    def highest_chunk_number(self):
        '''
        number of the deepest generated chunk, None if nothing is generated yet
        '''
        if len(self.terrain) == 0:
            return None
        return len(self.terrain) - 1

    def create_world(self):
        '''
        start of a session: the surface chunk plus the chunk beneath it
        '''
        logutil.log("WORLD", f"creating terrain on server, seed {self.seed}")
        self.terrain.clear()
        return self.generate_through(1)

    def destroy_world(self, handles=None):
        '''
        end of a session: drop every chunk (and its presentation handles, if any)
        '''
        logutil.log("WORLD", "destroying world")
        if handles is not None:
            handles.clear()
        self.terrain.clear()

    def generate_through(self, chunk_number):
        '''
        append chunks until `chunk_number` exists; returns the new chunks
        '''
        new_chunks = []
        while len(self.terrain) <= chunk_number:
            chunk = self.builder.build(len(self.terrain))
            self.terrain.add_chunk(chunk)
            new_chunks.append(chunk)
        if new_chunks:
            logutil.log("WORLD", f"generated chunks {new_chunks[0].chunk_number}..{new_chunks[-1].chunk_number}")
        return new_chunks

    def ensure_generated_ahead(self, player_depths):
        '''
        make sure chunks depth..depth+GEN_CHUNKS_AHEAD-1 exist for every player depth,
        generating the missing ones in increasing order; returns the new chunks
        '''
        depths = list(player_depths)
        if not depths:
            return []
        target = max(depths) + self.chunks_ahead - 1
        return self.generate_through(target)

    def ensure_generated_for_positions(self, player_ys):
        '''
        same as ensure_generated_ahead, for players' vertical world coordinates
        '''
        return self.ensure_generated_ahead(chunk_depth_for_position(y) for y in player_ys)

    def get_chunk(self, chunk_number):
        return self.terrain.get_chunk(chunk_number)

    def get_block(self, x, y):
        return self.terrain.get_block(x, y)

    def block_exists(self, x, y):
        return self.terrain.block_exists(x, y)

    def destroy_block(self, x, y):
        '''
        clear the block at global column `x`, global row `y` and return the old block;
        raises InvalidX, ChunkNotLoaded or BlockDoesntExist
        '''
        return self.terrain.destroy_block(x, y)

    def destroy_block_delta(self, x, y):
        '''
        destroy a block and return (block, BlockDelete delta to broadcast)
        '''
        block = self.destroy_block(x, y)
        chunk_number, row = split_row(y)
        return block, world_delta.BlockDelete(chunk_number, x, row)

    def baseline(self, chunk_numbers=None):
        '''
        NewChunks delta of the whole terrain, or of the listed chunks
        '''
        if chunk_numbers is None:
            chunks = list(self.terrain.chunks)
        else:
            chunks = [self.terrain.get_chunk(n) for n in chunk_numbers if n in self.terrain]
        return world_delta.NewChunks(Terrain(chunks))

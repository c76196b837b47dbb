import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
from blocks import Block, BlockType
from terrain import (Chunk, Terrain, InvalidX, ChunkNotLoaded, BlockDoesntExist, DestroyBlockError,
                     chunk_depth_for_position)
from world_store import TerrainStore
import world_delta


class RecordingBuilder(object):
    '''cheap stand-in for ChunkBuilder: solid limestone chunks, remembers build order'''
    seed = 99

    def __init__(self):
        self.built = []

    def build(self, chunk_number):
        self.built.append(chunk_number)
        chunk = Chunk.empty(chunk_number)
        chunk.blocks[:] = int(BlockType.Limestone)
        return chunk


def _assert_no_gaps(store):
    assert store.terrain.chunk_numbers() == list(range(len(store)))


def test_create_world_makes_surface_and_first_chunk():
    store = TerrainStore(82981925813)
    store.create_world()
    assert store.terrain.chunk_numbers() == [0, 1]
    assert store.highest_chunk_number == 1


def test_destroy_block_contract():
    store = TerrainStore(82981925813)
    store.create_world()
    x, y = 0, CHUNK_HEIGHT - 1 #bottom row of the surface chunk is always solid
    expected = store.get_block(x, y)
    assert expected is not None
    block = store.destroy_block(x, y)
    assert block == expected
    assert store.get_block(x, y) is None
    assert not store.block_exists(x, y)
    with pytest.raises(BlockDoesntExist):
        store.destroy_block(x, y)
    with pytest.raises(InvalidX):
        store.destroy_block(CHUNK_WIDTH, y)
    with pytest.raises(ChunkNotLoaded):
        store.destroy_block(0, 2 * CHUNK_HEIGHT)
    with pytest.raises(ChunkNotLoaded):
        store.destroy_block(0, 1000 * CHUNK_HEIGHT + 5)


def test_destroy_errors_share_a_base_class():
    terrain = Terrain([Chunk.empty(0)])
    for x, y in ((CHUNK_WIDTH, 0), (0, CHUNK_HEIGHT), (3, 3)):
        with pytest.raises(DestroyBlockError):
            terrain.destroy_block(x, y)


def test_destroy_block_maps_rows_into_chunks():
    terrain = Terrain([Chunk.empty(0), Chunk.empty(1)])
    terrain.get_chunk(1).set_block(7, 5, Block(BlockType.Iron))
    assert terrain.destroy_block(7, CHUNK_HEIGHT + 5) == Block(BlockType.Iron)
    assert terrain.get_chunk(1).get_block(7, 5) is None


def test_destroy_block_delta():
    store = TerrainStore(builder=RecordingBuilder())
    store.create_world()
    block, delta = store.destroy_block_delta(12, CHUNK_HEIGHT + 9)
    assert block == Block(BlockType.Limestone)
    assert delta == world_delta.BlockDelete(1, 12, 9)


def test_ensure_generated_ahead_grows_without_gaps():
    builder = RecordingBuilder()
    store = TerrainStore(builder=builder)
    store.create_world()
    depths = [0, 5, 2]
    new_chunks = store.ensure_generated_ahead(depths)
    assert [c.chunk_number for c in new_chunks] == list(range(2, 8))
    _assert_no_gaps(store)
    for d in depths:
        for n in range(d, d + 3):
            assert n in store.terrain
    assert builder.built == sorted(builder.built), "chunks must be built in increasing order"
    assert store.ensure_generated_ahead([3]) == []
    assert store.ensure_generated_ahead([]) == []
    assert len(store) == 8


def test_ensure_generated_ahead_from_empty_store():
    store = TerrainStore(builder=RecordingBuilder())
    store.ensure_generated_ahead([0])
    assert store.terrain.chunk_numbers() == [0, 1, 2]


def test_ensure_generated_ahead_far_below():
    store = TerrainStore(builder=RecordingBuilder())
    store.create_world()
    store.ensure_generated_ahead([20])
    _assert_no_gaps(store)
    assert store.highest_chunk_number == 22


def test_ensure_generated_for_positions():
    store = TerrainStore(builder=RecordingBuilder())
    store.ensure_generated_for_positions([50.0, -4.5 * CHUNK_HEIGHT])
    assert store.highest_chunk_number == 6
    _assert_no_gaps(store)


def test_ensure_generated_ahead_with_real_chunks():
    store = TerrainStore(82981925813)
    store.create_world()
    store.ensure_generated_ahead([1, 3])
    _assert_no_gaps(store)
    assert store.highest_chunk_number == 5


def test_chunk_depth_for_position():
    assert chunk_depth_for_position(10.0) == 0
    assert chunk_depth_for_position(0) == 0
    assert chunk_depth_for_position(-1) == 0
    assert chunk_depth_for_position(-CHUNK_HEIGHT) == 1
    assert chunk_depth_for_position(-2.1 * CHUNK_HEIGHT) == 2


def test_baseline_and_destroy_world():
    store = TerrainStore(builder=RecordingBuilder())
    store.create_world()
    baseline = store.baseline()
    assert baseline.terrain.chunk_numbers() == [0, 1]
    assert store.baseline([1, 7]).terrain.chunk_numbers() == [1]
    store.destroy_world()
    assert len(store) == 0
    assert store.highest_chunk_number is None


def test_terrain_add_chunk_replaces_in_place():
    terrain = Terrain([Chunk.empty(4), Chunk.empty(2)])
    replacement = Chunk.empty(4)
    replacement.set_block(0, 0, Block(BlockType.Gabbro))
    terrain.add_chunk(replacement)
    assert terrain.chunk_numbers() == [4, 2]
    assert terrain.get_block(0, 4 * CHUNK_HEIGHT) == Block(BlockType.Gabbro)


def test_chunk_rejects_bad_grids():
    with pytest.raises(ValueError):
        Chunk(0, [[0] * 3])
    blocks = Chunk.empty(0).blocks.copy()
    blocks[0, 0] = 200
    with pytest.raises(ValueError):
        Chunk(0, blocks)

import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from blocks import Block, BlockType, EMPTY_CELL, VALID_CELL, PRIMARY_BLOCKS, ORE_BLOCKS


def test_block_tags_fit_in_one_byte_and_skip_empty():
    tags = [int(bt) for bt in BlockType]
    assert tags == list(range(16))
    assert EMPTY_CELL not in tags
    assert VALID_CELL.sum() == len(tags) + 1


def test_asset_names_and_real_blocks():
    assert BlockType.CaveVoid.asset_name == ""
    assert BlockType.Granite.asset_name
    assert not BlockType.CaveVoid.is_real_block
    assert not BlockType.PalmTreeBlock.is_real_block
    for bt in PRIMARY_BLOCKS + ORE_BLOCKS + (BlockType.Leaves, BlockType.Trunk):
        assert bt.is_real_block, bt


def test_block_equality_is_by_type():
    assert Block(BlockType.Iron) == Block(8)
    assert Block(BlockType.Iron) != Block(BlockType.Coal)
    assert len({Block(BlockType.Iron), Block(BlockType.Iron)}) == 1
    assert Block.default() == Block(BlockType.Sand)

'''
seeding.py -- derives independent, reproducible seeds for each randomized
generation step from the world's base seed
'''
import hashlib
import struct

U64_MASK = (1 << 64) - 1

# Feature tags keep the seeds of different generation steps apart.
# They are part of the world format: changing one changes every world.
# Vein seeds are [chunk] and [chunk, vein_index]; a vein index is always below
# the binomial trial count, so every tag sits above FEATURE_TAG_BASE and a
# [chunk, tag] seed can never equal a [chunk, vein_index] one.
FEATURE_TAG_BASE = 1 << 32
BIOME_TAG = FEATURE_TAG_BASE + 777
BIOME_DEPTH_TAG = FEATURE_TAG_BASE + 432
BIOME_CURVE_TAG = FEATURE_TAG_BASE + 234
CAVE_TAG = FEATURE_TAG_BASE + 1025
CAVE_DETAIL_TAG = FEATURE_TAG_BASE + 1026
TREE_TAG = FEATURE_TAG_BASE + 5150
SURFACE_HILL_TAG = FEATURE_TAG_BASE + 16
SURFACE_SAND_TAG = FEATURE_TAG_BASE + 31
SURFACE_TREE_TAG = FEATURE_TAG_BASE + 8

FEATURE_TAGS = (BIOME_TAG, BIOME_DEPTH_TAG, BIOME_CURVE_TAG, CAVE_TAG, CAVE_DETAIL_TAG,
                TREE_TAG, SURFACE_HILL_TAG, SURFACE_SAND_TAG, SURFACE_TREE_TAG)


def derive(base_seed, extra=()):
    """Hash `base_seed` followed by every value of `extra` (in order) into one
    unsigned 64 bit seed. Order matters: derive(s, [a, b]) != derive(s, [b, a])."""
    h = hashlib.blake2b(digest_size=8)
    h.update(struct.pack('<Q', base_seed & U64_MASK))
    for value in extra:
        h.update(struct.pack('<Q', value & U64_MASK))
    return int.from_bytes(h.digest(), 'little')

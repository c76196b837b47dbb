'''
biomes.py -- which rock style each chunk is made of, and where inside a chunk one
style gives way to the next
'''
import enum

import numpy

from blocks import BlockType
import delve_config
import logutil
import seeding
import value_curves


class Biome(enum.Enum):
    Sand = 0
    Sedimentary = 1
    Basalt = 2
    Felsic = 3
    Mafic = 4
    Ultramafic = 5

    @property
    def primary_block(self):
        return BIOME_PRIMARY[self]

    @property
    def ore_block(self):
        return BIOME_ORE[self]


BIOME_PRIMARY = {
    Biome.Sand: BlockType.Sand,
    Biome.Sedimentary: BlockType.Limestone,
    Biome.Basalt: BlockType.Basalt,
    Biome.Felsic: BlockType.Granite,
    Biome.Mafic: BlockType.Diabase,
    Biome.Ultramafic: BlockType.Gabbro,
}

BIOME_ORE = {
    Biome.Sand: BlockType.Clay,
    Biome.Sedimentary: BlockType.Coal,
    Biome.Basalt: BlockType.Iron,
    Biome.Felsic: BlockType.Quartz,
    Biome.Mafic: BlockType.Labradorite,
    Biome.Ultramafic: BlockType.Peridot,
}

DEFAULT_BIOME = Biome.Sand
BIOMES = list(Biome)


class BiomeSequencer(object):
    '''
    Decides per chunk whether a new biome starts there. A chunk without a transition
    continues the last biome started above it; the answer for each chunk is cached the
    first time it is needed, so the backward walk runs once per depth.
    '''
    def __init__(self, seed, change_chance=None):
        if change_chance is None:
            change_chance = getattr(delve_config, 'BIOME_CHANGE_CHANCE', 0.25)
        self.seed = seed
        self.change_chance = change_chance
        self._resolved = {} #chunk_number -> biome in effect at the bottom of that chunk

    def maybe_transition(self, chunk_number):
        '''
        the biome that starts in `chunk_number`, or None if the chunk keeps the previous one
        '''
        if chunk_number == 0:
            return None #the surface has its own fixed layering
        rng = numpy.random.default_rng(seeding.derive(self.seed, [chunk_number, seeding.BIOME_TAG]))
        if rng.random() >= self.change_chance:
            return None
        return BIOMES[int(rng.integers(0, len(BIOMES)))]

    def biome_at(self, chunk_number):
        """Biome in effect at the bottom of `chunk_number`."""
        if chunk_number < 0:
            return DEFAULT_BIOME
        if chunk_number in self._resolved:
            return self._resolved[chunk_number]
        # walk back to the deepest cached (or first) chunk, then fill the cache downwards
        start = chunk_number
        while start > 0 and (start - 1) not in self._resolved:
            start -= 1
        biome = self._resolved.get(start - 1, DEFAULT_BIOME)
        for n in range(start, chunk_number + 1):
            change = self.maybe_transition(n)
            if change is not None:
                biome = change
            self._resolved[n] = biome
        return biome

    def previous_biome(self, chunk_number):
        return self.biome_at(chunk_number - 1)

    def boundary_rows(self, chunk_number):
        '''
        row, per column, at which the new biome takes over inside the chunk
        '''
        lo, hi = delve_config.BIOME_CHANGE_DEPTH
        average = int(value_curves.sample(
            seeding.derive(self.seed, [chunk_number, seeding.BIOME_DEPTH_TAG]), 1, lo, hi)[0])
        depths = value_curves.sample(
            seeding.derive(self.seed, [chunk_number, seeding.BIOME_CURVE_TAG]),
            delve_config.BIOME_CHANGE_SAMPLES, average - 2, average + 2)
        return value_curves.curve_rows(depths)

    def resolve(self, chunk_number):
        '''
        (previous biome, new biome, boundary row per column) for a chunk
        '''
        prev_biome = self.previous_biome(chunk_number)
        new_biome = self.biome_at(chunk_number)
        rows = self.boundary_rows(chunk_number)
        logutil.log("MAPGEN", f"chunk {chunk_number} has biome change from {prev_biome.name} to {new_biome.name} "
                    f"between rows {int(rows.min())} and {int(rows.max())}", level="DEBUG")
        return prev_biome, new_biome, rows

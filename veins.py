'''
veins.py -- ore veins: line segments of ore cutting through one or two chunks
'''
from __future__ import annotations

from dataclasses import dataclass

import numpy

from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
import delve_config
import logutil
import seeding


class ConfigurationError(Exception):
    '''
    raised at startup when generator constants describe an impossible distribution
    '''


@dataclass
class Vein:
    ore_type: str
    chunk_number: int
    start_x: int
    start_y: int
    end_x: int #signed, may leave the chunk
    end_y: int #signed, may run into the next chunk down
    thickness_sq: float #squared thickness, so no square roots are needed


def validate_vein_distribution(trials, average_veins):
    """Return the binomial success probability, raising ConfigurationError if
    the vein count distribution can't be built from these constants."""
    if trials <= 0:
        raise ConfigurationError(f"vein trial count must be positive, got {trials}")
    p = average_veins / trials
    if not 0.0 <= p <= 1.0:
        raise ConfigurationError(f"vein probability {p} out of range (average {average_veins} over {trials} cells)")
    return p


def distance_to_vein(vein, x, y):
    '''
    squared distance from point (x, y) to the vein's segment; `x` and `y` may be numpy
    arrays. y is measured in rows from the top of the vein's origin chunk.
    '''
    sx, sy = float(vein.start_x), float(vein.start_y)
    dx = float(vein.end_x) - sx
    dy = float(vein.end_y) - sy
    px = numpy.asarray(x, dtype=numpy.float64) - sx
    py = numpy.asarray(y, dtype=numpy.float64) - sy
    seg_len_sq = dx * dx + dy * dy
    if seg_len_sq == 0.0:
        return px * px + py * py
    t = numpy.clip((px * dx + py * dy) / seg_len_sq, 0.0, 1.0)
    ox = px - t * dx
    oy = py - t * dy
    return ox * ox + oy * oy


class VeinGenerator(object):
    def __init__(self, seed, average_veins=None):
        if average_veins is None:
            average_veins = getattr(delve_config, 'AVERAGE_VEINS_PER_CHUNK', 8)
        self.seed = seed
        self.trials = CHUNK_WIDTH * CHUNK_HEIGHT
        self.probability = validate_vein_distribution(self.trials, average_veins)

    def count_seed(self, chunk_number):
        return seeding.derive(self.seed, [chunk_number])

    def vein_seed(self, chunk_number, vein_index):
        return seeding.derive(self.seed, [chunk_number, vein_index])

    def vein_count(self, chunk_number):
        rng = numpy.random.default_rng(self.count_seed(chunk_number))
        return int(rng.binomial(self.trials, self.probability))

    def make_vein(self, chunk_number, vein_index):
        rng = numpy.random.default_rng(self.vein_seed(chunk_number, vein_index))
        start_x = int(rng.integers(0, CHUNK_WIDTH))
        start_y = int(rng.integers(0, CHUNK_HEIGHT))
        length_x = int(rng.integers(*delve_config.VEIN_LENGTH_X))
        if rng.random() < 0.5:
            length_x = -length_x
        # veins only ever point down, away from the shallower chunk
        drop_y = int(rng.integers(*delve_config.VEIN_DROP_Y))
        thickness_sq = float(rng.uniform(*delve_config.VEIN_THICKNESS_SQ))
        return Vein('primary', chunk_number, start_x, start_y,
                    start_x + length_x, start_y + drop_y, thickness_sq)

    def veins_for(self, chunk_number):
        count = self.vein_count(chunk_number)
        logutil.log("MAPGEN", f"chunk {chunk_number} has {count} veins", level="DEBUG")
        return [self.make_vein(chunk_number, n) for n in range(count)]

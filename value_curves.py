'''
value_curves.py -- smooth 1D curves interpolated from a handful of seeded random
control points (hill silhouettes, sand depth, biome boundaries)
'''
import math
import numpy

from delve_config import CHUNK_WIDTH


def sample(seed, count, low, high):
    """Return `count` seeded random integers in [low, high)."""
    rng = numpy.random.default_rng(seed)
    return rng.integers(low, high, size=count, dtype=numpy.int64)


def evaluate(x, control_points):
    """
    Value of the curve through `control_points` at column `x`.

    The column is scaled into control point space, then the two neighbouring
    points are blended with the smoothstep weight u = d*d*(3-2d).
    """
    n = len(control_points)
    x_scaled = x / (CHUNK_WIDTH // n + 1)
    i = int(x_scaled)
    d = x_scaled - i
    if i + 1 >= n:
        raise ValueError(f"column {x} maps past the last of {n} control points")
    u = d * d * (3.0 - 2.0 * d)
    return float(control_points[i]) * (1.0 - u) + float(control_points[i + 1]) * u


def round_half_up(value):
    """Round halves away from zero so curve values land on the same rows everywhere."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def curve_rows(control_points, width=CHUNK_WIDTH):
    """Integer row for every column: the rounded curve value minus one."""
    return numpy.array([round_half_up(evaluate(x, control_points)) - 1 for x in range(width)],
                       dtype=numpy.int64)

#
# Seeded N-D simplex noise, vectorized with numpy, and the cave field built on it.
#
# Based on example code by Stefan Gustavson (stegu@itn.liu.se).
# Better rank ordering method by Stefan Gustavson in 2012.
#
# This code was placed in the public domain by its original author,
# Stefan Gustavson. You may use it as you see fit, but
# attribution is appreciated.
#
import itertools
import numpy

from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
import delve_config
import seeding


# returns floor of floating point array by coercing to integer
def fastfloor(x):
    return numpy.array(numpy.floor(x), dtype=numpy.int64)


class SimplexNoise:
    def __init__(self, seed):
        rng = numpy.random.default_rng(seed)
        p = rng.permutation(256)
        # To remove the need for index wrapping, double the permutation table length
        perm0 = numpy.arange(512, dtype='i2')
        self.perm0 = p[perm0 & 255]

    def noise(self, Z):
        '''
        noise values in roughly [-1, 1] for the points in `Z` (shape (count, dims))
        '''
        N = Z.shape[-1] #number of dimensions
        Fn = 1.0*((N+1)**0.5 - 1)/N
        Gn = 1.0*((N+1) - (N+1)**0.5)/N/(N+1)

        #skew the Z data and store in z0
        s = Z.sum(-1) * Fn
        i = fastfloor(Z + s[:, numpy.newaxis])
        t = i.sum(-1) * Gn # Factor for unskewing
        Z0 = i - t[:, numpy.newaxis]
        z0 = Z - Z0
        # only the hashing is wrapped, distances use the true cell origin
        i = numpy.mod(i, 256)

        # Use magnitude ordering to determine the simplices that the point z0 is located in
        rank = numpy.zeros(Z.shape)
        for l, k in itertools.combinations(range(N), 2):
            rank[:, k] += z0[:, k] >= z0[:, l]
            rank[:, l] += z0[:, k] < z0[:, l]

        # ind will contain the skewed indices of the N+1 simplices
        b = numpy.arange(N+1)[:, numpy.newaxis, numpy.newaxis]
        ind = rank >= N - b
        # zk contains the skewed locations of the N+1 simplices
        zk = z0 - ind + 1.0 * b * Gn

        indi = ind + i
        # the gradients are randomly assigned to each simplex
        grad = ((0, -1, 1),)*N
        grad = numpy.array(list(itertools.product(*grad))[1:])
        grad = grad[numpy.abs(grad).sum(-1) >= N-1]

        gik = 0
        for x in range(N-1, -1, -1):
            gik = self.perm0[indi[:, :, x] + gik]
        gik = gik % (grad.shape[0])
        # Calculate the contribution from the simplices
        tk = 0.5 - (zk*zk).sum(-1)
        tp = tk >= 0
        tk = tp * tk * tk
        nk = tp * tk * tk * (grad[gik]*zk).sum(-1)

        # Sum up and scale the result to cover the range [-1,1]
        return nk.sum(0) * (2**6)


CHUNK_GRID = numpy.mgrid[0:CHUNK_HEIGHT, 0:CHUNK_WIDTH] #(row, column) of every cell


class CaveNoiseField(object):
    '''
    2D noise over world space; a chunk's slice of it decides where caves are carved.
    The field is continuous across chunk borders so caves run from one chunk into the next.
    '''
    def __init__(self, seed, step=None, detail_weight=None):
        if step is None:
            step = getattr(delve_config, 'CAVE_NOISE_STEP', 24.0)
        if detail_weight is None:
            detail_weight = getattr(delve_config, 'CAVE_DETAIL_WEIGHT', 0.35)
        self.noise = SimplexNoise(seeding.derive(seed, [0, seeding.CAVE_TAG]))
        self.detail = SimplexNoise(seeding.derive(seed, [0, seeding.CAVE_DETAIL_TAG]))
        self.step = float(step)
        self.detail_weight = float(detail_weight)

    def __call__(self, chunk_number):
        '''
        noise values indexed [row, column] for chunk `chunk_number`
        '''
        rows, cols = CHUNK_GRID
        world_rows = rows + chunk_number * CHUNK_HEIGHT
        Z = numpy.stack([cols.ravel(), world_rows.ravel()], axis=-1).astype(numpy.float64) / self.step
        N = self.noise.noise(Z)
        if self.detail_weight:
            N = (N + self.detail_weight * self.detail.noise(Z * 2.0)) / (1.0 + self.detail_weight)
        return N.reshape((CHUNK_HEIGHT, CHUNK_WIDTH))

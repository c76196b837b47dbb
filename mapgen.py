#std/external libs
import numpy

#local libs
from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
from blocks import BlockType, EMPTY_CELL
from biomes import Biome, BiomeSequencer
from cave_noise import CaveNoiseField, CHUNK_GRID
from terrain import Chunk
from veins import VeinGenerator, distance_to_vein
import delve_config
import logutil
import seeding
import value_curves

TRUNK = int(BlockType.Trunk)
LEAVES = int(BlockType.Leaves)
PALM = int(BlockType.PalmTreeBlock)


def structure_fit(blocks, x, y):
    '''
    True if the leaf footprint of a tree whose crown starts at row `y` and whose trunk
    is in column x-2 is clear (columns x-1 and x-3, rows y..y+2)
    '''
    if x > 4 and x < CHUNK_WIDTH:
        for row in (y, y + 1, y + 2):
            if blocks[row, x - 3] != EMPTY_CELL or blocks[row, x - 1] != EMPTY_CELL:
                return False
        return True
    return False


class ChunkBuilder(object):
    '''
    Builds chunks as a pure function of (seed, chunk number).

    Deep chunks are layered:
        base rock of the previous/new biome split by a smooth boundary curve
        ore veins from this chunk and the one above
        caves carved by the noise field (always wins)
        trees rooted in cave floors of the biome's primary rock
    Chunk 0 is the surface: hills of sand over sedimentary rock, with palm trees.
    '''

    def __init__(self, seed=None):
        if seed is None:
            seed = delve_config.BASE_SEED
        self.seed = seed
        self.biomes = BiomeSequencer(seed)
        self.veins = VeinGenerator(seed)
        self.caves = CaveNoiseField(seed)
        self.cave_threshold = getattr(delve_config, 'CAVE_THRESHOLD', 0.25)

    def build(self, chunk_number):
        if chunk_number == 0:
            return self.build_surface()
        return self.build_deep(chunk_number)

    def _vein_mask(self, veins, chunk_number):
        '''
        boolean grid, True where any vein from this chunk or the one above passes
        '''
        rows, cols = CHUNK_GRID
        mask = numpy.zeros((CHUNK_HEIGHT, CHUNK_WIDTH), dtype=bool)
        for vein in veins:
            if vein.chunk_number not in (chunk_number, chunk_number - 1):
                continue
            # vein coordinates are relative to the top of its origin chunk
            y_offset = CHUNK_HEIGHT if chunk_number > vein.chunk_number else 0
            dist = distance_to_vein(vein, cols, rows + y_offset)
            mask |= dist < vein.thickness_sq / 2.0
        return mask

    def build_deep(self, chunk_number):
        prev_biome, new_biome, boundary = self.biomes.resolve(chunk_number)

        rows, cols = CHUNK_GRID
        below = rows >= boundary[numpy.newaxis, :]
        primary = numpy.where(below, int(new_biome.primary_block), int(prev_biome.primary_block)).astype(numpy.uint8)
        ore = numpy.where(below, int(new_biome.ore_block), int(prev_biome.ore_block)).astype(numpy.uint8)

        veins = self.veins.veins_for(chunk_number - 1) + self.veins.veins_for(chunk_number)
        in_vein = self._vein_mask(veins, chunk_number)
        blocks = numpy.where(in_vein, ore, primary).astype(numpy.uint8)

        carved = self.caves(chunk_number) > self.cave_threshold
        blocks[carved] = EMPTY_CELL

        trees = self._place_trees(blocks, carved, primary)
        logutil.log("MAPGEN", f"built chunk {chunk_number}: {prev_biome.name}->{new_biome.name}, "
                    f"{len(veins)} veins, {int(carved.sum())} cave cells, {trees} trees", level="DEBUG")
        return Chunk(chunk_number, blocks)

    def tree_top(self, x, ceiling, floor):
        """Row above the crown of a tree found at column `x`, somewhere in [ceiling, floor)."""
        #adding x varies trees with the same ceiling and floor
        return int(value_curves.sample(seeding.derive(self.seed, [x, seeding.TREE_TAG]), 2, ceiling, floor)[0])

    def _place_trees(self, blocks, carved, primary):
        '''
        Walk the carved cells column by column, top to bottom, growing a tree up from
        each cave floor that has room. Trees read cells written by earlier trees, so
        this pass has to stay sequential.
        '''
        placed = 0
        for x in range(5, CHUNK_WIDTH):
            for y in numpy.nonzero(carved[:, x])[0].tolist():
                if not (y > 4 and y < CHUNK_HEIGHT - 1):
                    continue
                #the tree grows in column x-2, rooted on the primary rock below this row
                if blocks[y + 1, x - 2] != primary[y, x]:
                    continue
                #see how tall the tree can be
                top = 0
                for height in range(y, -1, -1):
                    if blocks[height, x - 2] != EMPTY_CELL:
                        top = height
                        break
                if y - top > 2:
                    top = self.tree_top(x, top, y)
                if y - top > 2 and structure_fit(blocks, x, top):
                    # 02220
                    # 02120
                    # 00100
                    # 00100
                    blocks[top + 1:y + 1, x - 2] = TRUNK
                    blocks[top + 1, x - 3:x] = LEAVES
                    blocks[top + 2, x - 1] = LEAVES
                    blocks[top + 2, x - 3] = LEAVES
                    placed += 1
        return placed

    def build_surface(self):
        '''
        chunk 0: sand hills over sedimentary rock, with the odd palm tree on top
        '''
        hills = value_curves.sample(seeding.derive(self.seed, [0, seeding.SURFACE_HILL_TAG]),
                                    delve_config.SURFACE_HILL_SAMPLES, *delve_config.SURFACE_HILL_RANGE)
        sand_depths = value_curves.sample(seeding.derive(self.seed, [0, seeding.SURFACE_SAND_TAG]),
                                          delve_config.SURFACE_SAND_SAMPLES, *delve_config.SURFACE_SAND_RANGE)
        tree_rolls = value_curves.sample(seeding.derive(self.seed, [0, seeding.SURFACE_TREE_TAG]),
                                         CHUNK_WIDTH, 0, delve_config.PALM_TREE_ODDS)
        hill_top = value_curves.curve_rows(hills)
        sand_depth = value_curves.curve_rows(sand_depths)

        rows, cols = CHUNK_GRID
        sandy = rows <= sand_depth[numpy.newaxis, :]
        primary = numpy.where(sandy, int(Biome.Sand.primary_block), int(Biome.Sedimentary.primary_block))
        ore = numpy.where(sandy, int(Biome.Sand.ore_block), int(Biome.Sedimentary.ore_block))

        in_vein = self._vein_mask(self.veins.veins_for(0), 0)
        filled = numpy.where(in_vein, ore, primary)
        ground = rows >= hill_top[numpy.newaxis, :]
        blocks = numpy.where(ground, filled, EMPTY_CELL).astype(numpy.uint8)

        palms = numpy.nonzero(tree_rolls == 1)[0]
        blocks[hill_top[palms] - 1, palms] = PALM
        logutil.log("MAPGEN", f"built surface chunk with {len(palms)} palm trees", level="DEBUG")
        return Chunk(0, blocks)

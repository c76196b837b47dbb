# Size of chunks: every chunk is a horizontal slab of the world.
CHUNK_WIDTH = 128 #columns (x)
CHUNK_HEIGHT = 64 #rows (y), row 0 is the shallowest

# How many chunks should always exist at and below the deepest player.
GEN_CHUNKS_AHEAD = 3

# Everything generated is a pure function of this seed plus chunk/vein indices.
BASE_SEED = 82981925813

# Cave carving: noise above the threshold becomes void.
# Increase for smaller caves, decrease for bigger caves.
CAVE_THRESHOLD = 0.25
# Blocks per noise lattice step (larger values give wider caves).
CAVE_NOISE_STEP = 24.0
# Weight of the second, finer noise octave.
CAVE_DETAIL_WEIGHT = 0.35

# Ore veins: target mean of the binomial vein count per chunk.
AVERAGE_VEINS_PER_CHUNK = 8
VEIN_LENGTH_X = (10, 32)
VEIN_DROP_Y = (5, 16)
VEIN_THICKNESS_SQ = (1.0, 3.0)

# Chance that a chunk starts a new biome.
BIOME_CHANGE_CHANCE = 0.25
# Range of the average row at which a biome change happens inside a chunk.
BIOME_CHANGE_DEPTH = (3, 10)
BIOME_CHANGE_SAMPLES = 64

# Surface chunk shape.
SURFACE_HILL_SAMPLES = 16
SURFACE_HILL_RANGE = (3, 16) #peaks as high as 16 blocks
SURFACE_SAND_SAMPLES = 32
SURFACE_SAND_RANGE = (16, 31)
# One palm tree per PALM_TREE_ODDS columns on average.
PALM_TREE_ODDS = CHUNK_WIDTH // 8

# Size of one block in presentation units.
BLOCK_PIXELS = 32

SERVER_IP = 'localhost'
SERVER_PORT = 20226
SERVER_AUTHKEY = b'password'

TICKS_PER_SEC = 20
# Give up waiting for network activity after this long so ticks keep running.
SELECT_TIMEOUT = 1.0 / TICKS_PER_SEC

# Enable ANSI colors in logs.
LOG_COLOR = True
LOG_LEVEL = 'INFO'
# Log every server tick (very chatty).
LOG_TICK_LOOP = False

"""
Tuning constants shared across floatsim.

Everything here is a plain module-level value; classes that use one accept a
keyword override so scenarios and tests can change it per instance.
"""

# Physical constants
GRAVITY_M_S2 = 9.8  # m/s², Earth preset

# =============================================================================
# TOLERANCES
# =============================================================================

TOLERANCE = 1e-4           # m, "fully submerged" and readout snapping
HEIGHT_TOLERANCE = 1e-4    # m, widest acceptable bracket when the height search runs out of iterations
VOLUME_TOLERANCE = 1e-10   # m³, residual at which the height search stops
VOLUME_EPSILON = 1e-12     # m³, below this a basin counts as empty/full
DEFAULT_MAX_ITERATIONS = 40

# Containment slip: lets a body that has sunk slightly into a basin floor
# still count as inside that basin.
SLIP = 0.01  # m

# =============================================================================
# POOL
# =============================================================================

POOL_VOLUME = 0.15  # m³, capacity
POOL_WIDTH = 0.9    # m
POOL_DEPTH = 0.4    # m
POOL_HEIGHT = POOL_VOLUME / POOL_WIDTH / POOL_DEPTH
DESIRED_STARTING_POOL_VOLUME = 0.1  # m³

# =============================================================================
# BOAT
# =============================================================================

ONE_LITER = 0.001  # m³
BOAT_MIN_VOLUME = 0.005   # m³
BOAT_MAX_VOLUME = 0.03    # m³
BOAT_DEFAULT_VOLUME = 0.01  # m³

# Fill/spill rate, as a fraction of the boat's displaced volume per second
BOAT_FILL_SPEED = 0.5

# A boat carrying liquid spills once its rim is this fraction of the boat's
# height above the surrounding liquid surface.
SPILL_HEIGHT_RATIO = 0.9

# =============================================================================
# MASSES
# =============================================================================

MIN_SHAPE_DIMENSION = 0.1              # m
MAX_SHAPE_DIMENSION = 0.01 ** (1 / 3)  # m, edge of a 10 L cube

MAX_VELOCITY = 5.0  # m/s

# Viscous damping tuning (per-body drag, not a viscosity field)
VISCOSITY_REFERENCE = 0.03
VISCOSITY_EXPONENT = 0.8
VISCOSITY_FORCE_SCALE = 3000.0
VISCOSITY_MASS_CUTOFF = 0.5  # kg
VISCOSITY_SUBMERGED_RATIO = 0.2
VISCOSITY_MULTIPLIER = 1.0

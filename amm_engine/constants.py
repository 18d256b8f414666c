"""Engine constants.

Fixed-point scaling and the iteration/hop bounds that double as the only
termination guarantees of the pricing and routing code.
"""

# Fixed-point divisor for Rate (18 decimal places, raw value fits in u128)
DIV = 10**18

# Largest raw value a Rate or a reserve may hold
U128_MAX = 2**128 - 1

# Newton-Raphson iteration cap for the invariant solver
N_MAX = 255

# Successive solver estimates within one unit are considered converged
CONVERGENCE_EPSILON = 1

# Default hop cap for best-route search
MAX_HOPS = 3

# Largest hop cap a config may set; search cost grows factorially with it
MAX_HOPS_LIMIT = 4

# Hop cap for caller-supplied routes
MAX_ROUTE_LENGTH = 3

# Default swap fee: 0.3% expressed as a raw Rate
DEFAULT_FEE_RAW = 3 * 10**15

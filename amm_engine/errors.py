"""Exception taxonomy for the AMM engine.

Every failure is raised before any write to pool state or balances, so a
caught error always leaves the store and ledger untouched.
"""


class AmmError(Exception):
    """Base error for all engine operations."""

    pass


# =============================================================================
# Fixed-point math
# =============================================================================


class MathError(AmmError):
    """Fixed-point conversion or power computation failed."""

    pass


class ArithmeticOverflow(MathError):
    """Result does not fit the 128-bit fixed-point representation."""

    pass


class ArithmeticUnderflow(MathError):
    """Result would be negative in an unsigned representation."""

    pass


class InvalidBase(MathError):
    """Power base must be non-negative and finite."""

    pass


# =============================================================================
# Swaps
# =============================================================================


class SwapError(AmmError):
    """A swap quote could not be produced."""

    pass


class AssetNotInPool(SwapError):
    """The asset is neither the base nor the quote asset of the pool."""

    pass


class PoolInactive(SwapError):
    """At least one reserve is zero; the pool cannot be traded against."""

    pass


class InsufficientLiquidity(SwapError):
    """The swap would drain the output reserve to zero or below."""

    pass


class SolverDidNotConverge(SwapError):
    """The invariant solver's final step exceeded the accepted tolerance."""

    def __init__(self, y_diff: int, tolerance: int) -> None:
        super().__init__(f"Solver did not converge: y_diff={y_diff} > tolerance={tolerance}")
        self.y_diff = y_diff
        self.tolerance = tolerance


class ZeroAmount(SwapError):
    """Swap amount must be positive."""

    pass


class InvalidFeeRate(SwapError):
    """Fee rate must be in range [0, 1)."""

    pass


# =============================================================================
# Routing
# =============================================================================


class RouterError(AmmError):
    """A route could not be found or executed."""

    pass


class NoRouteExists(RouterError):
    """No path connects the two assets within the hop bound."""

    pass


class InvalidInput(RouterError):
    """Zero amount, or input and output asset are the same."""

    pass


class EmptyRoute(RouterError):
    """A route must contain at least one hop."""

    pass


class ExceedMaxLengthRoute(RouterError):
    """The route has more hops than allowed."""

    pass


class DuplicatedRoute(RouterError):
    """The route traverses the same pool more than once."""

    pass


class NotSupportedRoute(RouterError):
    """The route uses a pair for which no pool exists."""

    pass


class InsufficientOutput(RouterError):
    """The realized output is below the caller's minimum."""

    def __init__(self, amount_out: int, min_amount_out: int) -> None:
        super().__init__(f"Output {amount_out} is below minimum {min_amount_out}")
        self.amount_out = amount_out
        self.min_amount_out = min_amount_out


# =============================================================================
# Pool storage
# =============================================================================


class StoreError(AmmError):
    """Pool storage operation failed."""

    pass


class PoolDoesNotExist(StoreError):
    """No pool is stored for the requested pair."""

    pass


class PoolAlreadyExists(StoreError):
    """A pool is already stored for the pair."""

    pass


class PoolAssetMismatch(StoreError):
    """The pool record does not match its key, or swaps base and quote."""

    pass


# =============================================================================
# Balance transfers
# =============================================================================


class TransferError(AmmError):
    """A balance transfer failed; balances are unchanged."""

    pass


class InsufficientBalance(TransferError):
    """The sending account does not hold enough of the asset."""

    pass

"""Pool record and asset identifiers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TypeAlias

from amm_engine.curves.base import Curve
from amm_engine.curves.constant_product import CONSTANT_PRODUCT
from amm_engine.errors import AssetNotInPool
from amm_engine.math.fixed_point import Rate
from amm_engine.safe_int import S

# Opaque, totally ordered asset identifier
AssetId: TypeAlias = int


@dataclass(frozen=True)
class Pool:
    """Two-reserve liquidity pool.

    The persisted fields are base_amount, quote_amount and pool_assets, in
    that order. base_asset and quote_asset are fixed at creation and never
    swapped. curve and fee_rate are the pool's pricing configuration; a
    pool without a fee_rate uses the caller's (or the engine default) fee.
    """

    base_asset: AssetId
    quote_asset: AssetId
    base_amount: int
    quote_amount: int
    pool_assets: AssetId
    curve: Curve = field(default=CONSTANT_PRODUCT)
    fee_rate: Rate | None = None

    def __post_init__(self) -> None:
        if self.base_asset == self.quote_asset:
            raise ValueError(f"Pool assets must differ, got {self.base_asset} twice")
        for name in ("base_amount", "quote_amount"):
            amount = getattr(self, name)
            if not S(amount).is_u128():
                raise ValueError(f"{name} out of u128 range: {amount}")

    @property
    def pair(self) -> tuple[AssetId, AssetId]:
        return (self.base_asset, self.quote_asset)

    @property
    def is_active(self) -> bool:
        """A pool with a zero reserve cannot be traded against."""
        return self.base_amount > 0 and self.quote_amount > 0

    def has_asset(self, asset: AssetId) -> bool:
        return asset == self.base_asset or asset == self.quote_asset

    def reserve_of(self, asset: AssetId) -> int:
        if asset == self.base_asset:
            return self.base_amount
        if asset == self.quote_asset:
            return self.quote_amount
        raise AssetNotInPool(f"Asset {asset} not in pool {self.pair}")

    def other_asset(self, asset: AssetId) -> AssetId:
        if asset == self.base_asset:
            return self.quote_asset
        if asset == self.quote_asset:
            return self.base_asset
        raise AssetNotInPool(f"Asset {asset} not in pool {self.pair}")

    def with_reserves(self, asset: AssetId, reserve: int, other_reserve: int) -> Pool:
        """Return a copy with asset's reserve and the other side's reserve replaced."""
        if asset == self.base_asset:
            return replace(self, base_amount=reserve, quote_amount=other_reserve)
        if asset == self.quote_asset:
            return replace(self, base_amount=other_reserve, quote_amount=reserve)
        raise AssetNotInPool(f"Asset {asset} not in pool {self.pair}")

"""Request and response models for the query API.

Amounts cross the API as decimal strings so that u128 values survive JSON
clients that parse numbers as doubles.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from amm_engine.constants import MAX_HOPS, U128_MAX
from amm_engine.pools.types import Pool


def validate_u128(value: Any) -> str:
    """Validate that a value is a u128 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        The value as a decimal string

    Raises:
        ValueError: If value is not a non-negative integer within u128 range
    """
    if isinstance(value, bool):
        raise ValueError("U128 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"U128 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"U128 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"U128 cannot be negative: {value}")
    if int_value > U128_MAX:
        raise ValueError(f"U128 overflow: {value} > 2^128-1")
    return str(int_value)


# 128-bit unsigned amount as decimal string (validated)
Amount = Annotated[
    str,
    BeforeValidator(validate_u128),
    Field(description="128-bit unsigned integer as decimal string"),
]

AssetId = Annotated[int, Field(ge=0, description="Asset identifier")]


class PoolResponse(BaseModel):
    """A stored pool, with the persisted fields in their stored order."""

    base_asset: AssetId
    quote_asset: AssetId
    base_amount: Amount
    quote_amount: Amount
    pool_assets: AssetId
    curve: str

    @classmethod
    def from_pool(cls, pool: Pool) -> "PoolResponse":
        return cls(
            base_asset=pool.base_asset,
            quote_asset=pool.quote_asset,
            base_amount=str(pool.base_amount),
            quote_amount=str(pool.quote_amount),
            pool_assets=pool.pool_assets,
            curve=pool.curve.name,
        )


class RouteRequest(BaseModel):
    """Best-route query."""

    amount_in: Amount
    token_in: AssetId
    token_out: AssetId
    max_hops: int | None = Field(default=None, ge=1, le=MAX_HOPS)


class RouteResponse(BaseModel):
    """Best route and the output it realizes."""

    route: list[AssetId]
    amounts: list[Amount]
    amount_out: Amount


class AmountsOutRequest(BaseModel):
    """Per-hop output query along a fixed path."""

    amount_in: Amount
    path: list[AssetId] = Field(min_length=2)


class AmountsOutResponse(BaseModel):
    amounts: list[Amount]

"""Pydantic models for the HTTP API request/response payloads.

Amounts travel as decimal strings so that values beyond 2^53 survive JSON
clients; field names are camelCase on the wire.
"""

from pydantic import BaseModel, Field

from cpamm.models.types import Amount, AssetId


class AddLiquidityRequest(BaseModel):
    """Deposit both assets of a pair."""

    asset_a: AssetId = Field(alias="assetA")
    asset_b: AssetId = Field(alias="assetB")
    amount_a_desired: Amount = Field(alias="amountADesired")
    amount_b_desired: Amount = Field(alias="amountBDesired")
    amount_a_min: Amount = Field(alias="amountAMin")
    amount_b_min: Amount = Field(alias="amountBMin")
    recipient: str | None = Field(
        default=None,
        description="Provider credited with the shares. Defaults to the caller.",
    )
    deadline: int = Field(description="Unix timestamp after which the deposit is rejected.")

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    amount_a: Amount = Field(alias="amountA")
    amount_b: Amount = Field(alias="amountB")
    shares: Amount

    model_config = {"populate_by_name": True}


class RemoveLiquidityRequest(BaseModel):
    """Burn shares for a proportional slice of the reserves."""

    asset_a: AssetId = Field(alias="assetA")
    asset_b: AssetId = Field(alias="assetB")
    shares: Amount
    amount_a_min: Amount = Field(alias="amountAMin")
    amount_b_min: Amount = Field(alias="amountBMin")
    recipient: str | None = Field(
        default=None,
        description="Account receiving the assets. Defaults to the caller.",
    )
    deadline: int

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amount_a: Amount = Field(alias="amountA")
    amount_b: Amount = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Exact-input swap along a direct path [assetIn, assetOut]."""

    amount_in: Amount = Field(alias="amountIn")
    amount_out_min: Amount = Field(alias="amountOutMin")
    path: list[AssetId]
    recipient: str | None = Field(
        default=None,
        description="Account receiving the output. Defaults to the caller.",
    )
    deadline: int

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_in: Amount = Field(alias="amountIn")
    amount_out: Amount = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    asset_in: AssetId = Field(alias="assetIn")
    asset_out: AssetId = Field(alias="assetOut")
    amount_in: Amount = Field(alias="amountIn")
    amount_out: Amount = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class PriceResponse(BaseModel):
    """Spot price of assetA in units of assetB, times scale."""

    asset_a: AssetId = Field(alias="assetA")
    asset_b: AssetId = Field(alias="assetB")
    price: Amount
    scale: Amount

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str = Field(description="Stable error kind, e.g. 'slippage_exceeded'.")
    detail: str

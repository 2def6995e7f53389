"""Pydantic models for AMM data structures."""

from cpamm.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ErrorResponse,
    PriceResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapRequest,
    SwapResponse,
)
from cpamm.models.pool import PoolState, RegistrySnapshot
from cpamm.models.types import Amount, AssetId, normalize_asset

__all__ = [
    # Types
    "Amount",
    "AssetId",
    "normalize_asset",
    # Snapshots
    "PoolState",
    "RegistrySnapshot",
    # API payloads
    "AddLiquidityRequest",
    "AddLiquidityResponse",
    "RemoveLiquidityRequest",
    "RemoveLiquidityResponse",
    "SwapRequest",
    "SwapResponse",
    "PriceResponse",
    "QuoteResponse",
    "ErrorResponse",
]

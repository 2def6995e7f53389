"""Pydantic models for pool state snapshots.

Used both for persisting the registry and for the pool endpoint of the API.
"""

from pydantic import BaseModel, Field

from cpamm.models.types import Amount, AssetId


class PoolState(BaseModel):
    """Serialized state of one pool."""

    asset_a: AssetId = Field(alias="assetA", description="Asset stored in the reserveA slot.")
    asset_b: AssetId = Field(alias="assetB", description="Asset stored in the reserveB slot.")
    reserve_a: Amount = Field(alias="reserveA")
    reserve_b: Amount = Field(alias="reserveB")
    total_shares: Amount = Field(alias="totalShares")
    share_balance: dict[str, Amount] = Field(
        default_factory=dict,
        alias="shareBalance",
        description="Outstanding shares per provider.",
    )

    model_config = {"populate_by_name": True}


class RegistrySnapshot(BaseModel):
    """Serialized state of every pool in a registry."""

    version: int = 1
    canonical_pairs: bool = Field(
        default=True,
        alias="canonicalPairs",
        description="Whether pair keys were canonicalized when the snapshot was taken.",
    )
    pools: list[PoolState] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

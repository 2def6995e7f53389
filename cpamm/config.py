"""Configuration for the AMM core."""

from __future__ import annotations

import os
from dataclasses import dataclass

from cpamm.constants import PRICE_SCALE

_TRUTHY = ("true", "1", "yes")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in _TRUTHY


@dataclass(frozen=True)
class AmmConfig:
    """Centralized configuration for pool behaviour.

    Attributes:
        canonical_pairs: If True, (A, B) and (B, A) resolve to the same pool.
            If False, the pair key keeps the caller's order and mirror pairs
            are distinct pools (legacy behaviour).
        clamp_deposits: If True, deposits into a funded pool are reduced to
            the pool's current ratio before reserves are credited. If False,
            the full desired amounts are credited even though shares are
            minted for the constrained side only (legacy behaviour).
        price_scale: Fixed-point scale for spot prices (default: 1e18)
    """

    canonical_pairs: bool = True
    clamp_deposits: bool = True
    price_scale: int = PRICE_SCALE

    @classmethod
    def from_env(cls) -> AmmConfig:
        """Build a config from CPAMM_* environment variables.

        - CPAMM_CANONICAL_PAIRS: canonicalize pair keys (default: true)
        - CPAMM_CLAMP_DEPOSITS: clamp unbalanced deposits (default: true)
        """
        return cls(
            canonical_pairs=_env_flag("CPAMM_CANONICAL_PAIRS", True),
            clamp_deposits=_env_flag("CPAMM_CLAMP_DEPOSITS", True),
        )


# Default configuration instance
DEFAULT_AMM_CONFIG = AmmConfig()

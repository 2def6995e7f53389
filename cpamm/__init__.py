"""Constant-product automated market maker."""

from cpamm.amm import AutomatedMarketMaker, get_default_amm

__version__ = "0.1.0"
__all__ = ["AutomatedMarketMaker", "get_default_amm", "__version__"]

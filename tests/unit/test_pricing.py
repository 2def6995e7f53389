"""Tests for the spot price query."""

import pytest

from cpamm.amm import AutomatedMarketMaker
from cpamm.config import AmmConfig
from cpamm.constants import PRICE_SCALE
from cpamm.errors import EmptyPool, PoolNotFound, UnsupportedPath
from tests.helpers import ALICE, BOB, DAI, DEADLINE, ETH, USDC


class TestSpotPrice:
    def test_price_in_caller_order(self, seeded_amm):
        """(100 ETH, 400 USDC): one ETH is worth 4 USDC."""
        assert seeded_amm.spot_price(ETH, USDC) == 4 * PRICE_SCALE

    def test_reversed_pair(self, seeded_amm):
        assert seeded_amm.spot_price(USDC, ETH) == 25 * 10**16

    def test_price_follows_swaps(self, seeded_amm):
        seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, DEADLINE)

        # (110, 364)
        assert seeded_amm.spot_price(ETH, USDC) == 364 * PRICE_SCALE // 110

    def test_price_floors(self, amm):
        amm.add_liquidity((ETH, USDC), 3, 1, 1, 1, ALICE, ALICE, DEADLINE)
        assert amm.spot_price(ETH, USDC) == PRICE_SCALE // 3

    def test_custom_scale(self, ledger, clock, events):
        amm = AutomatedMarketMaker(
            ledger=ledger, clock=clock, events=events, config=AmmConfig(price_scale=100)
        )
        amm.add_liquidity((ETH, USDC), 100, 400, 1, 1, ALICE, ALICE, DEADLINE)
        assert amm.spot_price(ETH, USDC) == 400

    def test_unknown_pair(self, amm):
        with pytest.raises(PoolNotFound):
            amm.spot_price(ETH, DAI)
        assert len(amm.registry) == 0

    def test_same_asset(self, seeded_amm):
        with pytest.raises(UnsupportedPath):
            seeded_amm.spot_price(ETH, ETH)

    def test_emptied_pool(self, seeded_amm):
        seeded_amm.remove_liquidity((ETH, USDC), 200, 1, 1, ALICE, ALICE, DEADLINE)

        with pytest.raises(EmptyPool):
            seeded_amm.spot_price(ETH, USDC)

    def test_created_but_never_funded(self, amm):
        # A rejected swap still creates the pool record
        amm.registry.get_or_create_pool(amm.resolve_pair(ETH, DAI))

        with pytest.raises(EmptyPool):
            amm.spot_price(ETH, DAI)


class TestLegacyPairing:
    """Order-sensitive pair keys: mirror pairs are distinct pools."""

    @pytest.fixture
    def config(self) -> AmmConfig:
        return AmmConfig(canonical_pairs=False)

    def test_mirror_pair_is_a_different_pool(self, seeded_amm):
        assert seeded_amm.spot_price(ETH, USDC) == 4 * PRICE_SCALE
        with pytest.raises(PoolNotFound):
            seeded_amm.spot_price(USDC, ETH)

    def test_mirror_pair_can_be_funded_separately(self, seeded_amm):
        seeded_amm.add_liquidity((USDC, ETH), 100, 100, 1, 1, ALICE, ALICE, DEADLINE)

        assert seeded_amm.spot_price(USDC, ETH) == PRICE_SCALE
        assert seeded_amm.spot_price(ETH, USDC) == 4 * PRICE_SCALE
        assert len(seeded_amm.registry) == 2

"""Tests for the swap engine."""

import random

import pytest

from cpamm.collaborators import SwapEvent
from cpamm.errors import (
    DeadlineExpired,
    InvalidAmount,
    InvalidReserves,
    PoolNotFound,
    SlippageExceeded,
    TransferFailed,
    UnsupportedPath,
)
from cpamm.swap import Quote
from tests.helpers import ALICE, BOB, CAROL, DAI, DEADLINE, ETH, INITIAL_BALANCE, NOW, USDC


def _reserves(amm):
    pool = amm.get_pool(ETH, USDC)
    return pool.reserve_a, pool.reserve_b


class TestSwap:
    """Exact-input swaps against the (100, 400) ETH/USDC pool."""

    def test_concrete_scenario(self, seeded_amm):
        """10 ETH in pays floor(10*400/110) = 36 USDC."""
        amount_out = seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, DEADLINE)

        assert amount_out == 36
        assert _reserves(seeded_amm) == (110, 364)

    def test_reverse_direction_uses_matching_reserves(self, seeded_amm):
        """USDC in reads (400, 100), not the storage order."""
        amount_out = seeded_amm.swap(40, 0, USDC, ETH, BOB, BOB, DEADLINE)

        assert amount_out == 9  # floor(40 * 100 / 440)
        assert _reserves(seeded_amm) == (91, 440)

    def test_balances_move(self, seeded_amm, ledger):
        seeded_amm.swap(10, 0, ETH, USDC, BOB, CAROL, DEADLINE)

        assert ledger.balance_of(BOB, ETH) == INITIAL_BALANCE - 10
        assert ledger.balance_of(CAROL, USDC) == INITIAL_BALANCE + 36
        assert ledger.balance_of(seeded_amm.custody, ETH) == 110
        assert ledger.balance_of(seeded_amm.custody, USDC) == 364

    def test_shares_untouched(self, seeded_amm):
        seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, DEADLINE)

        pool = seeded_amm.get_pool(ETH, USDC)
        assert pool.total_shares == 200
        assert pool.share_balance == {ALICE: 200}

    def test_identifiers_are_normalized(self, seeded_amm):
        assert seeded_amm.swap(10, 0, "ETH", " usdc", BOB, BOB, DEADLINE) == 36

    def test_notification_emitted(self, seeded_amm, events):
        seeded_amm.swap(10, 0, ETH, USDC, BOB, CAROL, DEADLINE)

        assert events.events == [SwapEvent(BOB, ETH, USDC, 10, 36)]

    def test_notification_failure_does_not_undo_swap(self, seeded_amm, monkeypatch):
        def explode(*args):
            raise RuntimeError("sink down")

        monkeypatch.setattr(seeded_amm.swaps.events, "notify_swap", explode)

        assert seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, DEADLINE) == 36
        assert _reserves(seeded_amm) == (110, 364)

    def test_product_never_decreases(self, seeded_amm):
        rng = random.Random(99)
        seeded_amm.add_liquidity((ETH, USDC), 10**9, 4 * 10**9, 1, 1, ALICE, ALICE, DEADLINE)

        for _ in range(300):
            reserve_a, reserve_b = _reserves(seeded_amm)
            if rng.random() < 0.5:
                seeded_amm.swap(rng.randint(1, 10**8), 0, ETH, USDC, BOB, BOB, DEADLINE)
            else:
                seeded_amm.swap(rng.randint(1, 4 * 10**8), 0, USDC, ETH, BOB, BOB, DEADLINE)
            new_a, new_b = _reserves(seeded_amm)
            assert new_a * new_b >= reserve_a * reserve_b


class TestSwapFailures:
    def test_slippage(self, seeded_amm, events):
        with pytest.raises(SlippageExceeded):
            seeded_amm.swap(10, 37, ETH, USDC, BOB, BOB, DEADLINE)

        assert _reserves(seeded_amm) == (100, 400)
        assert events.events == []

    def test_exact_minimum_accepted(self, seeded_amm):
        assert seeded_amm.swap(10, 36, ETH, USDC, BOB, BOB, DEADLINE) == 36

    def test_deadline_expired(self, seeded_amm):
        with pytest.raises(DeadlineExpired):
            seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, NOW - 1)

    def test_same_asset(self, seeded_amm):
        with pytest.raises(UnsupportedPath):
            seeded_amm.swap(10, 0, ETH, ETH, BOB, BOB, DEADLINE)

    @pytest.mark.parametrize("amount_in", [0, -10])
    def test_non_positive_input(self, seeded_amm, amount_in):
        with pytest.raises(InvalidAmount):
            seeded_amm.swap(amount_in, 0, ETH, USDC, BOB, BOB, DEADLINE)

    def test_negative_minimum(self, seeded_amm):
        with pytest.raises(InvalidAmount):
            seeded_amm.swap(10, -1, ETH, USDC, BOB, BOB, DEADLINE)

    def test_empty_pool(self, amm):
        with pytest.raises(InvalidReserves):
            amm.swap(10, 0, ETH, DAI, BOB, BOB, DEADLINE)

    def test_failed_payout_refunds_input(self, seeded_amm, ledger, events):
        """The input pull is reversed when the output push fails."""
        ledger.rejected.add(("push", USDC))

        with pytest.raises(TransferFailed):
            seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, DEADLINE)

        assert _reserves(seeded_amm) == (100, 400)
        assert ledger.balance_of(BOB, ETH) == INITIAL_BALANCE
        assert ledger.balance_of(seeded_amm.custody, ETH) == 100
        assert events.events == []

    def test_ledger_exception_is_wrapped(self, seeded_amm, ledger):
        ledger.raising.add(("pull", ETH))

        with pytest.raises(TransferFailed) as exc_info:
            seeded_amm.swap(10, 0, ETH, USDC, BOB, BOB, DEADLINE)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert _reserves(seeded_amm) == (100, 400)


class TestSwapPath:
    """Path form of the swap."""

    def test_direct_path(self, seeded_amm):
        assert seeded_amm.swap_exact_tokens_for_tokens(10, 0, [ETH, USDC], BOB, BOB, DEADLINE) == 36

    @pytest.mark.parametrize("path", [[], [ETH], [ETH, USDC, DAI]])
    def test_multi_hop_unsupported(self, seeded_amm, path):
        with pytest.raises(UnsupportedPath):
            seeded_amm.swap_exact_tokens_for_tokens(10, 0, path, BOB, BOB, DEADLINE)

    def test_deadline_checked_first(self, seeded_amm):
        with pytest.raises(DeadlineExpired):
            seeded_amm.swap_exact_tokens_for_tokens(10, 0, [ETH], BOB, BOB, NOW - 1)


class TestQuotes:
    def test_quote_out(self, amm):
        assert amm.quote_out(10, 100, 400) == 36

    def test_quote_live_reserves(self, seeded_amm):
        assert seeded_amm.quote(ETH, USDC, 10) == Quote(amount_in=10, amount_out=36)
        assert seeded_amm.quote(USDC, ETH, 40) == Quote(amount_in=40, amount_out=9)

    def test_quote_does_not_mutate(self, seeded_amm):
        seeded_amm.quote(ETH, USDC, 10)
        assert _reserves(seeded_amm) == (100, 400)

    def test_quote_unknown_pair(self, amm):
        with pytest.raises(PoolNotFound):
            amm.quote(ETH, DAI, 10)
        assert len(amm.registry) == 0

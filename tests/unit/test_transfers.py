"""Tests for TransferBatch."""

import pytest

from cpamm.errors import TransferFailed
from cpamm.transfers import TransferBatch
from tests.helpers import ALICE, BOB, ETH, INITIAL_BALANCE, USDC, funded_ledger

CUSTODY = "amm"


@pytest.fixture
def ledger():
    ledger = funded_ledger()
    ledger.credit(CUSTODY, USDC, 1_000)
    return ledger


def _batch(ledger):
    return TransferBatch(ledger, CUSTODY, operation="test")


class TestTransferBatch:
    def test_transfers_in_order(self, ledger):
        with _batch(ledger) as transfers:
            transfers.pull(ETH, ALICE, 10)
            transfers.push(USDC, BOB, 20)

        assert ledger.calls == [("pull", ETH, ALICE, 10), ("push", USDC, BOB, 20)]
        assert ledger.balance_of(CUSTODY, ETH) == 10
        assert ledger.balance_of(BOB, USDC) == INITIAL_BALANCE + 20

    def test_zero_amounts_skipped(self, ledger):
        with _batch(ledger) as transfers:
            transfers.pull(ETH, ALICE, 0)
            transfers.push(USDC, BOB, 0)

        assert ledger.calls == []

    def test_refusal_compensates_in_reverse(self, ledger):
        ledger.rejected.add(("push", USDC))

        with pytest.raises(TransferFailed) as exc_info:
            with _batch(ledger) as transfers:
                transfers.pull(ETH, ALICE, 10)
                transfers.pull(USDC, ALICE, 5)
                transfers.push(USDC, BOB, 20)

        assert exc_info.value.kind == "transfer_failed"
        assert "usdc" in str(exc_info.value)
        # Refused push, then the two pulls undone newest first
        assert ledger.calls[2:] == [
            ("push", USDC, BOB, 20),
            ("push", USDC, ALICE, 5),
            ("push", ETH, ALICE, 10),
        ]
        assert ledger.balance_of(ALICE, ETH) == INITIAL_BALANCE
        assert ledger.balance_of(ALICE, USDC) == INITIAL_BALANCE
        assert ledger.balance_of(CUSTODY, ETH) == 0

    def test_ledger_error_is_wrapped(self, ledger):
        ledger.raising.add(("push", USDC))

        with pytest.raises(TransferFailed) as exc_info:
            with _batch(ledger) as transfers:
                transfers.pull(ETH, ALICE, 10)
                transfers.push(USDC, BOB, 20)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert ledger.balance_of(ALICE, ETH) == INITIAL_BALANCE

    def test_error_in_body_compensates(self, ledger):
        """Anything raised after the transfers (e.g. a failed commit) undoes them."""
        with pytest.raises(ZeroDivisionError):
            with _batch(ledger) as transfers:
                transfers.pull(ETH, ALICE, 10)
                1 // 0

        assert ledger.balance_of(ALICE, ETH) == INITIAL_BALANCE
        assert ledger.balance_of(CUSTODY, ETH) == 0

    def test_failed_compensation_continues(self, ledger):
        """A refused reversal is logged and older transfers are still undone."""
        with pytest.raises(TransferFailed):
            with _batch(ledger) as transfers:
                transfers.pull(ETH, ALICE, 10)
                transfers.pull(USDC, ALICE, 5)
                # From here on every USDC movement fails, including the reversal
                ledger.rejected.add(("push", USDC))
                transfers.push(USDC, BOB, 20)

        assert ledger.balance_of(ALICE, ETH) == INITIAL_BALANCE
        assert ledger.balance_of(ALICE, USDC) == INITIAL_BALANCE - 5

    def test_compensation_error_does_not_mask_failure(self, ledger):
        with pytest.raises(TransferFailed):
            with _batch(ledger) as transfers:
                transfers.pull(ETH, ALICE, 10)
                ledger.raising.add(("push", ETH))
                transfers.pull(USDC, ALICE, INITIAL_BALANCE + 1)

        assert ledger.balance_of(CUSTODY, ETH) == 10

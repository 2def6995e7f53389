"""Ledger calls made on behalf of a single AMM operation.

A TransferBatch runs the pulls and pushes of one operation in order. If one
of them fails, the transfers already made are compensated in reverse order
and TransferFailed is raised. Pool state is committed by the caller only
after the batch completes, so a failed transfer never leaves a partial
reserve update behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

import structlog

from cpamm.collaborators import AssetLedger
from cpamm.errors import TransferFailed

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Transfer:
    direction: str  # "pull" or "push"
    asset: str
    account: str
    amount: int


class TransferBatch:
    """Ordered ledger calls with compensation on failure.

    Usage:
        with TransferBatch(ledger, custody, operation="swap") as transfers:
            transfers.pull(asset_in, sender, amount_in)
            transfers.push(asset_out, recipient, amount_out)
            pool.commit(update)  # any exception here also compensates
    """

    def __init__(self, ledger: AssetLedger, custody: str, operation: str) -> None:
        self._ledger = ledger
        self._custody = custody
        self._operation = operation
        self._done: list[_Transfer] = []

    def __enter__(self) -> TransferBatch:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None and not isinstance(exc, TransferFailed):
            self.compensate()

    def pull(self, asset: str, source: str, amount: int) -> None:
        """Move amount of asset from source into custody.

        Raises:
            TransferFailed: If the ledger refuses or errors
        """
        self._run(_Transfer("pull", asset, source, amount))

    def push(self, asset: str, destination: str, amount: int) -> None:
        """Release amount of asset from custody to destination.

        Raises:
            TransferFailed: If the ledger refuses or errors
        """
        self._run(_Transfer("push", asset, destination, amount))

    def _run(self, transfer: _Transfer) -> None:
        if transfer.amount == 0:
            return
        try:
            ok = self._call(transfer)
        except Exception as err:
            self.compensate()
            raise TransferFailed(
                transfer.asset, transfer.account, transfer.amount, transfer.direction
            ) from err
        if not ok:
            logger.warning(
                "transfer_rejected",
                operation=self._operation,
                direction=transfer.direction,
                asset=transfer.asset,
                account=transfer.account,
                amount=transfer.amount,
            )
            self.compensate()
            raise TransferFailed(
                transfer.asset, transfer.account, transfer.amount, transfer.direction
            )
        self._done.append(transfer)

    def _call(self, transfer: _Transfer) -> bool:
        if transfer.direction == "pull":
            return self._ledger.pull(
                transfer.asset, transfer.account, self._custody, transfer.amount
            )
        return self._ledger.push(transfer.asset, transfer.account, transfer.amount)

    def _reverse(self, transfer: _Transfer) -> bool:
        if transfer.direction == "pull":
            return self._ledger.push(transfer.asset, transfer.account, transfer.amount)
        return self._ledger.pull(transfer.asset, transfer.account, self._custody, transfer.amount)

    def compensate(self) -> None:
        """Undo completed transfers, newest first.

        Compensation is best effort: a reversal the ledger refuses is logged
        and the remaining reversals are still attempted.
        """
        while self._done:
            transfer = self._done.pop()
            try:
                ok = self._reverse(transfer)
            except Exception:
                logger.exception(
                    "transfer_compensation_error",
                    operation=self._operation,
                    direction=transfer.direction,
                    asset=transfer.asset,
                    account=transfer.account,
                    amount=transfer.amount,
                )
                continue
            if not ok:
                logger.error(
                    "transfer_compensation_failed",
                    operation=self._operation,
                    direction=transfer.direction,
                    asset=transfer.asset,
                    account=transfer.account,
                    amount=transfer.amount,
                )

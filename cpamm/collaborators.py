"""Interfaces of the external collaborators the AMM core calls out to.

The core never moves assets, reads the time or delivers notifications by
itself. It talks to three collaborators:
- AssetLedger: custody and transfers, atomic per call
- Clock: current time for deadline checks
- EventSink: fire-and-forget swap notifications

Reference implementations are provided for embedding and tests.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from cpamm.constants import CUSTODY_ACCOUNT

logger = structlog.get_logger()


@runtime_checkable
class AssetLedger(Protocol):
    """Moves quantities of assets between accounts.

    Each call is all-or-nothing: it either moves the full amount and
    returns True, or moves nothing and returns False.
    """

    def pull(self, asset: str, source: str, destination: str, amount: int) -> bool:
        """Move amount of asset from source to destination."""
        ...

    def push(self, asset: str, destination: str, amount: int) -> bool:
        """Release amount of asset from AMM custody to destination."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> int:
        """Current unix timestamp in seconds."""
        ...


@runtime_checkable
class EventSink(Protocol):
    """Receives notifications about completed swaps."""

    def notify_swap(
        self,
        initiator: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        amount_out: int,
    ) -> None: ...


class SystemClock:
    """Clock backed by the host's wall time."""

    def now(self) -> int:
        return int(time.time())


class InMemoryLedger:
    """Thread-safe in-process ledger of (account, asset) balances.

    ``custody`` is the account that pull() deposits into and push() pays
    out of.
    """

    def __init__(self, custody: str = CUSTODY_ACCOUNT) -> None:
        self.custody = custody
        self._balances: dict[tuple[str, str], int] = {}
        self._lock = threading.Lock()

    def balance_of(self, account: str, asset: str) -> int:
        return self._balances.get((account, asset), 0)

    def credit(self, account: str, asset: str, amount: int) -> None:
        """Mint amount of asset into account (funding for embedding and tests)."""
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        with self._lock:
            key = (account, asset)
            self._balances[key] = self._balances.get(key, 0) + amount

    def pull(self, asset: str, source: str, destination: str, amount: int) -> bool:
        return self._move(asset, source, destination, amount)

    def push(self, asset: str, destination: str, amount: int) -> bool:
        return self._move(asset, self.custody, destination, amount)

    def _move(self, asset: str, source: str, destination: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            available = self._balances.get((source, asset), 0)
            if available < amount:
                logger.debug(
                    "ledger_insufficient_balance",
                    asset=asset,
                    account=source,
                    available=available,
                    requested=amount,
                )
                return False
            self._balances[(source, asset)] = available - amount
            dest_key = (destination, asset)
            self._balances[dest_key] = self._balances.get(dest_key, 0) + amount
        return True


@dataclass(frozen=True)
class SwapEvent:
    """A swap notification as delivered to an EventSink."""

    initiator: str
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int


class LoggingEventSink:
    """Event sink that writes swap notifications to the structured log."""

    def notify_swap(
        self,
        initiator: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        amount_out: int,
    ) -> None:
        logger.info(
            "swap",
            initiator=initiator,
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=amount_out,
        )


class RecordingEventSink:
    """Event sink that keeps every notification in memory."""

    def __init__(self) -> None:
        self.events: list[SwapEvent] = []

    def notify_swap(
        self,
        initiator: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        amount_out: int,
    ) -> None:
        self.events.append(SwapEvent(initiator, asset_in, asset_out, amount_in, amount_out))

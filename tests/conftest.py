"""Pytest configuration and fixtures."""

import pytest

from cpamm.amm import AutomatedMarketMaker
from cpamm.collaborators import RecordingEventSink
from cpamm.config import AmmConfig
from tests.helpers import ALICE, DEADLINE, ETH, USDC, FixedClock, FlakyLedger, funded_ledger


@pytest.fixture
def clock() -> FixedClock:
    """A clock frozen at NOW."""
    return FixedClock()


@pytest.fixture
def ledger() -> FlakyLedger:
    """A ledger with every test account funded."""
    return funded_ledger()


@pytest.fixture
def events() -> RecordingEventSink:
    """An event sink that records swap notifications."""
    return RecordingEventSink()


@pytest.fixture
def config() -> AmmConfig:
    """Default pool behaviour. Override in a test module for legacy modes."""
    return AmmConfig()


@pytest.fixture
def amm(
    ledger: FlakyLedger,
    clock: FixedClock,
    events: RecordingEventSink,
    config: AmmConfig,
) -> AutomatedMarketMaker:
    """An AMM with no pools, wired to the test collaborators."""
    return AutomatedMarketMaker(ledger=ledger, clock=clock, events=events, config=config)


@pytest.fixture
def seeded_amm(amm: AutomatedMarketMaker) -> AutomatedMarketMaker:
    """An AMM whose ETH/USDC pool holds (100, 400) with 200 shares owned by ALICE."""
    amm.add_liquidity((ETH, USDC), 100, 400, 1, 1, ALICE, ALICE, DEADLINE)
    return amm

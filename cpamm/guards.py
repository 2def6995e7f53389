"""Precondition checks shared by the liquidity and swap engines."""

from __future__ import annotations

from cpamm.collaborators import Clock
from cpamm.errors import DeadlineExpired, InvalidAmount


def ensure_deadline(clock: Clock, deadline: int) -> None:
    """Raise DeadlineExpired if the clock has passed the deadline."""
    now = clock.now()
    if now > deadline:
        raise DeadlineExpired(f"Deadline {deadline} passed at {now}")


def ensure_positive(name: str, value: int) -> None:
    """Raise InvalidAmount unless value is a strictly positive int."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an int, got {type(value).__name__}")
    if value <= 0:
        raise InvalidAmount(f"{name} must be positive: {value}")


def ensure_non_negative(name: str, value: int) -> None:
    """Raise InvalidAmount unless value is a non-negative int."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} cannot be negative: {value}")

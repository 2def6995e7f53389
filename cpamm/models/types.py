"""Shared type definitions for AMM models.

These types are used across the pool snapshot and API models.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def validate_amount(value: Any) -> str:
    """Validate that a value is a non-negative integer as a decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid amount as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be string or int, got bool")

    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Amount cannot be negative: {value}")
        return str(value)

    if not isinstance(value, str):
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")

    try:
        int_value = int(value)
    except ValueError as err:
        raise ValueError(f"Amount must be a decimal integer string: '{value}'") from err

    if int_value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")

    return str(int_value)


# Arbitrary-precision non-negative integer as decimal string (validated)
Amount = Annotated[
    str,
    BeforeValidator(validate_amount),
    Field(description="Non-negative integer as decimal string"),
]

# Asset identifier (symbol, contract address, denom, ...)
AssetId = Annotated[str, Field(min_length=1, max_length=128)]


def normalize_asset(asset: str) -> str:
    """Normalize an asset identifier to its lookup form.

    Surrounding whitespace is stripped and the identifier is lowercased so
    that "USDC" and "usdc" address the same reserves.
    """
    return asset.strip().lower()

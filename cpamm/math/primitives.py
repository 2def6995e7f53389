"""Integer primitives for constant-product pools.

All functions are pure. Rounding always favours the pool: outputs round
down, required inputs round up.
"""

from __future__ import annotations

from cpamm.errors import InsufficientLiquidity, InvalidInput, InvalidReserves
from cpamm.safe_int import S


def integer_sqrt(y: int) -> int:
    """Return floor(sqrt(y)) using the Babylonian method.

    Starts from y // 2 + 1 and iterates x = (y // x + x) // 2 while the
    sequence keeps decreasing.

    Raises:
        InvalidInput: If y is negative
    """
    if y < 0:
        raise InvalidInput(f"integer_sqrt of negative value: {y}")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return 0


def min_of(a: int, b: int) -> int:
    return a if a < b else b


def constant_product_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Calculate output amount using the fee-less constant product formula.

    Formula: amount_out = (amount_in * reserve_out) // (reserve_in + amount_in)

    Floor division guarantees
    reserve_in * reserve_out <= (reserve_in + amount_in) * (reserve_out - amount_out).

    Args:
        amount_in: Input asset amount
        reserve_in: Reserve of the input asset
        reserve_out: Reserve of the output asset

    Returns:
        Output asset amount

    Raises:
        InvalidInput: If amount_in <= 0
        InvalidReserves: If either reserve <= 0
    """
    if amount_in <= 0:
        raise InvalidInput(f"amount_in must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InvalidReserves(f"Reserves must be positive: ({reserve_in}, {reserve_out})")

    numerator = S(amount_in) * S(reserve_out)
    denominator = S(reserve_in) + S(amount_in)
    return (numerator // denominator).value


def constant_product_in(amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """Calculate the input required for an exact output.

    Formula: amount_in = ceil(reserve_in * amount_out / (reserve_out - amount_out))

    Raises:
        InvalidInput: If amount_out <= 0
        InvalidReserves: If either reserve <= 0
        InsufficientLiquidity: If amount_out would drain the output reserve
    """
    if amount_out <= 0:
        raise InvalidInput(f"amount_out must be positive: {amount_out}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InvalidReserves(f"Reserves must be positive: ({reserve_in}, {reserve_out})")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(f"Cannot take {amount_out} from reserve of {reserve_out}")

    numerator = S(reserve_in) * S(amount_out)
    denominator = S(reserve_out) - S(amount_out)
    return numerator.ceiling_div(denominator).value


def quote_proportional(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B worth amount_a of A at the current reserve ratio (floor).

    Raises:
        InvalidInput: If amount_a <= 0
        InvalidReserves: If either reserve <= 0
    """
    if amount_a <= 0:
        raise InvalidInput(f"amount must be positive: {amount_a}")
    if reserve_a <= 0 or reserve_b <= 0:
        raise InvalidReserves(f"Reserves must be positive: ({reserve_a}, {reserve_b})")
    return (S(amount_a) * S(reserve_b) // S(reserve_a)).value

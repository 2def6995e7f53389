"""Integer math for constant-product pools."""

from cpamm.math.primitives import (
    constant_product_in,
    constant_product_out,
    integer_sqrt,
    min_of,
    quote_proportional,
)

__all__ = [
    "integer_sqrt",
    "min_of",
    "constant_product_out",
    "constant_product_in",
    "quote_proportional",
]

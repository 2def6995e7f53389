"""HTTP API for the AMM."""

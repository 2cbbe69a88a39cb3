"""Domain events emitted around remote API calls."""

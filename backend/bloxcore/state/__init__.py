"""Default state, state validation and immutable-update helpers."""

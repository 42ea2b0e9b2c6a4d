"""Built-in reducer implementations."""

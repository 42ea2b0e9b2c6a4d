"""Built-in effect implementations."""

"""Built-in selector implementations."""

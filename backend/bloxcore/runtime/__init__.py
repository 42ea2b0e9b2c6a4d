"""Dispatch pipeline, state store, effect executor and logger adapters."""

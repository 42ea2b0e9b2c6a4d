"""Declarative definitions, wire actions and payload models."""

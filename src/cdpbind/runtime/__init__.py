"""Runtime layer: what generated bindings import.

This layer depends on stdlib and pydantic only.
It must never import from schema, compiler, services, commands, or config.
"""

"""Schema layer: the protocol schema as plain data, plus pure helpers over it.

This layer depends only on stdlib and pydantic.
It must never import from compiler, runtime, services, commands, or config.
"""
